"""Read-only aggregate queries for reporting."""

from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.utils import to_money
from ..auth.models import AGENT_ROLES, User
from ..hierarchy import HierarchyScope
from ..property_management.models import Property, PropertyAvailability
from ..tenant_management.models import TenancyStatus, Tenant
from .models import Payment, PaymentStatus


async def get_agents(db: AsyncSession, active_only: bool = True) -> list[User]:
    """All agent and landlord accounts, newest first."""
    query = select(User).where(User.role.in_(AGENT_ROLES))
    if active_only:
        query = query.where(User.is_active.is_(True))
    result = await db.execute(query.order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


def _property_scope(scope: HierarchyScope):
    return scope.as_filter(Property.agent_id, Property.created_by_id)


async def count_properties(db: AsyncSession, scope: HierarchyScope) -> int:
    """Properties owned or entered by anyone in the scope."""
    result = await db.execute(
        select(func.count(Property.id)).where(_property_scope(scope))
    )
    return result.scalar() or 0


async def count_active_tenants(db: AsyncSession, scope: HierarchyScope) -> int:
    result = await db.execute(
        select(func.count(Tenant.id)).where(
            scope.as_filter(Tenant.agent_id, Tenant.created_by_id),
            Tenant.status == TenancyStatus.ACTIVE,
        )
    )
    return result.scalar() or 0


async def count_tenants_created_by(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.count(Tenant.id)).where(Tenant.created_by_id == user_id)
    )
    return result.scalar() or 0


async def get_occupancy_totals(
    db: AsyncSession, scope: HierarchyScope
) -> tuple[int, int, int]:
    """Current occupancy, capacity and in-service property count of a company."""
    result = await db.execute(
        select(
            func.coalesce(func.sum(Property.current_occupancy), 0),
            func.coalesce(func.sum(Property.max_occupancy), 0),
        ).where(_property_scope(scope))
    )
    current, capacity = result.one()

    active_result = await db.execute(
        select(func.count(Property.id)).where(
            _property_scope(scope),
            Property.availability.in_(
                [PropertyAvailability.AVAILABLE, PropertyAvailability.OCCUPIED]
            ),
        )
    )
    return int(current), int(capacity), active_result.scalar() or 0


async def get_collected(
    db: AsyncSession,
    agent_id: int,
    start: date | None = None,
    end: date | None = None,
) -> tuple[Decimal, int]:
    """Sum and count of paid payments of an agent, optionally by paid date."""
    filters = [Payment.agent_id == agent_id, Payment.status == PaymentStatus.PAID]
    if start is not None:
        filters.append(Payment.paid_date >= start)
    if end is not None:
        filters.append(Payment.paid_date <= end)

    result = await db.execute(
        select(
            func.coalesce(func.sum(Payment.amount), 0), func.count(Payment.id)
        ).where(*filters)
    )
    total, count = result.one()
    return to_money(total), count


async def get_paid_amounts(
    db: AsyncSession, agent_id: int, start: date, end: date
) -> list[tuple[date, Decimal]]:
    """(paid date, amount) of every paid payment of an agent in a window."""
    result = await db.execute(
        select(Payment.paid_date, Payment.amount)
        .where(
            Payment.agent_id == agent_id,
            Payment.status == PaymentStatus.PAID,
            Payment.paid_date >= start,
            Payment.paid_date <= end,
        )
        .order_by(Payment.paid_date)
    )
    return [(paid_date, to_money(amount)) for paid_date, amount in result.all()]


async def get_recorded_payments(
    db: AsyncSession, user_id: int, agent_id: int | None = None
) -> tuple[Decimal, int]:
    """Sum and count of payments recorded by a user."""
    filters = [Payment.recorded_by_id == user_id]
    if agent_id is not None:
        filters.append(Payment.agent_id == agent_id)
    result = await db.execute(
        select(
            func.coalesce(func.sum(Payment.amount), 0), func.count(Payment.id)
        ).where(*filters)
    )
    total, count = result.one()
    return to_money(total), count
