"""Hierarchy and billing rollups.

Read-only: nothing here writes to the database. Company membership is
always taken from the hierarchy resolver.
"""

import calendar
from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ...core.logging import get_logger
from ...core.utils import to_money, utc_today
from ..auth import crud as auth_crud
from ..auth.models import AGENT_ROLES, User, UserRole
from ..auth.schemas import AuthenticatedUser, EmployeePermissions, UserSummary
from ..hierarchy import resolve_employee_ids, resolve_visible_owners
from . import crud
from .schemas import (
    AgentDetails,
    AgentDetailStats,
    AgentHierarchy,
    AgentHierarchyEntry,
    AgentStats,
    BillingRow,
    BillingSummary,
    EmployeeBreakdown,
    EmployeeStats,
    MonthlyRevenue,
    PlatformSummary,
)

logger = get_logger("reporting")


async def _company_employees(db: AsyncSession, agent_id: int) -> list[User]:
    employee_ids = await resolve_employee_ids(db, agent_id)
    return await auth_crud.get_users_by_ids(db, sorted(employee_ids))


async def _get_agent_or_404(db: AsyncSession, agent_id: int) -> User:
    agent = await auth_crud.get_user_by_id(db, agent_id)
    if not agent or agent.role not in AGENT_ROLES:
        raise NotFoundError(f"Agent with ID {agent_id} not found")
    return agent


def platform_fee(total_collected: Decimal, commission_rate: Decimal) -> Decimal:
    """Flat commission on collected revenue, rounded half-up to cents."""
    return (total_collected * commission_rate).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )


def default_billing_period(today: date) -> tuple[date, date]:
    """First and last day of the month containing ``today``."""
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


# ----- Hierarchy -----


async def get_agent_hierarchy(db: AsyncSession) -> AgentHierarchy:
    """Platform-wide rollup of every active agent and landlord."""
    entries: list[AgentHierarchyEntry] = []

    for agent in await crud.get_agents(db):
        scope = await resolve_visible_owners(db, agent)
        employees = await _company_employees(db, agent.id)
        revenue, payment_count = await crud.get_collected(db, agent.id)

        breakdown = []
        for employee in employees:
            _, recorded = await crud.get_recorded_payments(db, employee.id)
            breakdown.append(
                EmployeeBreakdown(
                    employee=UserSummary.model_validate(employee),
                    tenants_created=await crud.count_tenants_created_by(db, employee.id),
                    payments_recorded=recorded,
                )
            )

        entries.append(
            AgentHierarchyEntry(
                agent=UserSummary.model_validate(agent),
                stats=AgentStats(
                    total_employees=len(employees),
                    total_properties=await crud.count_properties(db, scope),
                    total_tenants=await crud.count_active_tenants(db, scope),
                    total_revenue=float(revenue),
                    total_payments=payment_count,
                ),
                employees=breakdown,
            )
        )

    total_revenue = sum((to_money(e.stats.total_revenue) for e in entries), Decimal("0"))
    return AgentHierarchy(
        agents=entries,
        summary=PlatformSummary(
            total_agents=len(entries),
            total_employees=sum(e.stats.total_employees for e in entries),
            total_properties=sum(e.stats.total_properties for e in entries),
            total_tenants=sum(e.stats.total_tenants for e in entries),
            total_revenue=float(total_revenue),
        ),
    )


async def get_agent_details(
    db: AsyncSession, actor: AuthenticatedUser, agent_id: int
) -> AgentDetails:
    """One agent's company with occupancy and this year's monthly revenue.

    Raises:
        AuthorizationError: Unless the actor is an admin or the agent itself
        NotFoundError: If no agent/landlord has this ID
    """
    if not actor.is_admin and actor.id != agent_id:
        raise AuthorizationError("You can only view your own company")

    agent = await _get_agent_or_404(db, agent_id)
    employees = await _company_employees(db, agent_id)
    scope = await resolve_visible_owners(db, agent)
    current, capacity, active_properties = await crud.get_occupancy_totals(db, scope)

    today = utc_today()
    by_month: dict[int, list[Decimal]] = defaultdict(list)
    for paid_date, amount in await crud.get_paid_amounts(
        db, agent_id, date(today.year, 1, 1), today
    ):
        by_month[paid_date.month].append(amount)

    return AgentDetails(
        agent=UserSummary.model_validate(agent),
        employees=[UserSummary.model_validate(e) for e in employees],
        stats=AgentDetailStats(
            total_employees=len(employees),
            total_properties=await crud.count_properties(db, scope),
            total_tenants=await crud.count_active_tenants(db, scope),
            active_properties=active_properties,
            occupancy_rate=round(current / capacity * 100, 2) if capacity else 0.0,
        ),
        year=today.year,
        monthly_revenue=[
            MonthlyRevenue(
                month=month,
                total=float(sum(amounts, Decimal("0"))),
                count=len(amounts),
            )
            for month, amounts in sorted(by_month.items())
        ],
    )


async def get_employee_stats(
    db: AsyncSession, actor: AuthenticatedUser, employee_id: int
) -> EmployeeStats:
    """Onboarding and payment activity of one employee.

    Raises:
        NotFoundError: If no employee has this ID
        AuthorizationError: Unless the actor is an admin or the employee's agent
    """
    employee = await auth_crud.get_user_by_id(db, employee_id)
    if not employee or employee.role != UserRole.EMPLOYEE:
        raise NotFoundError(f"Employee with ID {employee_id} not found")

    if not actor.is_admin:
        if actor.role not in AGENT_ROLES or employee_id not in await resolve_employee_ids(
            db, actor.id
        ):
            raise AuthorizationError("You can only view your own employees")

    amount, recorded = await crud.get_recorded_payments(
        db, employee_id, agent_id=employee.created_by_id
    )
    return EmployeeStats(
        employee=UserSummary.model_validate(employee),
        permissions=EmployeePermissions(**employee.permissions),
        tenants_created=await crud.count_tenants_created_by(db, employee_id),
        payments_recorded=recorded,
        total_payments_amount=float(amount),
    )


# ----- Billing -----


async def _billing_row(
    db: AsyncSession, agent: User, start: date, end: date, rate: Decimal
) -> BillingRow:
    collected, _ = await crud.get_collected(db, agent.id, start, end)
    scope = await resolve_visible_owners(db, agent)
    return BillingRow(
        agent=UserSummary.model_validate(agent),
        employees=len(scope.employee_ids),
        properties=await crud.count_properties(db, scope),
        tenants=await crud.count_active_tenants(db, scope),
        total_collected=float(collected),
        commission_rate=float(rate),
        platform_fee=float(platform_fee(collected, rate)),
    )


async def get_billing_summary(
    db: AsyncSession,
    actor: AuthenticatedUser,
    start: date | None = None,
    end: date | None = None,
) -> BillingSummary:
    """Platform commission owed per agent for a date range.

    Admins get one row per active agent/landlord; an agent or landlord
    gets its own row. The range defaults to the current calendar month.

    Raises:
        AuthorizationError: For any other role
        ValidationError: If ``start`` is after ``end``
    """
    if not actor.is_admin and actor.role not in AGENT_ROLES:
        raise AuthorizationError("Only admins, agents and landlords can view billing")

    default_start, default_end = default_billing_period(utc_today())
    start = start or default_start
    end = end or default_end
    if start > end:
        raise ValidationError("Start date must not be after end date", field="start")

    rate = settings.platform_commission_rate
    if actor.is_admin:
        agents = await crud.get_agents(db)
    else:
        agents = [await _get_agent_or_404(db, actor.id)]

    rows = [await _billing_row(db, agent, start, end, rate) for agent in agents]
    total_collected = sum((to_money(r.total_collected) for r in rows), Decimal("0"))
    total_fee = sum((to_money(r.platform_fee) for r in rows), Decimal("0"))

    logger.info(
        "Billing summary computed",
        extra={
            "start": start.isoformat(),
            "end": end.isoformat(),
            "agents": len(rows),
            "total_platform_fee": str(total_fee),
        },
    )
    return BillingSummary(
        start=start,
        end=end,
        commission_rate=float(rate),
        rows=rows,
        total_agents=len(rows),
        total_collected=float(total_collected),
        total_platform_fee=float(total_fee),
    )
