"""CRUD operations for tenant management module."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Lease, TenancyStatus, Tenant

# ----- Tenant CRUD -----


async def get_tenant_by_id(
    db: AsyncSession, tenant_id: int, refresh: bool = False
) -> Tenant | None:
    """Get a tenant with its user and lease."""
    query = select(Tenant).where(Tenant.id == tenant_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    tenant = result.scalar_one_or_none()
    if tenant is not None and refresh:
        # the lease is written by its own UPDATE statements
        await db.refresh(tenant.lease)
    return tenant


async def get_active_tenant(
    db: AsyncSession, user_id: int, property_id: int
) -> Tenant | None:
    """The active tenancy of a user at a property, if any."""
    result = await db.execute(
        select(Tenant).where(
            Tenant.user_id == user_id,
            Tenant.property_id == property_id,
            Tenant.status == TenancyStatus.ACTIVE,
        )
    )
    return result.scalars().first()


async def get_tenants(
    db: AsyncSession,
    filters: list[ColumnElement[bool]],
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Tenant], int]:
    """Get tenants matching all ``filters`` with a total count."""
    count_result = await db.execute(select(func.count(Tenant.id)).where(*filters))
    total = count_result.scalar() or 0

    result = await db.execute(
        select(Tenant)
        .where(*filters)
        .order_by(Tenant.created_at.desc(), Tenant.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def count_active_for_property(db: AsyncSession, property_id: int) -> int:
    result = await db.execute(
        select(func.count(Tenant.id)).where(
            Tenant.property_id == property_id,
            Tenant.status == TenancyStatus.ACTIVE,
        )
    )
    return result.scalar() or 0


async def count_by_status(
    db: AsyncSession, filters: list[ColumnElement[bool]]
) -> dict[TenancyStatus, int]:
    """Tenant counts per status."""
    result = await db.execute(
        select(Tenant.status, func.count(Tenant.id)).where(*filters).group_by(Tenant.status)
    )
    return {status: count for status, count in result.all()}


async def sum_active_rent(
    db: AsyncSession, filters: list[ColumnElement[bool]]
) -> Decimal:
    """Total monthly rent of active tenancies."""
    result = await db.execute(
        select(func.coalesce(func.sum(Tenant.monthly_rent), 0)).where(
            *filters, Tenant.status == TenancyStatus.ACTIVE
        )
    )
    return Decimal(str(result.scalar() or 0))


async def create_lease(db: AsyncSession, **fields) -> Lease:
    """Create a new lease."""
    lease = Lease(**fields)
    db.add(lease)
    await db.flush()
    return lease


async def create_tenant(db: AsyncSession, **fields) -> Tenant:
    """Create a new tenant record."""
    tenant = Tenant(**fields)
    db.add(tenant)
    await db.flush()
    return tenant


async def update_tenant(db: AsyncSession, tenant: Tenant, **fields) -> Tenant:
    """Apply a patch to a tenant."""
    for key, value in fields.items():
        setattr(tenant, key, value)
    await db.flush()
    return tenant


async def close_tenancy(
    db: AsyncSession,
    tenant_id: int,
    lease_id: int,
    expected: TenancyStatus,
    new_status: TenancyStatus,
    closed_by_id: int | None = None,
    reason: str | None = None,
    closed_at: datetime | None = None,
) -> bool:
    """Move a tenant and its lease from ``expected`` to ``new_status``.

    The tenant row is the guard: if it is no longer in ``expected`` nothing
    changes and ``False`` is returned.
    """
    stamps = {}
    if new_status == TenancyStatus.TERMINATED:
        stamps = {
            "terminated_by_id": closed_by_id,
            "termination_reason": reason,
            "terminated_at": closed_at,
        }

    result = await db.execute(
        update(Tenant)
        .where(Tenant.id == tenant_id, Tenant.status == expected)
        .values(status=new_status, **stamps)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False

    await db.execute(
        update(Lease)
        .where(Lease.id == lease_id, Lease.status == expected)
        .values(status=new_status, **stamps)
        .execution_options(synchronize_session=False)
    )
    return True


# ----- Lease queries -----


async def get_overdue_tenants(db: AsyncSession, today: date) -> list[Tenant]:
    """Active tenancies whose lease ended before ``today``."""
    result = await db.execute(
        select(Tenant)
        .join(Lease, Lease.id == Tenant.lease_id)
        .where(
            Tenant.status == TenancyStatus.ACTIVE,
            Lease.status == TenancyStatus.ACTIVE,
            Lease.end_date < today,
        )
        .order_by(Lease.end_date, Tenant.id)
    )
    return list(result.scalars().all())
