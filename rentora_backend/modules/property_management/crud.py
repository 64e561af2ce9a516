"""CRUD operations for property management module.

Occupancy and approval transitions are single conditional UPDATE
statements; a ``False`` return means the row was not in the expected
state when the statement ran.
"""

from datetime import date, datetime

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .models import (
    ApprovalStatus,
    Property,
    PropertyAvailability,
    Unit,
    UnitAvailability,
)

# ----- Property CRUD -----


async def get_property_by_id(
    db: AsyncSession, property_id: int, refresh: bool = False
) -> Property | None:
    """Get a property with its units.

    ``refresh`` reloads the row and its units even if they are already in
    the session, which is needed after a conditional UPDATE.
    """
    query = (
        select(Property)
        .options(selectinload(Property.units))
        .where(Property.id == property_id)
    )
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_properties(
    db: AsyncSession,
    filters: list[ColumnElement[bool]],
    skip: int = 0,
    limit: int = 100,
    order_by=None,
) -> tuple[list[Property], int]:
    """Get properties matching all ``filters`` with a total count."""
    count_result = await db.execute(select(func.count(Property.id)).where(*filters))
    total = count_result.scalar() or 0

    query = (
        select(Property)
        .options(selectinload(Property.units))
        .where(*filters)
        .order_by(order_by if order_by is not None else Property.created_at.desc())
        .order_by(Property.id.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def create_property(db: AsyncSession, **fields) -> Property:
    """Create a new property."""
    property_obj = Property(**fields)
    db.add(property_obj)
    await db.flush()
    return property_obj


async def increment_views(db: AsyncSession, property_id: int) -> None:
    """Count a public view."""
    await db.execute(
        update(Property)
        .where(Property.id == property_id)
        .values(views=Property.views + 1)
        .execution_options(synchronize_session=False)
    )


async def mark_approved(
    db: AsyncSession, property_id: int, approver_id: int, approved_at: datetime
) -> bool:
    """Transition pending -> approved."""
    result = await db.execute(
        update(Property)
        .where(
            Property.id == property_id,
            Property.approval_status == ApprovalStatus.PENDING,
        )
        .values(
            approval_status=ApprovalStatus.APPROVED,
            approved=True,
            approved_by_id=approver_id,
            approved_at=approved_at,
            rejection_reason=None,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def mark_rejected(db: AsyncSession, property_id: int, reason: str) -> bool:
    """Transition pending -> rejected."""
    result = await db.execute(
        update(Property)
        .where(
            Property.id == property_id,
            Property.approval_status == ApprovalStatus.PENDING,
        )
        .values(
            approval_status=ApprovalStatus.REJECTED,
            approved=False,
            approved_by_id=None,
            approved_at=None,
            rejection_reason=reason,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def claim_occupancy_slot(db: AsyncSession, property_id: int) -> bool:
    """Take one occupancy slot of a single-unit property.

    Succeeds only while the property is available and below capacity;
    flips it to occupied once capacity is reached.
    """
    result = await db.execute(
        update(Property)
        .where(
            Property.id == property_id,
            Property.availability == PropertyAvailability.AVAILABLE,
            Property.current_occupancy < Property.max_occupancy,
        )
        .values(current_occupancy=Property.current_occupancy + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False

    await db.execute(
        update(Property)
        .where(
            Property.id == property_id,
            Property.current_occupancy >= Property.max_occupancy,
        )
        .values(availability=PropertyAvailability.OCCUPIED)
        .execution_options(synchronize_session=False)
    )
    return True


async def release_occupancy_slot(db: AsyncSession, property_id: int) -> bool:
    """Give back one occupancy slot and reopen the property if it was full."""
    result = await db.execute(
        update(Property)
        .where(Property.id == property_id, Property.current_occupancy > 0)
        .values(current_occupancy=Property.current_occupancy - 1)
        .execution_options(synchronize_session=False)
    )
    await db.execute(
        update(Property)
        .where(
            Property.id == property_id,
            Property.availability == PropertyAvailability.OCCUPIED,
            Property.current_occupancy < Property.max_occupancy,
        )
        .values(availability=PropertyAvailability.AVAILABLE)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


# ----- Unit CRUD -----


async def get_unit(db: AsyncSession, property_id: int, unit_id: int) -> Unit | None:
    """Get a unit belonging to a property."""
    result = await db.execute(
        select(Unit).where(Unit.id == unit_id, Unit.property_id == property_id)
    )
    return result.scalar_one_or_none()


async def occupy_unit(
    db: AsyncSession,
    property_id: int,
    unit_id: int,
    tenant_id: int,
    lease_start: date,
    lease_end: date,
) -> bool:
    """Transition available -> occupied."""
    result = await db.execute(
        update(Unit)
        .where(
            Unit.id == unit_id,
            Unit.property_id == property_id,
            Unit.availability == UnitAvailability.AVAILABLE,
        )
        .values(
            availability=UnitAvailability.OCCUPIED,
            tenant_id=tenant_id,
            lease_start=lease_start,
            lease_end=lease_end,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def vacate_unit(db: AsyncSession, property_id: int, unit_id: int) -> bool:
    """Clear the tenant and lease window and make the unit available."""
    result = await db.execute(
        update(Unit)
        .where(Unit.id == unit_id, Unit.property_id == property_id)
        .values(
            availability=UnitAvailability.AVAILABLE,
            tenant_id=None,
            lease_start=None,
            lease_end=None,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
