"""Property lifecycle business logic.

Covers the approval state machine, availability bookkeeping and all
writes to units. Other modules reach units only through the
``assign_unit``/``release_unit`` and ``claim_slot``/``release_slot``
helpers, which leave authorization and the commit to their caller.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import ColumnElement, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ...core.logging import get_logger
from ...core.notifications import NotificationCategory, Notifier, dispatch_safely
from ...core.utils import to_money, utc_now
from ..auth import crud as auth_crud
from ..auth.models import AGENT_ROLES, UserRole
from ..auth.schemas import AuthenticatedUser
from ..commons import PaginationParams, SortDirection
from ..hierarchy import (
    authorize_action,
    ensure_authorized,
    resolve_company_owners,
    resolve_visible_owners,
)
from ..tenant_management import crud as tenant_crud
from . import crud
from .models import (
    LAND_TYPES,
    ApprovalStatus,
    Property,
    PropertyAvailability,
    PropertyType,
    Unit,
    UnitAvailability,
)
from .schemas import (
    PropertyCreate,
    PropertyUpdate,
    UnitCreate,
    UnitStats,
    UnitUpdate,
)

logger = get_logger("properties")

CREATOR_ROLES = frozenset({UserRole.AGENT, UserRole.EMPLOYEE, UserRole.ADMIN})
APPROVER_ROLES = frozenset({UserRole.AGENT, UserRole.ADMIN})
ADMIN_ONLY_FIELDS = frozenset({"agent_id", "approval_status", "rejection_reason"})
SORTABLE_FIELDS = {
    "created_at": Property.created_at,
    "rent": Property.rent,
    "price": Property.price,
    "views": Property.views,
}


# ----- Helpers -----


def _validate_pricing(
    property_type: PropertyType,
    rent: Decimal | None,
    price: Decimal | None,
    has_units: bool,
) -> None:
    """Land listings need a price; everything else needs a monthly rent
    unless the units carry their own rent."""
    if property_type in LAND_TYPES:
        if price is None:
            raise ValidationError("Price is required for land properties", field="price")
    elif rent is None and not has_units:
        raise ValidationError("Monthly rent is required", field="rent")


async def _get_property_or_404(db: AsyncSession, property_id: int) -> Property:
    property_obj = await crud.get_property_by_id(db, property_id)
    if not property_obj:
        raise NotFoundError(f"Property with ID {property_id} not found")
    return property_obj


async def _resolve_agent_id(
    db: AsyncSession, actor: AuthenticatedUser, requested: int | None
) -> int:
    """Owner of a new property.

    Employees list on behalf of the agent that created them. Only an
    admin may name an arbitrary agent.
    """
    if actor.role == UserRole.EMPLOYEE:
        default = actor.created_by_id or actor.id
    else:
        default = actor.id

    if requested is None or requested == default:
        return default

    if not actor.is_admin:
        raise AuthorizationError(
            "Only administrators can assign a property to another agent"
        )

    agent = await auth_crud.get_user_by_id(db, requested)
    if not agent or agent.role not in AGENT_ROLES:
        raise ValidationError("Assigned agent must be an agent or landlord", field="agent_id")
    return requested


def _apply_unit_rollup(property_obj: Property) -> None:
    """Derive availability and counters of a multi-unit property from its units."""
    units = property_obj.units
    occupied = sum(1 for u in units if u.availability == UnitAvailability.OCCUPIED)
    maintenance = sum(
        1 for u in units if u.availability == UnitAvailability.MAINTENANCE
    )

    property_obj.max_occupancy = len(units)
    property_obj.current_occupancy = occupied

    if units and occupied == len(units):
        property_obj.availability = PropertyAvailability.OCCUPIED
    elif units and maintenance == len(units):
        property_obj.availability = PropertyAvailability.MAINTENANCE
    else:
        property_obj.availability = PropertyAvailability.AVAILABLE


def _check_unit_numbers(existing: list[Unit], new_numbers: list[str]) -> None:
    seen = {u.unit_number for u in existing}
    for number in new_numbers:
        if number in seen:
            raise ValidationError(
                f"Unit number '{number}' already exists", field="unit_number"
            )
        seen.add(number)


def _build_unit(data: UnitCreate) -> Unit:
    return Unit(
        unit_number=data.unit_number,
        floor=data.floor,
        bedrooms=data.bedrooms,
        bathrooms=data.bathrooms,
        area=data.area,
        rent=data.rent,
        deposit=data.deposit,
        furnished=data.furnished,
        features=list(data.features),
        notes=data.notes,
        availability=data.availability,
    )


async def _paginate(
    db: AsyncSession,
    filters: list[ColumnElement[bool]],
    pagination: PaginationParams,
) -> tuple[list[Property], int]:
    column = SORTABLE_FIELDS.get(pagination.sort_field or "created_at")
    if column is None:
        raise ValidationError(
            f"Cannot sort by '{pagination.sort_field}'. "
            f"Allowed: {', '.join(SORTABLE_FIELDS)}",
            field="sort_field",
        )
    order = column.asc() if pagination.sort_direction == SortDirection.ASC else column.desc()
    return await crud.get_properties(
        db,
        filters=filters,
        skip=pagination.offset,
        limit=pagination.page_size,
        order_by=order,
    )


# ----- Approval lifecycle -----


async def create_property(
    db: AsyncSession, actor: AuthenticatedUser, data: PropertyCreate
) -> Property:
    """Create a property.

    Employee listings start pending; agent and admin listings are approved
    immediately by their creator.

    Args:
        db: Database session
        actor: Creating user
        data: Property data, optionally with initial units

    Returns:
        Created Property

    Raises:
        AuthorizationError: If the actor may not list properties
        ValidationError: If the pricing field for the property type is missing
    """
    if actor.role not in CREATOR_ROLES:
        raise AuthorizationError("Only agents, employees and admins can list properties")

    _validate_pricing(data.property_type, data.rent, data.price, data.has_units)
    if data.has_units and data.property_type in LAND_TYPES:
        raise ValidationError("Land properties cannot have units", field="has_units")
    _check_unit_numbers([], [u.unit_number for u in data.units])

    agent_id = await _resolve_agent_id(db, actor, data.agent_id)

    fields = data.model_dump(exclude={"agent_id", "units"})
    if actor.role == UserRole.EMPLOYEE:
        approval = {"approval_status": ApprovalStatus.PENDING}
    else:
        approval = {
            "approval_status": ApprovalStatus.APPROVED,
            "approved_by_id": actor.id,
            "approved_at": utc_now(),
        }

    property_obj = await crud.create_property(
        db,
        **fields,
        **approval,
        agent_id=agent_id,
        created_by_id=actor.id,
        created_by_role=actor.role,
        availability=PropertyAvailability.AVAILABLE,
        current_occupancy=0,
        units=[_build_unit(u) for u in data.units],
    )

    if property_obj.has_units:
        _apply_unit_rollup(property_obj)
        await db.flush()

    await db.commit()

    logger.info(
        "Property created",
        extra={
            "property_id": property_obj.id,
            "agent_id": agent_id,
            "approval_status": property_obj.approval_status.value,
        },
    )
    return await crud.get_property_by_id(db, property_obj.id, refresh=True)


async def approve_property(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    notifier: Notifier,
) -> Property:
    """Approve a pending property.

    Raises:
        AuthorizationError: If the actor is not an agent/admin in scope
        NotFoundError: If the property does not exist
        ConflictError: If the property is not pending
    """
    if actor.role not in APPROVER_ROLES:
        raise AuthorizationError("Only agents and admins can approve properties")

    property_obj = await _get_property_or_404(db, property_id)
    await ensure_authorized(
        db, actor, property_obj, "You can only approve properties in your company"
    )

    if not await crud.mark_approved(db, property_id, actor.id, utc_now()):
        current = await crud.get_property_by_id(db, property_id, refresh=True)
        if current.approval_status == ApprovalStatus.APPROVED:
            raise ConflictError("Property is already approved")
        raise ConflictError(
            f"Property is {current.approval_status.value} and cannot be approved"
        )

    await db.commit()
    property_obj = await crud.get_property_by_id(db, property_id, refresh=True)

    logger.info(
        "Property approved",
        extra={"property_id": property_id, "approved_by": actor.id},
    )
    await dispatch_safely(
        notifier.notify(
            property_obj.created_by_id,
            "Property approved",
            f'Your property "{property_obj.title}" has been approved and is now live.',
            NotificationCategory.PROPERTY,
            link=f"/properties/{property_id}",
        ),
        "property_approved",
    )
    return property_obj


async def reject_property(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    reason: str | None,
    notifier: Notifier,
) -> Property:
    """Reject a pending property with a mandatory reason.

    Raises:
        AuthorizationError: If the actor is not an agent/admin in scope
        NotFoundError: If the property does not exist
        ValidationError: If the reason is missing
        ConflictError: If the property is not pending
    """
    if actor.role not in APPROVER_ROLES:
        raise AuthorizationError("Only agents and admins can reject properties")

    property_obj = await _get_property_or_404(db, property_id)
    await ensure_authorized(
        db, actor, property_obj, "You can only reject properties in your company"
    )

    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("Rejection reason is required", field="reason")

    if not await crud.mark_rejected(db, property_id, reason):
        current = await crud.get_property_by_id(db, property_id, refresh=True)
        raise ConflictError(
            f"Property is already {current.approval_status.value} and cannot be rejected"
        )

    await db.commit()
    property_obj = await crud.get_property_by_id(db, property_id, refresh=True)

    logger.info(
        "Property rejected",
        extra={"property_id": property_id, "rejected_by": actor.id},
    )
    await dispatch_safely(
        notifier.notify(
            property_obj.created_by_id,
            "Property rejected",
            f'Your property "{property_obj.title}" was rejected. Reason: {reason}',
            NotificationCategory.PROPERTY,
            link=f"/properties/{property_id}",
        ),
        "property_rejected",
    )
    return property_obj


async def update_property(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    data: PropertyUpdate,
) -> Property:
    """Update a property.

    Approval and ownership fields are dropped unless the actor is an
    admin. An employee editing an approved property sends it back to
    pending.

    Raises:
        NotFoundError: If the property does not exist
        AuthorizationError: If the property is outside the actor's scope
        ValidationError: If the merged pricing is incomplete
        ConflictError: If the edit contradicts current occupancy
    """
    property_obj = await _get_property_or_404(db, property_id)
    await ensure_authorized(
        db, actor, property_obj, "You can only edit properties in your company"
    )

    patch = data.model_dump(exclude_unset=True)
    if not actor.is_admin:
        stripped = ADMIN_ONLY_FIELDS & patch.keys()
        for key in stripped:
            patch.pop(key)
        if stripped:
            logger.debug(
                "Ignored admin-only fields",
                extra={"property_id": property_id, "fields": sorted(stripped)},
            )

    if "availability" in patch:
        target = patch["availability"]
        if target == PropertyAvailability.OCCUPIED:
            raise ValidationError(
                "Occupancy is managed through tenant onboarding", field="availability"
            )
        if property_obj.has_units:
            raise ConflictError("Availability of a multi-unit property follows its units")
        if property_obj.current_occupancy > 0:
            raise ConflictError("Property has active occupants")

    if patch.get("has_units") is False and property_obj.units:
        raise ConflictError("Remove all units before disabling multi-unit mode")

    if "max_occupancy" in patch and not property_obj.has_units:
        if patch["max_occupancy"] < property_obj.current_occupancy:
            raise ConflictError(
                "Maximum occupancy cannot be lower than the current occupancy"
            )

    _validate_pricing(
        patch.get("property_type", property_obj.property_type),
        patch.get("rent", property_obj.rent),
        patch.get("price", property_obj.price),
        patch.get("has_units", property_obj.has_units),
    )

    if "agent_id" in patch:
        agent_id = patch.pop("agent_id")
        if agent_id is not None and agent_id != property_obj.agent_id:
            property_obj.agent_id = await _resolve_agent_id(db, actor, agent_id)

    was_approved = property_obj.approval_status == ApprovalStatus.APPROVED
    new_status = patch.pop("approval_status", None)

    for key, value in patch.items():
        setattr(property_obj, key, value)

    if new_status is not None and new_status != property_obj.approval_status:
        property_obj.approval_status = new_status
        if new_status == ApprovalStatus.APPROVED:
            property_obj.approved_by_id = actor.id
            property_obj.approved_at = utc_now()
            property_obj.rejection_reason = None
        else:
            property_obj.approved_by_id = None
            property_obj.approved_at = None
    elif actor.role == UserRole.EMPLOYEE and was_approved:
        property_obj.approval_status = ApprovalStatus.PENDING
        property_obj.approved_by_id = None
        property_obj.approved_at = None
        logger.info(
            "Property returned to pending after employee edit",
            extra={"property_id": property_id},
        )

    if property_obj.has_units:
        _apply_unit_rollup(property_obj)
    elif "max_occupancy" in patch:
        property_obj.availability = (
            PropertyAvailability.OCCUPIED
            if property_obj.current_occupancy >= property_obj.max_occupancy
            else PropertyAvailability.AVAILABLE
        )

    await db.flush()
    await db.commit()

    logger.info("Property updated", extra={"property_id": property_id})
    return await crud.get_property_by_id(db, property_id, refresh=True)


async def delete_property(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int
) -> None:
    """Delete a property that has no occupancy.

    Raises:
        AuthorizationError: If the actor is not an agent/admin in scope
        NotFoundError: If the property does not exist
        ConflictError: If the property or any of its units is occupied, or
            an active tenancy still references it
    """
    if actor.role not in APPROVER_ROLES:
        raise AuthorizationError("Only agents and admins can delete properties")

    property_obj = await _get_property_or_404(db, property_id)
    await ensure_authorized(
        db, actor, property_obj, "You can only delete properties in your company"
    )

    occupied_units = any(
        u.availability == UnitAvailability.OCCUPIED for u in property_obj.units
    )
    if (
        property_obj.availability == PropertyAvailability.OCCUPIED
        or property_obj.current_occupancy > 0
        or occupied_units
    ):
        raise ConflictError("Cannot delete an occupied property")
    # A vacated unit does not end the tenancy that held it
    if await tenant_crud.count_active_for_property(db, property_id):
        raise ConflictError("Cannot delete a property with active tenants")

    await db.delete(property_obj)
    await db.commit()

    logger.info("Property deleted", extra={"property_id": property_id})


# ----- Reads -----


async def get_property_for_viewer(
    db: AsyncSession, viewer: AuthenticatedUser | None, property_id: int
) -> Property:
    """Fetch a property as seen by ``viewer``.

    Approved listings are public and count a view. Anything else is only
    visible to actors in scope and reads as missing to everyone else.
    """
    property_obj = await _get_property_or_404(db, property_id)

    if viewer is not None and await authorize_action(db, viewer, property_obj):
        return property_obj

    if property_obj.approval_status != ApprovalStatus.APPROVED:
        raise NotFoundError(f"Property with ID {property_id} not found")

    await crud.increment_views(db, property_id)
    await db.commit()
    return await crud.get_property_by_id(db, property_id, refresh=True)


async def browse_properties(
    db: AsyncSession,
    viewer: AuthenticatedUser | None,
    pagination: PaginationParams,
    property_type: PropertyType | None = None,
    city: str | None = None,
    availability: PropertyAvailability | None = None,
    min_rent: Decimal | None = None,
    max_rent: Decimal | None = None,
    bedrooms: int | None = None,
    search: str | None = None,
    approval_status: ApprovalStatus | None = None,
) -> tuple[list[Property], int]:
    """Public catalogue. Non-admins only ever see approved listings."""
    filters: list[ColumnElement[bool]] = []
    if viewer is not None and viewer.is_admin:
        if approval_status is not None:
            filters.append(Property.approval_status == approval_status)
    else:
        filters.append(Property.approval_status == ApprovalStatus.APPROVED)

    if property_type is not None:
        filters.append(Property.property_type == property_type)
    if city:
        filters.append(Property.city.ilike(f"%{city}%"))
    if availability is not None:
        filters.append(Property.availability == availability)
    if min_rent is not None:
        filters.append(Property.rent >= min_rent)
    if max_rent is not None:
        filters.append(Property.rent <= max_rent)
    if bedrooms is not None:
        filters.append(Property.bedrooms >= bedrooms)
    if search:
        pattern = f"%{search}%"
        filters.append(
            or_(
                Property.title.ilike(pattern),
                Property.description.ilike(pattern),
                Property.address.ilike(pattern),
                Property.neighborhood.ilike(pattern),
            )
        )

    return await _paginate(db, filters, pagination)


async def list_my_properties(
    db: AsyncSession,
    actor: AuthenticatedUser,
    pagination: PaginationParams,
    approval_status: ApprovalStatus | None = None,
) -> tuple[list[Property], int]:
    """Properties the actor owns or entered personally."""
    filters = [or_(Property.agent_id == actor.id, Property.created_by_id == actor.id)]
    if approval_status is not None:
        filters.append(Property.approval_status == approval_status)
    return await _paginate(db, filters, pagination)


async def list_company_properties(
    db: AsyncSession,
    actor: AuthenticatedUser,
    pagination: PaginationParams,
    approval_status: ApprovalStatus | None = None,
) -> tuple[list[Property], int]:
    """Properties owned or entered by anyone in the actor's company."""
    scope = await resolve_company_owners(db, actor)
    filters = [scope.as_filter(Property.agent_id, Property.created_by_id)]
    if approval_status is not None:
        filters.append(Property.approval_status == approval_status)
    return await _paginate(db, filters, pagination)


async def list_pending_properties(
    db: AsyncSession, actor: AuthenticatedUser, pagination: PaginationParams
) -> tuple[list[Property], int]:
    """Pending properties the actor may approve."""
    if actor.role not in APPROVER_ROLES:
        raise AuthorizationError("Only agents and admins can review pending properties")
    scope = await resolve_visible_owners(db, actor)
    filters = [
        Property.approval_status == ApprovalStatus.PENDING,
        scope.as_filter(Property.agent_id, Property.created_by_id),
    ]
    return await _paginate(db, filters, pagination)


# ----- Units -----


async def add_units(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    units: list[UnitCreate],
) -> Property:
    """Append units and switch the property to multi-unit mode.

    Raises:
        NotFoundError: If the property does not exist
        AuthorizationError: If the property is outside the actor's scope
        ValidationError: For land properties or duplicate unit numbers
    """
    property_obj = await _get_property_or_404(db, property_id)
    await ensure_authorized(
        db, actor, property_obj, "You can only manage units in your company"
    )

    if property_obj.is_land:
        raise ValidationError("Land properties cannot have units", field="has_units")
    if not property_obj.has_units and property_obj.current_occupancy > 0:
        raise ConflictError("Cannot split an occupied property into units")

    _check_unit_numbers(property_obj.units, [u.unit_number for u in units])

    property_obj.has_units = True
    for unit_data in units:
        property_obj.units.append(_build_unit(unit_data))
    _apply_unit_rollup(property_obj)

    await db.flush()
    await db.commit()

    logger.info(
        "Units added",
        extra={"property_id": property_id, "count": len(units)},
    )
    return await crud.get_property_by_id(db, property_id, refresh=True)


async def _get_unit_or_404(db: AsyncSession, property_id: int, unit_id: int) -> Unit:
    unit = await crud.get_unit(db, property_id, unit_id)
    if not unit:
        raise NotFoundError(f"Unit with ID {unit_id} not found")
    return unit


async def update_unit(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    unit_id: int,
    data: UnitUpdate,
) -> Property:
    """Update descriptive unit fields or toggle available/maintenance.

    Raises:
        NotFoundError: If the property or unit does not exist
        AuthorizationError: If the property is outside the actor's scope
        ValidationError: If the patch tries to occupy the unit
        ConflictError: If the patch changes an occupied unit's availability
    """
    property_obj = await _get_property_or_404(db, property_id)
    await ensure_authorized(
        db, actor, property_obj, "You can only manage units in your company"
    )
    unit = await _get_unit_or_404(db, property_id, unit_id)

    patch = data.model_dump(exclude_unset=True)
    if "availability" in patch:
        target = patch["availability"]
        if target == UnitAvailability.OCCUPIED and unit.availability != target:
            raise ValidationError(
                "Use the occupy operation to assign a tenant", field="availability"
            )
        if unit.availability == UnitAvailability.OCCUPIED and target != unit.availability:
            raise ConflictError("Vacate the unit before changing its availability")

    if "unit_number" in patch and patch["unit_number"] != unit.unit_number:
        others = [u for u in property_obj.units if u.id != unit.id]
        _check_unit_numbers(others, [patch["unit_number"]])

    for key, value in patch.items():
        setattr(unit, key, value)
    _apply_unit_rollup(property_obj)

    await db.flush()
    await db.commit()
    return await crud.get_property_by_id(db, property_id, refresh=True)


async def delete_unit(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int, unit_id: int
) -> Property:
    """Remove a vacant unit.

    Raises:
        ConflictError: If the unit is occupied
    """
    property_obj = await _get_property_or_404(db, property_id)
    await ensure_authorized(
        db, actor, property_obj, "You can only manage units in your company"
    )
    unit = await _get_unit_or_404(db, property_id, unit_id)

    if unit.availability == UnitAvailability.OCCUPIED:
        raise ConflictError("Cannot delete an occupied unit")

    property_obj.units.remove(unit)
    _apply_unit_rollup(property_obj)

    await db.flush()
    await db.commit()

    logger.info("Unit deleted", extra={"property_id": property_id, "unit_id": unit_id})
    return await crud.get_property_by_id(db, property_id, refresh=True)


async def assign_unit(
    db: AsyncSession,
    property_obj: Property,
    unit_id: int,
    tenant_id: int,
    lease_start: date,
    lease_end: date,
) -> Property:
    """Occupy a unit with a single conditional update.

    The caller authorizes and commits.

    Raises:
        ValidationError: If the lease window is empty
        NotFoundError: If the unit does not exist
        ConflictError: If the unit is not available
    """
    if lease_end <= lease_start:
        raise ValidationError("Lease end must be after lease start", field="lease_end")

    if not await crud.occupy_unit(
        db, property_obj.id, unit_id, tenant_id, lease_start, lease_end
    ):
        await _get_unit_or_404(db, property_obj.id, unit_id)
        raise ConflictError("Unit is not available")

    property_obj = await crud.get_property_by_id(db, property_obj.id, refresh=True)
    _apply_unit_rollup(property_obj)
    await db.flush()

    logger.info(
        "Unit occupied",
        extra={"property_id": property_obj.id, "unit_id": unit_id, "tenant_id": tenant_id},
    )
    return property_obj


async def release_unit(db: AsyncSession, property_obj: Property, unit_id: int) -> Property:
    """Vacate a unit; repeating it is harmless. The caller commits."""
    if not await crud.vacate_unit(db, property_obj.id, unit_id):
        raise NotFoundError(f"Unit with ID {unit_id} not found")

    property_obj = await crud.get_property_by_id(db, property_obj.id, refresh=True)
    _apply_unit_rollup(property_obj)
    await db.flush()

    logger.info("Unit vacated", extra={"property_id": property_obj.id, "unit_id": unit_id})
    return property_obj


async def claim_slot(db: AsyncSession, property_obj: Property) -> Property:
    """Take one occupancy slot of a single-unit property. The caller commits.

    Raises:
        ConflictError: If the property is not available or already full
    """
    if not await crud.claim_occupancy_slot(db, property_obj.id):
        raise ConflictError("Property is not available")
    return await crud.get_property_by_id(db, property_obj.id, refresh=True)


async def release_slot(db: AsyncSession, property_obj: Property) -> Property:
    """Return one occupancy slot and reopen the property. The caller commits."""
    await crud.release_occupancy_slot(db, property_obj.id)
    return await crud.get_property_by_id(db, property_obj.id, refresh=True)


async def occupy_unit(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_id: int,
    unit_id: int,
    tenant_id: int,
    lease_start: date,
    lease_end: date,
) -> Property:
    """Occupy a unit on behalf of an actor in scope.

    Raises:
        NotFoundError: If the property, unit or tenant user does not exist
        AuthorizationError: If the property is outside the actor's scope
        ConflictError: If the unit is not available
    """
    property_obj = await _get_property_or_404(db, property_id)
    await ensure_authorized(
        db, actor, property_obj, "You can only manage units in your company"
    )
    if not await auth_crud.get_user_by_id(db, tenant_id):
        raise NotFoundError(f"User with ID {tenant_id} not found")

    property_obj = await assign_unit(
        db, property_obj, unit_id, tenant_id, lease_start, lease_end
    )
    await db.commit()
    return property_obj


async def vacate_unit(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int, unit_id: int
) -> Property:
    """Vacate a unit on behalf of an actor in scope."""
    property_obj = await _get_property_or_404(db, property_id)
    await ensure_authorized(
        db, actor, property_obj, "You can only manage units in your company"
    )
    property_obj = await release_unit(db, property_obj, unit_id)
    await db.commit()
    return property_obj


async def get_unit_stats(
    db: AsyncSession, actor: AuthenticatedUser, property_id: int
) -> UnitStats:
    """Occupancy and rent rollup over a property's units."""
    property_obj = await _get_property_or_404(db, property_id)
    await ensure_authorized(
        db, actor, property_obj, "You can only view statistics in your company"
    )

    units = property_obj.units
    occupied = [u for u in units if u.availability == UnitAvailability.OCCUPIED]
    total = len(units)

    return UnitStats(
        property_id=property_id,
        total_units=total,
        available=sum(1 for u in units if u.availability == UnitAvailability.AVAILABLE),
        occupied=len(occupied),
        maintenance=sum(
            1 for u in units if u.availability == UnitAvailability.MAINTENANCE
        ),
        occupancy_rate=round(len(occupied) / total * 100, 2) if total else 0.0,
        monthly_rent_collected=float(sum((to_money(u.rent) for u in occupied), Decimal("0"))),
        potential_monthly_rent=float(sum((to_money(u.rent) for u in units), Decimal("0"))),
    )
