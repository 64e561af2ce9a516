"""Tenant onboarding and tenancy lifecycle business logic.

Onboarding runs as one transaction: resolving or provisioning the tenant
user, claiming occupancy and writing the lease and tenant records either
all commit together or none of them do.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
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
from ..auth import services as auth_services
from ..auth.models import AGENT_ROLES, STAFF_ROLES, User, UserRole
from ..auth.schemas import AuthenticatedUser
from ..commons import PaginationParams
from ..hierarchy import ensure_authorized, resolve_visible_owners
from ..property_management import crud as property_crud
from ..property_management import services as property_services
from ..property_management.models import Property, PropertyAvailability, UnitAvailability
from . import crud
from .models import CLOSED_STATUSES, TenancyStatus, Tenant
from .schemas import TenantCreate, TenantStats, TenantUpdate

logger = get_logger("tenants")

TERMINATOR_ROLES = frozenset({UserRole.ADMIN, *AGENT_ROLES})


# ----- Helpers -----


async def _get_property_or_404(db: AsyncSession, property_id: int) -> Property:
    property_obj = await property_crud.get_property_by_id(db, property_id, refresh=True)
    if not property_obj:
        raise NotFoundError(f"Property with ID {property_id} not found")
    return property_obj


async def _get_tenant_or_404(db: AsyncSession, tenant_id: int) -> Tenant:
    tenant = await crud.get_tenant_by_id(db, tenant_id)
    if not tenant:
        raise NotFoundError(f"Tenant with ID {tenant_id} not found")
    return tenant


async def _tenant_scope_filter(
    db: AsyncSession, actor: AuthenticatedUser
) -> ColumnElement[bool]:
    """Tenants visible to the actor.

    Staff see tenancies whose agent or onboarding user is in scope;
    tenant and seeker accounts see only their own records.
    """
    scope = await resolve_visible_owners(db, actor)
    if actor.role in (UserRole.TENANT, UserRole.SEEKER):
        return scope.as_filter(Tenant.user_id)
    return scope.as_filter(Tenant.agent_id, Tenant.created_by_id)


async def _ensure_can_view(
    db: AsyncSession, actor: AuthenticatedUser, tenant: Tenant
) -> None:
    if actor.role in (UserRole.TENANT, UserRole.SEEKER):
        if tenant.user_id != actor.id:
            raise AuthorizationError("You can only view your own tenancy")
        return
    await ensure_authorized(
        db, actor, tenant, "You can only manage tenants in your company"
    )


async def _resolve_tenant_user(
    db: AsyncSession,
    actor: AuthenticatedUser,
    property_obj: Property,
    data: TenantCreate,
) -> tuple[User, str | None]:
    """Existing seeker/tenant, promoted if needed, or a freshly provisioned one."""
    if data.user_id is not None:
        user = await auth_crud.get_user_by_id(db, data.user_id)
        if not user:
            raise NotFoundError(f"User with ID {data.user_id} not found")
        if user.role == UserRole.SEEKER:
            user.role = UserRole.TENANT
            await db.flush()
            logger.info("Seeker promoted to tenant", extra={"user_id": user.id})
        elif user.role != UserRole.TENANT:
            raise ValidationError(
                f"User with role {user.role.value} cannot become a tenant",
                field="user_id",
            )
        return user, None

    user_data = data.user_data
    return await auth_services.provision_account(
        db,
        actor_id=actor.id,
        email=user_data.email,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        phone=user_data.phone,
        role=UserRole.TENANT,
        parent_user_id=property_obj.agent_id,
    )


def _resolve_rent(property_obj: Property, data: TenantCreate) -> Decimal:
    if data.rent_amount is not None:
        return data.rent_amount

    rent = property_obj.rent
    if property_obj.has_units:
        unit = next((u for u in property_obj.units if u.id == data.unit_id), None)
        if unit is not None:
            rent = unit.rent
    if rent is None:
        raise ValidationError("Monthly rent is required", field="rent_amount")
    return rent


async def _claim_occupancy(
    db: AsyncSession, property_obj: Property, user_id: int, data: TenantCreate
) -> None:
    if property_obj.availability == PropertyAvailability.OCCUPIED:
        raise ConflictError("Property is not available")
    if property_obj.has_units:
        if data.unit_id is None:
            raise ValidationError(
                "A unit is required for multi-unit properties", field="unit_id"
            )
        await property_services.assign_unit(
            db,
            property_obj,
            data.unit_id,
            user_id,
            data.lease_start_date,
            data.lease_end_date,
        )
        return

    if data.unit_id is not None:
        raise ValidationError("Property has no units", field="unit_id")
    await property_services.claim_slot(db, property_obj)


async def _release_occupancy(db: AsyncSession, tenant: Tenant) -> None:
    """Give back the unit or occupancy slot a tenancy holds."""
    property_obj = await property_crud.get_property_by_id(
        db, tenant.property_id, refresh=True
    )
    if property_obj is None:
        return

    if tenant.unit_id is None:
        await property_services.release_slot(db, property_obj)
        return

    unit = next((u for u in property_obj.units if u.id == tenant.unit_id), None)
    if (
        unit is not None
        and unit.availability == UnitAvailability.OCCUPIED
        and unit.tenant_id == tenant.user_id
    ):
        await property_services.release_unit(db, property_obj, tenant.unit_id)


# ----- Onboarding -----


async def create_tenant(
    db: AsyncSession,
    actor: AuthenticatedUser,
    data: TenantCreate,
    notifier: Notifier,
) -> tuple[Tenant, str | None]:
    """Onboard a tenant onto a property or unit.

    Args:
        db: Database session
        actor: Onboarding staff member
        data: Tenant, property and lease terms
        notifier: Outbound notification interface

    Returns:
        Tuple of (Tenant, temporary password of a newly created user or None)

    Raises:
        AuthorizationError: If the actor may not onboard onto the property
        NotFoundError: If the property, unit or user does not exist
        ValidationError: If the user cannot become a tenant or rent is missing
        ConflictError: If the email exists, the tenancy is a duplicate or
            there is no free capacity
    """
    if actor.role not in STAFF_ROLES:
        raise AuthorizationError("Only agents, landlords, employees and admins can add tenants")

    property_obj = await _get_property_or_404(db, data.property_id)
    await ensure_authorized(
        db, actor, property_obj, "You can only add tenants to properties in your company"
    )

    try:
        user, temporary_password = await _resolve_tenant_user(
            db, actor, property_obj, data
        )

        if await crud.get_active_tenant(db, user.id, property_obj.id):
            raise ConflictError("Tenant already has an active lease for this property")

        await _claim_occupancy(db, property_obj, user.id, data)
        rent = _resolve_rent(property_obj, data)

        lease = await crud.create_lease(
            db,
            property_id=property_obj.id,
            unit_id=data.unit_id,
            tenant_user_id=user.id,
            agent_id=property_obj.agent_id,
            created_by_id=actor.id,
            start_date=data.lease_start_date,
            end_date=data.lease_end_date,
            rent_amount=rent,
            deposit_amount=data.deposit_amount,
            payment_due_day=data.payment_due_day,
            status=TenancyStatus.ACTIVE,
            notice_period_days=(
                data.notice_period_days
                if data.notice_period_days is not None
                else settings.default_notice_period_days
            ),
            late_fee_percentage=(
                data.late_fee_percentage
                if data.late_fee_percentage is not None
                else settings.default_late_fee_percentage
            ),
            grace_period_days=(
                data.grace_period_days
                if data.grace_period_days is not None
                else settings.default_grace_period_days
            ),
        )

        contact = data.emergency_contact
        tenant = await crud.create_tenant(
            db,
            user_id=user.id,
            property_id=property_obj.id,
            unit_id=data.unit_id,
            lease_id=lease.id,
            agent_id=property_obj.agent_id,
            created_by_id=actor.id,
            status=TenancyStatus.ACTIVE,
            lease_start=data.lease_start_date,
            lease_end=data.lease_end_date,
            monthly_rent=rent,
            deposit_paid=data.deposit_amount,
            rent_due_day=data.payment_due_day,
            notice_period_days=lease.notice_period_days,
            id_number=data.id_number,
            emergency_contact_name=contact.name if contact else None,
            emergency_contact_phone=contact.phone if contact else None,
            emergency_contact_relationship=contact.relationship if contact else None,
            notes=data.notes,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Tenant onboarded",
        extra={
            "tenant_id": tenant.id,
            "user_id": user.id,
            "property_id": property_obj.id,
            "unit_id": data.unit_id,
            "new_account": temporary_password is not None,
        },
    )

    await dispatch_safely(
        notifier.notify(
            user.id,
            "Welcome to your new home",
            f'Your lease at "{property_obj.title}" starts on {data.lease_start_date.isoformat()}.',
            NotificationCategory.TENANT,
            link=f"/tenants/{tenant.id}",
        ),
        "tenant_welcome",
    )
    if temporary_password is not None:
        await dispatch_safely(
            notifier.send_temporary_credentials(user.email, temporary_password),
            "tenant_credentials",
        )

    return await crud.get_tenant_by_id(db, tenant.id, refresh=True), temporary_password


# ----- Reads and edits -----


async def list_tenants(
    db: AsyncSession,
    actor: AuthenticatedUser,
    pagination: PaginationParams,
    status: TenancyStatus | None = None,
    property_id: int | None = None,
) -> tuple[list[Tenant], int]:
    """Tenants within the actor's hierarchy scope."""
    filters = [await _tenant_scope_filter(db, actor)]
    if status is not None:
        filters.append(Tenant.status == status)
    if property_id is not None:
        filters.append(Tenant.property_id == property_id)
    return await crud.get_tenants(
        db, filters, skip=pagination.offset, limit=pagination.page_size
    )


async def get_tenant(
    db: AsyncSession, actor: AuthenticatedUser, tenant_id: int
) -> Tenant:
    """Get a tenant the actor may see."""
    tenant = await _get_tenant_or_404(db, tenant_id)
    await _ensure_can_view(db, actor, tenant)
    return tenant


async def update_tenant(
    db: AsyncSession, actor: AuthenticatedUser, tenant_id: int, data: TenantUpdate
) -> Tenant:
    """Update contact details, notes or the rent due day.

    Raises:
        ConflictError: If the tenancy has been terminated
    """
    if actor.role not in STAFF_ROLES:
        raise AuthorizationError("Only staff can edit tenants")

    tenant = await _get_tenant_or_404(db, tenant_id)
    await ensure_authorized(
        db, actor, tenant, "You can only manage tenants in your company"
    )
    if tenant.status == TenancyStatus.TERMINATED:
        raise ConflictError("A terminated tenancy cannot be edited")

    patch = data.model_dump(exclude_unset=True)
    await crud.update_tenant(db, tenant, **patch)
    if "rent_due_day" in patch and tenant.status not in CLOSED_STATUSES:
        tenant.lease.payment_due_day = patch["rent_due_day"]
        await db.flush()
    await db.commit()

    logger.info(
        "Tenant updated", extra={"tenant_id": tenant_id, "fields": sorted(patch)}
    )
    return await crud.get_tenant_by_id(db, tenant_id, refresh=True)


async def terminate_tenant(
    db: AsyncSession,
    actor: AuthenticatedUser,
    tenant_id: int,
    reason: str | None,
    notifier: Notifier,
) -> Tenant:
    """End a tenancy and free the unit or occupancy slot it held.

    Records are kept; tenant and lease move to terminated.

    Raises:
        AuthorizationError: If the actor is not an agent/landlord/admin in scope
        NotFoundError: If the tenant does not exist
        ConflictError: If the tenancy is already terminated
    """
    if actor.role not in TERMINATOR_ROLES:
        raise AuthorizationError("Only agents, landlords and admins can remove tenants")

    tenant = await _get_tenant_or_404(db, tenant_id)
    await ensure_authorized(
        db, actor, tenant, "You can only manage tenants in your company"
    )

    previous = tenant.status
    if previous == TenancyStatus.TERMINATED:
        raise ConflictError("Tenant is already terminated")

    try:
        closed = await crud.close_tenancy(
            db,
            tenant.id,
            tenant.lease_id,
            expected=previous,
            new_status=TenancyStatus.TERMINATED,
            closed_by_id=actor.id,
            reason=reason,
            closed_at=utc_now(),
        )
        if not closed:
            raise ConflictError("Tenant status changed, reload and retry")

        # Expired tenancies already gave their capacity back.
        if previous in (TenancyStatus.ACTIVE, TenancyStatus.PENDING):
            await _release_occupancy(db, tenant)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Tenant terminated",
        extra={
            "tenant_id": tenant_id,
            "property_id": tenant.property_id,
            "previous_status": previous.value,
        },
    )
    await dispatch_safely(
        notifier.notify(
            tenant.user_id,
            "Tenancy ended",
            "Your tenancy has been terminated."
            + (f" Reason: {reason}" if reason else ""),
            NotificationCategory.LEASE,
        ),
        "tenant_terminated",
    )
    return await crud.get_tenant_by_id(db, tenant_id, refresh=True)


async def get_tenant_stats(db: AsyncSession, actor: AuthenticatedUser) -> TenantStats:
    """Scoped tenant counts and active monthly rent."""
    filters = [await _tenant_scope_filter(db, actor)]
    counts = await crud.count_by_status(db, filters)
    rent = await crud.sum_active_rent(db, filters)

    return TenantStats(
        total=sum(counts.values()),
        active=counts.get(TenancyStatus.ACTIVE, 0),
        pending=counts.get(TenancyStatus.PENDING, 0),
        expired=counts.get(TenancyStatus.EXPIRED, 0),
        terminated=counts.get(TenancyStatus.TERMINATED, 0),
        monthly_rent_active=float(to_money(rent)),
    )


# ----- Lease expiry -----


async def expire_tenancy(db: AsyncSession, tenant: Tenant) -> bool:
    """Expire one overdue tenancy and release its occupancy.

    Returns ``False`` when the tenancy was no longer active.
    """
    if not await crud.close_tenancy(
        db,
        tenant.id,
        tenant.lease_id,
        expected=TenancyStatus.ACTIVE,
        new_status=TenancyStatus.EXPIRED,
    ):
        return False
    await _release_occupancy(db, tenant)
    return True


async def expire_overdue_leases(db: AsyncSession, today: date) -> int:
    """Expire every active lease that ended before ``today``.

    Each tenancy commits on its own; one failing row is rolled back,
    logged and left for the next run.
    """
    overdue = [(t.id, t.lease_id) for t in await crud.get_overdue_tenants(db, today)]
    expired = 0
    for tenant_id, lease_id in overdue:
        try:
            tenant = await crud.get_tenant_by_id(db, tenant_id, refresh=True)
            if tenant is not None and await expire_tenancy(db, tenant):
                await db.commit()
                expired += 1
                logger.info(
                    "Lease expired",
                    extra={"tenant_id": tenant_id, "lease_id": lease_id},
                )
        except Exception:
            await db.rollback()
            logger.exception(
                "Failed to expire lease",
                extra={"tenant_id": tenant_id, "lease_id": lease_id},
            )
    return expired
