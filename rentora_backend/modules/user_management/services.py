"""Account provisioning and administration.

Higher-tier actors create the accounts below them: admins create agents
and landlords, agents and landlords create their employees.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ...core.logging import get_logger
from ...core.notifications import NotificationCategory, Notifier, dispatch_safely
from ..auth import crud as auth_crud
from ..auth import services as auth_services
from ..auth.models import AGENT_ROLES, User, UserRole
from ..auth.schemas import AuthenticatedUser, EmployeePermissions
from ..commons import PaginationParams
from ..hierarchy import resolve_employee_ids
from .schemas import AgentCreate, EmployeeCreate

logger = get_logger("users")


async def _deliver_credentials(
    notifier: Notifier, user: User, temporary_password: str
) -> None:
    await dispatch_safely(
        notifier.send_temporary_credentials(user.email, temporary_password),
        "account_credentials",
    )
    await dispatch_safely(
        notifier.notify(
            user.id,
            "Welcome to Rentora",
            "Your account has been created. Please change your password on first login.",
            NotificationCategory.ACCOUNT,
        ),
        "account_welcome",
    )


async def create_agent(
    db: AsyncSession,
    actor: AuthenticatedUser,
    data: AgentCreate,
    notifier: Notifier,
) -> tuple[User, str]:
    """Provision an agent or landlord account.

    Raises:
        AuthorizationError: If the actor is not an admin
        ConflictError: If the email is already registered
    """
    if not actor.is_admin:
        raise AuthorizationError("Only administrators can create agents")

    user, temporary_password = await auth_services.provision_account(
        db,
        actor_id=actor.id,
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        role=UserRole(data.role),
    )
    await db.commit()

    await _deliver_credentials(notifier, user, temporary_password)
    return user, temporary_password


async def create_employee(
    db: AsyncSession,
    actor: AuthenticatedUser,
    data: EmployeeCreate,
    notifier: Notifier,
) -> tuple[User, str]:
    """Provision an employee under the acting agent or landlord.

    Raises:
        AuthorizationError: If the actor is not an agent or landlord
        ConflictError: If the email is already registered
    """
    if actor.role not in AGENT_ROLES:
        raise AuthorizationError("Only agents and landlords can create employees")

    user, temporary_password = await auth_services.provision_account(
        db,
        actor_id=actor.id,
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        role=UserRole.EMPLOYEE,
        parent_user_id=actor.id,
        permissions=data.permissions,
    )
    await db.commit()

    await _deliver_credentials(notifier, user, temporary_password)
    return user, temporary_password


async def list_my_employees(db: AsyncSession, actor: AuthenticatedUser) -> list[User]:
    """Employees created by the acting agent or landlord."""
    if actor.role not in AGENT_ROLES:
        raise AuthorizationError("Only agents and landlords have employees")
    employee_ids = await resolve_employee_ids(db, actor.id)
    return await auth_crud.get_users_by_ids(db, sorted(employee_ids))


async def update_employee_permissions(
    db: AsyncSession,
    actor: AuthenticatedUser,
    employee_id: int,
    permissions: EmployeePermissions,
) -> User:
    """Replace an employee's capability flags.

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
            raise AuthorizationError("You can only manage your own employees")

    for key, value in permissions.model_dump().items():
        setattr(employee, key, value)
    await db.flush()
    await db.commit()

    logger.info(
        "Employee permissions updated",
        extra={"employee_id": employee_id, "permissions": permissions.model_dump()},
    )
    return employee


async def list_users(
    db: AsyncSession,
    pagination: PaginationParams,
    role: UserRole | None = None,
    is_active: bool | None = None,
) -> tuple[list[User], int]:
    """All accounts, filtered by role and status."""
    return await auth_crud.get_users(
        db,
        skip=pagination.offset,
        limit=pagination.page_size,
        role=role,
        is_active=is_active,
    )


async def set_user_status(
    db: AsyncSession, actor: AuthenticatedUser, user_id: int, is_active: bool
) -> User:
    """Activate or deactivate an account.

    Raises:
        NotFoundError: If the user does not exist
        ValidationError: If an admin tries to deactivate themselves
    """
    if not actor.is_admin:
        raise AuthorizationError("Only administrators can change account status")
    if user_id == actor.id and not is_active:
        raise ValidationError("You cannot deactivate your own account", field="is_active")

    user = await auth_crud.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError(f"User with ID {user_id} not found")

    user.is_active = is_active
    await db.flush()
    await db.commit()

    logger.info(
        "User status changed",
        extra={"user_id": user_id, "is_active": is_active, "changed_by": actor.id},
    )
    return user
