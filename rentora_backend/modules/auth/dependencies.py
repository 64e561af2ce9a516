"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import AuthenticationError, AuthorizationError
from ...core.logging import set_actor_id
from ...database import get_db
from . import crud
from .jwt_service import decode_access_token
from .models import UserRole
from .schemas import AuthenticatedUser

security = HTTPBearer(auto_error=False)

Credentials = Annotated[HTTPAuthorizationCredentials | None, Depends(security)]


async def _load_actor(token: str, db: AsyncSession) -> AuthenticatedUser:
    payload = decode_access_token(token)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    try:
        user_id = int(payload["sub"])
    except (KeyError, ValueError) as e:
        raise AuthenticationError(f"Invalid token payload: {e}")

    # Role and hierarchy pointers are read fresh on every request.
    user = await crud.get_user_by_id(db, user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    set_actor_id(user.id)
    return AuthenticatedUser.model_validate(user)


async def get_authenticated_user(
    credentials: Credentials,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthenticatedUser:
    """Resolve the bearer token to a user, even one with a pending password change."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    return await _load_actor(credentials.credentials, db)


async def get_current_user(
    user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)],
) -> AuthenticatedUser:
    """Current user for regular endpoints.

    Accounts provisioned with a temporary password are locked out until
    they change it.
    """
    if user.must_change_password:
        raise AuthorizationError("Password change required")
    return user


async def get_optional_user(
    credentials: Credentials,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthenticatedUser | None:
    """Current user for public endpoints; None for anonymous visitors."""
    if credentials is None:
        return None
    return await _load_actor(credentials.credentials, db)


def require_role(*allowed_roles: UserRole):
    """Dependency factory for role-based access control.

    Usage:
        @router.get("/admin-only")
        async def admin_endpoint(
            current_user: AuthenticatedUser = Depends(require_role(UserRole.ADMIN))
        ):
            ...
    """
    roles = frozenset(allowed_roles)

    async def role_checker(
        current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    ) -> AuthenticatedUser:
        if current_user.role not in roles:
            raise AuthorizationError(
                "Access denied. Required roles: "
                + ", ".join(sorted(r.value for r in roles))
            )
        return current_user

    return role_checker


# Type aliases for dependency injection
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
OptionalUser = Annotated[AuthenticatedUser | None, Depends(get_optional_user)]
PasswordChangeUser = Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
AdminUser = Annotated[AuthenticatedUser, Depends(require_role(UserRole.ADMIN))]
AgentUser = Annotated[
    AuthenticatedUser, Depends(require_role(UserRole.AGENT, UserRole.LANDLORD))
]
ApproverUser = Annotated[
    AuthenticatedUser, Depends(require_role(UserRole.AGENT, UserRole.ADMIN))
]
ListingUser = Annotated[
    AuthenticatedUser,
    Depends(require_role(UserRole.AGENT, UserRole.EMPLOYEE, UserRole.ADMIN)),
]
StaffUser = Annotated[
    AuthenticatedUser,
    Depends(
        require_role(
            UserRole.ADMIN, UserRole.AGENT, UserRole.LANDLORD, UserRole.EMPLOYEE
        )
    ),
]
TenancyManagerUser = Annotated[
    AuthenticatedUser,
    Depends(require_role(UserRole.ADMIN, UserRole.AGENT, UserRole.LANDLORD)),
]
