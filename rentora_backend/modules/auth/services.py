"""Authentication and account provisioning business logic."""

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ...core.logging import get_logger
from ...core.utils import generate_temporary_password
from . import crud
from .jwt_service import create_access_token, get_token_expiry_seconds
from .models import User, UserRole
from .password_service import verify_password
from .schemas import EmployeePermissions, RegisterRequest, TokenResponse, UserResponse

logger = get_logger("auth")


def issue_token(user: User) -> TokenResponse:
    """Build the token response for an authenticated user."""
    return TokenResponse(
        access_token=create_access_token(
            user_id=user.id, email=user.email, role=user.role.value
        ),
        token_type="bearer",
        expires_in=get_token_expiry_seconds(),
        user=UserResponse.model_validate(user),
    )


async def register_seeker(
    db: AsyncSession, data: RegisterRequest
) -> tuple[User, TokenResponse]:
    """Self-register a new account. The role is always seeker.

    Raises:
        ConflictError: If the email is already registered
    """
    if await crud.get_user_by_email(db, data.email):
        raise ConflictError("A user with this email already exists")

    user = await crud.create_user(
        db,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        role=UserRole.SEEKER,
    )
    await db.commit()

    logger.info("Seeker registered", extra={"user_id": user.id})
    return user, issue_token(user)


async def authenticate_user(
    db: AsyncSession, email: str, password: str
) -> tuple[User, TokenResponse]:
    """Authenticate user and return an access token.

    Args:
        db: Database session
        email: User's email
        password: User's password

    Returns:
        Tuple of (User, TokenResponse)

    Raises:
        AuthenticationError: If authentication fails
    """
    user = await crud.get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthenticationError("Account is disabled")

    await crud.update_user_last_login(db, user)
    await db.commit()

    logger.info("User logged in", extra={"user_id": user.id})
    return user, issue_token(user)


async def change_password(
    db: AsyncSession,
    user_id: int,
    current_password: str,
    new_password: str,
) -> User:
    """Change user's password and clear any forced-change flag.

    Raises:
        NotFoundError: If user not found
        ValidationError: If current password is incorrect or unchanged
    """
    user = await crud.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect", field="current_password")

    if current_password == new_password:
        raise ValidationError(
            "New password must differ from the current password", field="new_password"
        )

    await crud.update_user_password(db, user, new_password, must_change=False)
    await db.commit()

    logger.info("Password changed", extra={"user_id": user.id})
    return user


async def provision_account(
    db: AsyncSession,
    *,
    actor_id: int,
    email: str,
    first_name: str,
    last_name: str | None,
    phone: str | None,
    role: UserRole,
    parent_user_id: int | None = None,
    permissions: EmployeePermissions | None = None,
) -> tuple[User, str]:
    """Create an account on behalf of a higher-tier actor.

    The account gets a random temporary password and must change it on
    first login. Only flushes; the calling use case owns the commit.

    Returns:
        Tuple of (User, temporary password)

    Raises:
        ConflictError: If the email is already registered
    """
    if await crud.get_user_by_email(db, email):
        raise ConflictError("A user with this email already exists")

    temporary_password = generate_temporary_password(settings.temporary_password_length)
    user = await crud.create_user(
        db,
        email=email,
        password=temporary_password,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        role=role,
        created_by_id=actor_id,
        parent_user_id=parent_user_id,
        must_change_password=True,
        permissions=permissions,
    )
    logger.info(
        "Account provisioned",
        extra={"user_id": user.id, "role": role.value, "created_by": actor_id},
    )
    return user, temporary_password
