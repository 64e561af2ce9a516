"""CRUD operations for the identity store."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.utils import normalize_email, utc_now
from .models import User, UserRole
from .password_service import hash_password
from .schemas import EmployeePermissions


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Get a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Get a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def get_users(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 100,
    role: UserRole | None = None,
    is_active: bool | None = None,
) -> tuple[list[User], int]:
    """Get users with optional role/status filters."""
    filters = []
    if role is not None:
        filters.append(User.role == role)
    if is_active is not None:
        filters.append(User.is_active == is_active)

    count_result = await db.execute(select(func.count(User.id)).where(*filters))
    total = count_result.scalar() or 0

    result = await db.execute(
        select(User).where(*filters).order_by(User.id).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total


async def get_users_by_ids(db: AsyncSession, user_ids: list[int]) -> list[User]:
    """Get users by a list of ids."""
    if not user_ids:
        return []
    result = await db.execute(
        select(User).where(User.id.in_(user_ids)).order_by(User.id)
    )
    return list(result.scalars().all())


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str,
    last_name: str | None = None,
    phone: str | None = None,
    role: UserRole = UserRole.SEEKER,
    created_by_id: int | None = None,
    parent_user_id: int | None = None,
    must_change_password: bool = False,
    permissions: EmployeePermissions | None = None,
) -> User:
    """Create a new user."""
    permissions = permissions or EmployeePermissions()
    user = User(
        email=normalize_email(email),
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        role=role,
        created_by_id=created_by_id,
        parent_user_id=parent_user_id,
        must_change_password=must_change_password,
        is_active=True,
        **permissions.model_dump(),
    )
    db.add(user)
    await db.flush()
    return user


async def update_user_last_login(db: AsyncSession, user: User) -> None:
    """Stamp a successful login."""
    user.last_login = utc_now()
    await db.flush()


async def update_user_password(
    db: AsyncSession, user: User, new_password: str, must_change: bool = False
) -> None:
    """Replace a user's password hash."""
    user.password_hash = hash_password(new_password)
    user.must_change_password = must_change
    await db.flush()
