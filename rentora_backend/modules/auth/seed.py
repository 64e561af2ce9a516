"""Seeding of the first platform administrator."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.logging import get_logger
from . import crud
from .models import User, UserRole

logger = get_logger("auth.seed")


async def seed_initial_admin(db: AsyncSession) -> User | None:
    """Create the configured admin if no admin exists yet.

    Returns:
        The created admin, or None when seeding is not configured or an
        admin is already present.
    """
    if not settings.init_admin_email or not settings.init_admin_password:
        return None

    result = await db.execute(select(User.id).where(User.role == UserRole.ADMIN).limit(1))
    if result.scalar() is not None:
        return None

    admin = await crud.create_user(
        db,
        email=settings.init_admin_email,
        password=settings.init_admin_password,
        first_name=settings.init_admin_first_name,
        last_name=settings.init_admin_last_name,
        role=UserRole.ADMIN,
    )
    await db.commit()

    logger.info("Initial admin seeded", extra={"user_id": admin.id})
    return admin
