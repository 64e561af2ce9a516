"""
Async engine, session factory and declarative base.

Every company shares one schema. Which rows a caller may see is decided
by the hierarchy resolver, not by partitioning the data.
"""

from collections.abc import AsyncIterator
from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy.sql import func

from .config import settings
from .core.utils import utc_now


def connect_args_for(url: str) -> dict:
    """Driver connect arguments; MySQL connections carry the SSL policy."""
    if not url.startswith("mysql+asyncmy"):
        return {}
    verify = settings.database_ssl_verify
    return {
        "ssl": {
            "ssl_check_hostname": verify,
            "ssl_verify_cert": verify,
            "ssl_verify_identity": verify,
        }
    }


engine = create_async_engine(
    settings.database_url,
    echo=settings.app_debug,
    connect_args=connect_args_for(settings.database_url),
    pool_pre_ping=True,
    pool_recycle=3600,
)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


class TimestampMixin:
    # Python-side defaults so the values are loaded after flush and async
    # sessions never lazy-load them.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
    )


async def get_db() -> AsyncIterator[AsyncSession]:
    """Request-scoped session. Work the services did not commit is discarded."""
    async with AsyncSessionLocal() as session:
        yield session
