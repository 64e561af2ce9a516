"""
Migration environment for the Rentora schema.

The database URL and SSL policy come from the same settings file the
service uses, so ``CONFIG`` selects the target database:

    CONFIG=resources/config/local.yaml alembic upgrade head
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

os.environ.setdefault("CONFIG", "resources/config/local.yaml")

from rentora_backend.config import settings  # noqa: E402
from rentora_backend.database import Base, connect_args_for  # noqa: E402

# Registers every table on Base.metadata for autogenerate
from rentora_backend.modules.auth import models as auth_models  # noqa: E402, F401
from rentora_backend.modules.property_management import (  # noqa: E402, F401
    models as property_models,
)
from rentora_backend.modules.reporting import (  # noqa: E402, F401
    models as reporting_models,
)
from rentora_backend.modules.tenant_management import (  # noqa: E402, F401
    models as tenant_models,
)

config = context.config
config.set_main_option("sqlalchemy.url", settings.database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=settings.database_url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout instead of touching a database."""
    _configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    engine = async_engine_from_config(
        section,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
        connect_args=connect_args_for(settings.database_url),
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
