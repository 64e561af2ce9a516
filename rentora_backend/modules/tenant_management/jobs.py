"""Scheduled tenancy jobs.

Run from cron or a scheduler::

    CONFIG=resources/config/local.yaml python -m rentora_backend.modules.tenant_management.jobs
"""

import asyncio

from ...config import settings
from ...core.logging import get_logger, setup_logging, shutdown_logging
from ...core.utils import utc_today
from ...database import AsyncSessionLocal, engine
from . import services

logger = get_logger("jobs.lease_expiry")


async def run_lease_expiry() -> int:
    """Expire overdue leases once. Safe to re-run."""
    today = utc_today()
    logger.info("Lease expiry started", extra={"as_of": today.isoformat()})
    async with AsyncSessionLocal() as db:
        expired = await services.expire_overdue_leases(db, today)
    logger.info("Lease expiry finished", extra={"expired": expired})
    return expired


async def _main() -> None:
    try:
        await run_lease_expiry()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging(settings)
    try:
        asyncio.run(_main())
    finally:
        shutdown_logging()
