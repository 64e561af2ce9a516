"""
Outbound notification interface.

Delivery (email, SMS, in-app feeds) lives outside this service. The core
only hands messages to a ``Notifier``; the default implementation writes
them to the structured log.
"""

import enum
from typing import Protocol

from .exceptions import ExternalServiceError
from .logging import get_logger

logger = get_logger("notifications")


class NotificationCategory(str, enum.Enum):
    """Kinds of notifications the core emits."""

    PROPERTY = "property"
    TENANT = "tenant"
    ACCOUNT = "account"
    LEASE = "lease"


class Notifier(Protocol):
    """Narrow interface the services use to reach the delivery pipeline."""

    async def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        category: NotificationCategory,
        link: str | None = None,
    ) -> None: ...

    async def send_temporary_credentials(
        self, email: str, temporary_password: str
    ) -> None: ...


class LoggingNotifier:
    """Notifier that records every dispatch in the application log."""

    async def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        category: NotificationCategory,
        link: str | None = None,
    ) -> None:
        logger.info(
            "Notification dispatched",
            extra={
                "recipient_id": user_id,
                "title": title,
                "category": category.value,
                "link": link,
            },
        )

    async def send_temporary_credentials(
        self, email: str, temporary_password: str
    ) -> None:
        # Never log the secret itself.
        logger.info("Temporary credentials issued", extra={"recipient": email})


_default_notifier = LoggingNotifier()


def get_notifier() -> Notifier:
    """Dependency returning the configured notifier."""
    return _default_notifier


async def dispatch_safely(coro, operation: str) -> None:
    """Await a notifier call after the owning transaction has committed.

    Delivery failures are logged; the committed state change stands.
    """
    try:
        await coro
    except ExternalServiceError as exc:
        logger.warning(
            "Notification delivery failed",
            extra={"operation": operation, "error": exc.message},
        )
