"""Common utilities for the Rentora backend."""

import secrets
import string
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Get current UTC date."""
    return utc_now().date()


def sanitize_string(value: str | None, max_length: int = 255) -> str | None:
    """Sanitize a string value by stripping whitespace and truncating."""
    if value is None:
        return None
    value = value.strip()
    if len(value) > max_length:
        return value[:max_length]
    return value


def normalize_email(email: str) -> str:
    """Lower-case and trim an email address for storage and lookups."""
    return email.strip().lower()


def generate_temporary_password(length: int = 12) -> str:
    """Generate a random alphanumeric one-time password."""
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def to_money(value: Decimal | float | int | None) -> Decimal:
    """Quantize an amount to two decimal places (None counts as zero)."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
