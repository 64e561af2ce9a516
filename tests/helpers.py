"""Shared builders for the test modules."""

from datetime import date, timedelta
from decimal import Decimal

from rentora_backend.modules.auth.jwt_service import create_access_token
from rentora_backend.modules.auth.schemas import AuthenticatedUser

DEFAULT_PASSWORD = "Secret-pass-123"

LONG_DESCRIPTION = (
    "Bright and airy home close to shops, schools and public transport. "
    "Secure compound with parking."
)


def actor(user) -> AuthenticatedUser:
    """Request actor for calling services directly."""
    return AuthenticatedUser.model_validate(user)


def auth_headers(user) -> dict[str, str]:
    token = create_access_token(user_id=user.id, email=user.email, role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


def property_payload(**overrides) -> dict:
    """Valid single-unit apartment listing."""
    payload = {
        "title": "Sunny two bedroom apartment",
        "description": LONG_DESCRIPTION,
        "property_type": "apartment",
        "rent": "1200.00",
        "deposit": "2400.00",
        "bedrooms": 2,
        "bathrooms": 1,
        "address": "12 Garden Road",
        "city": "Nairobi",
        "max_occupancy": 1,
    }
    payload.update(overrides)
    return payload


def unit_payload(number: str, rent: str = "800.00", **overrides) -> dict:
    payload = {"unit_number": number, "rent": rent, "bedrooms": 1}
    payload.update(overrides)
    return payload


def lease_window(days: int = 365, start: date = date(2026, 1, 1)) -> tuple[date, date]:
    return start, start + timedelta(days=days)


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"))
