"""Reporting module for Rentora.

Read-only hierarchy and billing rollups over properties, tenants and
payments.
"""

from .models import Payment, PaymentMethod, PaymentStatus, PaymentType
from .routers import router

__all__ = [
    # Models
    "Payment",
    # Enums
    "PaymentStatus",
    "PaymentType",
    "PaymentMethod",
    # Routers
    "router",
]
