"""Property management module for Rentora.

Approval workflow, availability and units of rental listings.
"""

from .models import (
    ApprovalStatus,
    PriceType,
    Property,
    PropertyAvailability,
    PropertyType,
    Unit,
    UnitAvailability,
)
from .routers import router

__all__ = [
    # Models
    "Property",
    "Unit",
    # Enums
    "ApprovalStatus",
    "PriceType",
    "PropertyAvailability",
    "PropertyType",
    "UnitAvailability",
    # Routers
    "router",
]
