"""Tenant management module for Rentora.

Onboarding, leases and the tenancy lifecycle.
"""

from .models import Lease, TenancyStatus, Tenant
from .routers import router

__all__ = [
    # Models
    "Tenant",
    "Lease",
    # Enums
    "TenancyStatus",
    # Routers
    "router",
]
