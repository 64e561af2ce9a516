"""Authentication and identity module for Rentora."""

from .dependencies import (
    AdminUser,
    AgentUser,
    ApproverUser,
    CurrentUser,
    ListingUser,
    OptionalUser,
    PasswordChangeUser,
    StaffUser,
    TenancyManagerUser,
    get_current_user,
    require_role,
)
from .models import AGENT_ROLES, STAFF_ROLES, User, UserRole
from .routers import router
from .schemas import AuthenticatedUser

__all__ = [
    # Models
    "User",
    "UserRole",
    "AGENT_ROLES",
    "STAFF_ROLES",
    # Router
    "router",
    # Dependencies
    "get_current_user",
    "require_role",
    "CurrentUser",
    "OptionalUser",
    "PasswordChangeUser",
    "AdminUser",
    "AgentUser",
    "ApproverUser",
    "ListingUser",
    "StaffUser",
    "TenancyManagerUser",
    # Schemas
    "AuthenticatedUser",
]
