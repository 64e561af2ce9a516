"""Authentication and identity schemas for Rentora."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from .models import UserRole

# ----- User Schemas -----


class EmployeePermissions(BaseModel):
    """Capability flags carried by employee accounts."""

    can_create_tenants: bool = False
    can_view_reports: bool = False
    can_manage_properties: bool = False
    can_handle_payments: bool = False


class UserBase(BaseModel):
    """Base user schema."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str | None = Field(None, max_length=120)
    phone: str | None = Field(None, max_length=40)


class UserSummary(BaseModel):
    """Compact user reference embedded in other responses."""

    id: int
    email: str
    first_name: str
    last_name: str | None = None
    role: UserRole

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """Schema for user response."""

    id: int
    email: str
    first_name: str
    last_name: str | None = None
    phone: str | None = None
    role: UserRole
    is_active: bool
    must_change_password: bool
    created_by_id: int | None = None
    parent_user_id: int | None = None
    permissions: EmployeePermissions
    last_login: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


# ----- Auth Schemas -----


class RegisterRequest(UserBase):
    """Self-registration payload; the account always starts as a seeker."""

    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    """Schema for login request."""

    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Schema for token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    user: UserResponse


class ChangePasswordRequest(BaseModel):
    """Schema for password change request."""

    current_password: str
    new_password: str = Field(..., min_length=8, max_length=128)


class AuthenticatedUser(BaseModel):
    """The actor behind the current request, loaded fresh from the store."""

    id: int
    email: str
    first_name: str = ""
    last_name: str | None = None
    role: UserRole
    is_active: bool = True
    must_change_password: bool = False
    created_by_id: int | None = None
    parent_user_id: int | None = None

    @property
    def full_name(self) -> str:
        if self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    class Config:
        from_attributes = True
