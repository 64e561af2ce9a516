"""Account provisioning schemas for Rentora."""

from typing import Literal

from pydantic import BaseModel, Field

from ..auth.schemas import EmployeePermissions, UserBase, UserResponse


class AgentCreate(UserBase):
    """Agent or landlord account created by an administrator."""

    role: Literal["agent", "landlord"] = "agent"


class EmployeeCreate(UserBase):
    """Employee account created by an agent or landlord."""

    permissions: EmployeePermissions = Field(default_factory=EmployeePermissions)


class ProvisionedUserResponse(BaseModel):
    """A newly provisioned account with its one-time password."""

    user: UserResponse
    temporary_password: str


class UserStatusUpdate(BaseModel):
    is_active: bool
