"""Identity models for Rentora.

Users form a self-referential ownership forest through ``created_by_id``:
admin -> agent/landlord -> employee, with tenants provisioned by agents
or their employees.
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from ...database import Base, TimestampMixin


class UserRole(str, enum.Enum):
    """Closed set of user roles."""

    ADMIN = "admin"
    AGENT = "agent"
    LANDLORD = "landlord"
    EMPLOYEE = "employee"
    TENANT = "tenant"
    SEEKER = "seeker"


# Roles that own a company of employees.
AGENT_ROLES = frozenset({UserRole.AGENT, UserRole.LANDLORD})

# Roles allowed to onboard tenants.
STAFF_ROLES = frozenset(
    {UserRole.ADMIN, UserRole.AGENT, UserRole.LANDLORD, UserRole.EMPLOYEE}
)


class User(TimestampMixin, Base):
    """A platform account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole), nullable=False, default=UserRole.SEEKER
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    must_change_password: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Hierarchy back-references
    created_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    parent_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Employee capability flags
    can_create_tenants: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    can_view_reports: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    can_manage_properties: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    can_handle_payments: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    __table_args__ = (
        Index("ix_users_created_by_role", "created_by_id", "role"),
        Index("ix_users_role", "role"),
    )

    @property
    def full_name(self) -> str:
        """Get user's full name."""
        if self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name

    @property
    def permissions(self) -> dict[str, bool]:
        return {
            "can_create_tenants": self.can_create_tenants,
            "can_view_reports": self.can_view_reports,
            "can_manage_properties": self.can_manage_properties,
            "can_handle_payments": self.can_handle_payments,
        }

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
