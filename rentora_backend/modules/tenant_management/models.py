"""Tenant management models for Rentora.

- Lease: dates, amounts and terms of one tenancy
- Tenant: join record linking a tenant user to a property (or unit)
  and its lease
"""

import enum
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ...database import Base, TimestampMixin
from ..auth.models import User


class TenancyStatus(str, enum.Enum):
    """Shared status of a tenant record and its lease."""

    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
    TERMINATED = "terminated"


# Statuses from which nothing but a status transition is allowed.
CLOSED_STATUSES = frozenset({TenancyStatus.EXPIRED, TenancyStatus.TERMINATED})


class Lease(TimestampMixin, Base):
    """Lease agreement behind a tenancy."""

    __tablename__ = "leases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    unit_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="SET NULL"), nullable=True
    )
    tenant_user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    agent_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deposit_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    payment_due_day: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    status: Mapped[TenancyStatus] = mapped_column(
        Enum(TenancyStatus), nullable=False, default=TenancyStatus.ACTIVE
    )

    # Terms
    notice_period_days: Mapped[int] = mapped_column(Integer, default=30, nullable=False)
    late_fee_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("5")
    )
    grace_period_days: Mapped[int] = mapped_column(Integer, default=3, nullable=False)

    terminated_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    termination_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    terminated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_leases_status_end", "status", "end_date"),
        Index("ix_leases_property", "property_id"),
    )

    def __repr__(self) -> str:
        return f"<Lease(id={self.id}, status={self.status}, end={self.end_date})>"


class Tenant(TimestampMixin, Base):
    """A tenant user's occupancy of a property or unit."""

    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    unit_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="SET NULL"), nullable=True
    )
    lease_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("leases.id", ondelete="CASCADE"), nullable=False
    )
    agent_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )

    status: Mapped[TenancyStatus] = mapped_column(
        Enum(TenancyStatus), nullable=False, default=TenancyStatus.ACTIVE
    )
    lease_start: Mapped[date] = mapped_column(Date, nullable=False)
    lease_end: Mapped[date] = mapped_column(Date, nullable=False)
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deposit_paid: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    rent_due_day: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    notice_period_days: Mapped[int] = mapped_column(Integer, default=30, nullable=False)

    id_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    emergency_contact_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    emergency_contact_phone: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    emergency_contact_relationship: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    terminated_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    termination_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    terminated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id], lazy="selectin")
    lease: Mapped["Lease"] = relationship("Lease", lazy="selectin")

    __table_args__ = (
        Index("ix_tenants_user_property_status", "user_id", "property_id", "status"),
        Index("ix_tenants_agent", "agent_id"),
        Index("ix_tenants_created_by", "created_by_id"),
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, user_id={self.user_id}, status={self.status})>"
