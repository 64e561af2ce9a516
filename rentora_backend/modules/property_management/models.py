"""Property management models for Rentora.

- Properties with an approval axis and an availability axis
- Units as children of multi-unit properties, written only through
  the property lifecycle services
"""

import enum
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from ...database import Base, TimestampMixin
from ..auth.models import UserRole


class PropertyType(str, enum.Enum):
    """Listing types."""

    APARTMENT = "apartment"
    HOUSE = "house"
    STUDIO = "studio"
    BEDSITTER = "bedsitter"
    VILLA = "villa"
    TOWNHOUSE = "townhouse"
    OFFICE = "office"
    SHOP = "shop"
    WAREHOUSE = "warehouse"
    LAND = "land"
    PLOT = "plot"
    FARM = "farm"


# Land listings are sold or leased at a price, not a monthly rent.
LAND_TYPES = frozenset({PropertyType.LAND, PropertyType.PLOT, PropertyType.FARM})


class PriceType(str, enum.Enum):
    """How the ``price`` of a land listing is quoted."""

    SALE = "sale"
    LEASE = "lease"
    PER_ACRE = "per_acre"


class ApprovalStatus(str, enum.Enum):
    """Approval axis."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PropertyAvailability(str, enum.Enum):
    """Availability axis of a property."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    UNAVAILABLE = "unavailable"


class UnitAvailability(str, enum.Enum):
    """Availability of a single unit."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class Property(TimestampMixin, Base):
    """A rental or land listing owned by one agent."""

    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    property_type: Mapped[PropertyType] = mapped_column(
        Enum(PropertyType), nullable=False
    )
    has_units: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Pricing
    rent: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    deposit: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    price_type: Mapped[PriceType | None] = mapped_column(Enum(PriceType), nullable=True)

    # Details
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    area: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    furnished: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    pets_allowed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    features: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Location
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    neighborhood: Mapped[str | None] = mapped_column(String(120), nullable=True)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 7), nullable=True)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 7), nullable=True)

    # Availability axis
    availability: Mapped[PropertyAvailability] = mapped_column(
        Enum(PropertyAvailability),
        nullable=False,
        default=PropertyAvailability.AVAILABLE,
    )
    max_occupancy: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    current_occupancy: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Ownership
    agent_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_by_role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False)

    # Approval axis
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        Enum(ApprovalStatus), nullable=False, default=ApprovalStatus.PENDING
    )
    approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    approved_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    units: Mapped[list["Unit"]] = relationship(
        "Unit",
        back_populates="property",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Unit.id",
    )

    __table_args__ = (
        Index("ix_properties_agent", "agent_id"),
        Index("ix_properties_created_by", "created_by_id"),
        Index("ix_properties_approval", "approval_status", "availability"),
        Index("ix_properties_city", "city"),
    )

    @validates("approval_status")
    def _sync_approved(self, key, value):
        # Keep the boolean cache consistent with the approval axis.
        self.approved = value == ApprovalStatus.APPROVED
        return value

    @property
    def is_land(self) -> bool:
        return self.property_type in LAND_TYPES

    def __repr__(self) -> str:
        return (
            f"<Property(id={self.id}, title={self.title}, "
            f"approval={self.approval_status}, availability={self.availability})>"
        )


class Unit(TimestampMixin, Base):
    """A sub-leasable unit of a multi-unit property."""

    __tablename__ = "units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)
    floor: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bedrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bathrooms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    area: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    rent: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deposit: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    furnished: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    features: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    availability: Mapped[UnitAvailability] = mapped_column(
        Enum(UnitAvailability), nullable=False, default=UnitAvailability.AVAILABLE
    )
    tenant_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    lease_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    lease_end: Mapped[date | None] = mapped_column(Date, nullable=True)

    property: Mapped["Property"] = relationship("Property", back_populates="units")

    __table_args__ = (
        UniqueConstraint("property_id", "unit_number", name="uq_units_property_number"),
        Index("ix_units_property_availability", "property_id", "availability"),
    )

    def __repr__(self) -> str:
        return (
            f"<Unit(id={self.id}, number={self.unit_number}, "
            f"availability={self.availability})>"
        )
