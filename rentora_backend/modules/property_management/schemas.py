"""Property management schemas for Rentora."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from ..auth.models import UserRole
from .models import (
    ApprovalStatus,
    PriceType,
    PropertyAvailability,
    PropertyType,
    UnitAvailability,
)

# ----- Unit Schemas -----


class UnitBase(BaseModel):
    """Base unit schema."""

    unit_number: str = Field(..., min_length=1, max_length=50)
    floor: int | None = None
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    area: Decimal | None = Field(None, ge=0)
    rent: Decimal = Field(..., ge=0)
    deposit: Decimal | None = Field(None, ge=0)
    furnished: bool = False
    features: list[str] = Field(default_factory=list)
    notes: str | None = None


class UnitCreate(UnitBase):
    """Schema for adding a unit. Units start available or in maintenance."""

    availability: UnitAvailability = UnitAvailability.AVAILABLE

    @field_validator("availability")
    @classmethod
    def not_occupied(cls, value: UnitAvailability) -> UnitAvailability:
        if value == UnitAvailability.OCCUPIED:
            raise ValueError("Units are occupied through the occupy operation")
        return value


class UnitsAddRequest(BaseModel):
    """Batch of units to append to a property."""

    units: list[UnitCreate] = Field(..., min_length=1)


class UnitUpdate(BaseModel):
    """Schema for updating descriptive unit fields."""

    unit_number: str | None = Field(None, min_length=1, max_length=50)
    floor: int | None = None
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    area: Decimal | None = Field(None, ge=0)
    rent: Decimal | None = Field(None, ge=0)
    deposit: Decimal | None = Field(None, ge=0)
    furnished: bool | None = None
    features: list[str] | None = None
    notes: str | None = None
    availability: UnitAvailability | None = None


class UnitOccupyRequest(BaseModel):
    """Assign a tenant user to a unit for a lease window."""

    tenant_id: int
    lease_start: date
    lease_end: date


class UnitResponse(BaseModel):
    """Schema for unit response."""

    id: int
    property_id: int
    unit_number: str
    floor: int | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    area: float | None = None
    rent: float
    deposit: float | None = None
    furnished: bool
    features: list[str] = Field(default_factory=list)
    notes: str | None = None
    availability: UnitAvailability
    tenant_id: int | None = None
    lease_start: date | None = None
    lease_end: date | None = None

    class Config:
        from_attributes = True


class UnitStats(BaseModel):
    """Occupancy rollup of a multi-unit property."""

    property_id: int
    total_units: int
    available: int
    occupied: int
    maintenance: int
    occupancy_rate: float
    monthly_rent_collected: float
    potential_monthly_rent: float


# ----- Property Schemas -----


class PropertyBase(BaseModel):
    """Base property schema."""

    title: str = Field(..., min_length=10, max_length=200)
    description: str = Field(..., min_length=50)
    property_type: PropertyType
    has_units: bool = False
    rent: Decimal | None = Field(None, ge=0)
    deposit: Decimal | None = Field(None, ge=0)
    price: Decimal | None = Field(None, ge=0)
    price_type: PriceType | None = None
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    area: Decimal | None = Field(None, ge=0)
    furnished: bool = False
    pets_allowed: bool = False
    features: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=120)
    neighborhood: str | None = Field(None, max_length=120)
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)
    max_occupancy: int = Field(default=1, ge=1)
    featured: bool = False


class PropertyCreate(PropertyBase):
    """Schema for creating a property, optionally with its first units."""

    agent_id: int | None = None
    units: list[UnitCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def units_imply_multi_unit(self) -> "PropertyCreate":
        if self.units:
            self.has_units = True
        return self


class PropertyUpdate(BaseModel):
    """Schema for updating a property.

    ``agent_id``, ``approval_status`` and ``rejection_reason`` are honored
    for administrators only.
    """

    title: str | None = Field(None, min_length=10, max_length=200)
    description: str | None = Field(None, min_length=50)
    property_type: PropertyType | None = None
    has_units: bool | None = None
    rent: Decimal | None = Field(None, ge=0)
    deposit: Decimal | None = Field(None, ge=0)
    price: Decimal | None = Field(None, ge=0)
    price_type: PriceType | None = None
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    area: Decimal | None = Field(None, ge=0)
    furnished: bool | None = None
    pets_allowed: bool | None = None
    features: list[str] | None = None
    images: list[str] | None = None
    address: str | None = Field(None, min_length=1, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=120)
    neighborhood: str | None = Field(None, max_length=120)
    latitude: Decimal | None = Field(None, ge=-90, le=90)
    longitude: Decimal | None = Field(None, ge=-180, le=180)
    max_occupancy: int | None = Field(None, ge=1)
    featured: bool | None = None
    availability: PropertyAvailability | None = None

    # Administrator-only fields
    agent_id: int | None = None
    approval_status: ApprovalStatus | None = None
    rejection_reason: str | None = None


class RejectRequest(BaseModel):
    """Body of a rejection; the reason is checked by the service."""

    reason: str | None = None


class PropertyResponse(BaseModel):
    """Schema for property response."""

    id: int
    title: str
    description: str
    property_type: PropertyType
    has_units: bool
    rent: float | None = None
    deposit: float | None = None
    price: float | None = None
    price_type: PriceType | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    area: float | None = None
    furnished: bool
    pets_allowed: bool
    features: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    address: str
    city: str
    neighborhood: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    availability: PropertyAvailability
    max_occupancy: int
    current_occupancy: int
    featured: bool
    views: int
    agent_id: int
    created_by_id: int
    created_by_role: UserRole
    approval_status: ApprovalStatus
    approved: bool
    approved_by_id: int | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    units: list[UnitResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
