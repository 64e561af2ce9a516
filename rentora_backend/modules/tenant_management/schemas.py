"""Tenant management schemas for Rentora."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field, model_validator

from ..auth.schemas import UserSummary
from .models import TenancyStatus

# ----- Lease Schemas -----


class LeaseResponse(BaseModel):
    """Schema for lease response."""

    id: int
    property_id: int
    unit_id: int | None = None
    tenant_user_id: int
    agent_id: int
    created_by_id: int
    start_date: date
    end_date: date
    rent_amount: float
    deposit_amount: float
    payment_due_day: int
    status: TenancyStatus
    notice_period_days: int
    late_fee_percentage: float
    grace_period_days: int
    terminated_by_id: int | None = None
    termination_reason: str | None = None
    terminated_at: datetime | None = None

    class Config:
        from_attributes = True


# ----- Tenant Schemas -----


class TenantUserData(BaseModel):
    """Details of a tenant account to provision during onboarding."""

    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str | None = Field(None, max_length=120)
    phone: str | None = Field(None, max_length=40)


class EmergencyContact(BaseModel):
    name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    relationship: str | None = Field(None, max_length=50)


class TenantCreate(BaseModel):
    """Onboarding payload.

    Either ``user_id`` of an existing seeker/tenant or ``user_data`` for a
    new account must be given, not both. ``rent_amount`` falls back to the
    unit's or property's rent.
    """

    user_id: int | None = None
    user_data: TenantUserData | None = None
    property_id: int
    unit_id: int | None = None
    lease_start_date: date
    lease_end_date: date
    rent_amount: Decimal | None = Field(None, ge=0)
    deposit_amount: Decimal = Field(default=Decimal("0"), ge=0)
    payment_due_day: int = Field(default=1, ge=1, le=31)
    notice_period_days: int | None = Field(None, ge=0)
    late_fee_percentage: Decimal | None = Field(None, ge=0, le=100)
    grace_period_days: int | None = Field(None, ge=0)
    id_number: str | None = Field(None, max_length=50)
    emergency_contact: EmergencyContact | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def check_user_and_dates(self) -> "TenantCreate":
        if (self.user_id is None) == (self.user_data is None):
            raise ValueError("Provide exactly one of user_id or user_data")
        if self.lease_end_date <= self.lease_start_date:
            raise ValueError("Lease end date must be after lease start date")
        return self


class TenantUpdate(BaseModel):
    """Schema for updating a tenant's contact details and terms."""

    id_number: str | None = Field(None, max_length=50)
    emergency_contact_name: str | None = Field(None, max_length=255)
    emergency_contact_phone: str | None = Field(None, max_length=50)
    emergency_contact_relationship: str | None = Field(None, max_length=50)
    rent_due_day: int | None = Field(None, ge=1, le=31)
    notes: str | None = None


class TerminateRequest(BaseModel):
    reason: str | None = None


class TenantResponse(BaseModel):
    """Schema for tenant response."""

    id: int
    user_id: int
    property_id: int
    unit_id: int | None = None
    lease_id: int
    agent_id: int
    created_by_id: int
    status: TenancyStatus
    lease_start: date
    lease_end: date
    monthly_rent: float
    deposit_paid: float
    rent_due_day: int
    notice_period_days: int
    id_number: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    emergency_contact_relationship: str | None = None
    notes: str | None = None
    terminated_by_id: int | None = None
    termination_reason: str | None = None
    terminated_at: datetime | None = None
    user: UserSummary
    lease: LeaseResponse
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TenantCreatedResponse(TenantResponse):
    """Onboarding result; carries the one-time password of a new account."""

    temporary_password: str | None = None


class TenantStats(BaseModel):
    """Scoped tenant counts."""

    total: int
    active: int
    pending: int
    expired: int
    terminated: int
    monthly_rent_active: float
