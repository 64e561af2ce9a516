"""Initial schema for the Rentora rental marketplace

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for:
- Identity (users)
- Property Management (properties, units)
- Tenant Management (leases, tenants)
- Reporting (payments)

Enum columns store member names, matching SQLAlchemy's default for
Python enums.
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLE = ("ADMIN", "AGENT", "LANDLORD", "EMPLOYEE", "TENANT", "SEEKER")
TENANCY_STATUS = ("PENDING", "ACTIVE", "EXPIRED", "TERMINATED")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _termination_stamps() -> list[sa.Column]:
    return [
        sa.Column("terminated_by_id", sa.Integer(), nullable=True),
        sa.Column("termination_reason", sa.Text(), nullable=True),
        sa.Column("terminated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create all tables."""

    # =====================
    # USERS (self-referential hierarchy)
    # =====================

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("role", sa.Enum(*USER_ROLE, name="userrole"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("must_change_password", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        sa.Column("parent_user_id", sa.Integer(), nullable=True),
        sa.Column("can_create_tenants", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("can_view_reports", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("can_manage_properties", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("can_handle_payments", sa.Boolean(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["parent_user_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_users_created_by_role", "users", ["created_by_id", "role"])
    op.create_index("ix_users_role", "users", ["role"])

    # =====================
    # PROPERTIES & UNITS
    # =====================

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "property_type",
            sa.Enum(
                "APARTMENT", "HOUSE", "STUDIO", "BEDSITTER", "VILLA", "TOWNHOUSE",
                "OFFICE", "SHOP", "WAREHOUSE", "LAND", "PLOT", "FARM",
                name="propertytype",
            ),
            nullable=False,
        ),
        sa.Column("has_units", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("rent", sa.Numeric(12, 2), nullable=True),
        sa.Column("deposit", sa.Numeric(12, 2), nullable=True),
        sa.Column("price", sa.Numeric(14, 2), nullable=True),
        sa.Column("price_type", sa.Enum("SALE", "LEASE", "PER_ACRE", name="pricetype"), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Integer(), nullable=True),
        sa.Column("area", sa.Numeric(10, 2), nullable=True),
        sa.Column("furnished", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("pets_allowed", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("features", sa.JSON(), nullable=False),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("neighborhood", sa.String(120), nullable=True),
        sa.Column("latitude", sa.Numeric(10, 7), nullable=True),
        sa.Column("longitude", sa.Numeric(10, 7), nullable=True),
        sa.Column(
            "availability",
            sa.Enum("AVAILABLE", "OCCUPIED", "MAINTENANCE", "UNAVAILABLE", name="propertyavailability"),
            nullable=False,
        ),
        sa.Column("max_occupancy", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("current_occupancy", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), nullable=False),
        sa.Column("created_by_role", sa.Enum(*USER_ROLE, name="userrole"), nullable=False),
        sa.Column(
            "approval_status",
            sa.Enum("PENDING", "APPROVED", "REJECTED", name="approvalstatus"),
            nullable=False,
        ),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("approved_by_id", sa.Integer(), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["agent_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["approved_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_properties_agent", "properties", ["agent_id"])
    op.create_index("ix_properties_created_by", "properties", ["created_by_id"])
    op.create_index("ix_properties_approval", "properties", ["approval_status", "availability"])
    op.create_index("ix_properties_city", "properties", ["city"])

    op.create_table(
        "units",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("unit_number", sa.String(50), nullable=False),
        sa.Column("floor", sa.Integer(), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=True),
        sa.Column("bathrooms", sa.Integer(), nullable=True),
        sa.Column("area", sa.Numeric(10, 2), nullable=True),
        sa.Column("rent", sa.Numeric(12, 2), nullable=False),
        sa.Column("deposit", sa.Numeric(12, 2), nullable=True),
        sa.Column("furnished", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("features", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "availability",
            sa.Enum("AVAILABLE", "OCCUPIED", "MAINTENANCE", name="unitavailability"),
            nullable=False,
        ),
        sa.Column("tenant_id", sa.Integer(), nullable=True),
        sa.Column("lease_start", sa.Date(), nullable=True),
        sa.Column("lease_end", sa.Date(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("property_id", "unit_number", name="uq_units_property_number"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tenant_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_units_property_availability", "units", ["property_id", "availability"])

    # =====================
    # LEASES & TENANTS
    # =====================

    op.create_table(
        "leases",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=True),
        sa.Column("tenant_user_id", sa.Integer(), nullable=False),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("rent_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("deposit_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("payment_due_day", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("status", sa.Enum(*TENANCY_STATUS, name="tenancystatus"), nullable=False),
        sa.Column("notice_period_days", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("late_fee_percentage", sa.Numeric(5, 2), nullable=False, server_default="5"),
        sa.Column("grace_period_days", sa.Integer(), nullable=False, server_default="3"),
        *_termination_stamps(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["tenant_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["agent_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["terminated_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_leases_status_end", "leases", ["status", "end_date"])
    op.create_index("ix_leases_property", "leases", ["property_id"])

    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=True),
        sa.Column("lease_id", sa.Integer(), nullable=False),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.Enum(*TENANCY_STATUS, name="tenancystatus"), nullable=False),
        sa.Column("lease_start", sa.Date(), nullable=False),
        sa.Column("lease_end", sa.Date(), nullable=False),
        sa.Column("monthly_rent", sa.Numeric(12, 2), nullable=False),
        sa.Column("deposit_paid", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("rent_due_day", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("notice_period_days", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("id_number", sa.String(50), nullable=True),
        sa.Column("emergency_contact_name", sa.String(255), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(50), nullable=True),
        sa.Column("emergency_contact_relationship", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_termination_stamps(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["lease_id"], ["leases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["agent_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["terminated_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_tenants_user_property_status", "tenants", ["user_id", "property_id", "status"])
    op.create_index("ix_tenants_agent", "tenants", ["agent_id"])
    op.create_index("ix_tenants_created_by", "tenants", ["created_by_id"])

    # =====================
    # PAYMENTS (written by the payment pipeline)
    # =====================

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tenant_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("recorded_by_id", sa.Integer(), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column(
            "payment_type",
            sa.Enum("RENT", "DEPOSIT", "UTILITY", "MAINTENANCE", "LATE_FEE", "OTHER", name="paymenttype"),
            nullable=False,
        ),
        sa.Column(
            "payment_method",
            sa.Enum("CASH", "BANK_TRANSFER", "MPESA", "CARD", "CHEQUE", name="paymentmethod"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum("PAID", "PENDING", "OVERDUE", "FAILED", "REFUNDED", name="paymentstatus"),
            nullable=False,
        ),
        sa.Column("period_month", sa.Integer(), nullable=True),
        sa.Column("period_year", sa.Integer(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("paid_date", sa.Date(), nullable=True),
        sa.Column("reference", sa.String(120), nullable=True),
        sa.Column("late_fee", sa.Numeric(12, 2), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["agent_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["recorded_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_payments_agent_status_paid", "payments", ["agent_id", "status", "paid_date"])
    op.create_index("ix_payments_recorded_by", "payments", ["recorded_by_id"])


def downgrade() -> None:
    """Drop all tables in reverse order."""
    op.drop_table("payments")
    op.drop_table("tenants")
    op.drop_table("leases")
    op.drop_table("units")
    op.drop_table("properties")
    op.drop_table("users")
