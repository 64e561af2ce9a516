"""Reporting schemas for Rentora."""

from datetime import date

from pydantic import BaseModel, Field

from ..auth.schemas import EmployeePermissions, UserSummary

# ----- Hierarchy overview -----


class AgentStats(BaseModel):
    total_employees: int
    total_properties: int
    total_tenants: int
    total_revenue: float
    total_payments: int


class EmployeeBreakdown(BaseModel):
    """Activity of one employee under an agent."""

    employee: UserSummary
    tenants_created: int
    payments_recorded: int


class AgentHierarchyEntry(BaseModel):
    agent: UserSummary
    stats: AgentStats
    employees: list[EmployeeBreakdown] = Field(default_factory=list)


class PlatformSummary(BaseModel):
    total_agents: int
    total_employees: int
    total_properties: int
    total_tenants: int
    total_revenue: float


class AgentHierarchy(BaseModel):
    """Every agent/landlord on the platform with their company rollup."""

    agents: list[AgentHierarchyEntry]
    summary: PlatformSummary


# ----- Agent details -----


class MonthlyRevenue(BaseModel):
    month: int = Field(..., ge=1, le=12)
    total: float
    count: int


class AgentDetailStats(BaseModel):
    total_employees: int
    total_properties: int
    total_tenants: int
    active_properties: int
    occupancy_rate: float


class AgentDetails(BaseModel):
    agent: UserSummary
    employees: list[UserSummary]
    stats: AgentDetailStats
    year: int
    monthly_revenue: list[MonthlyRevenue]


# ----- Employee stats -----


class EmployeeStats(BaseModel):
    employee: UserSummary
    permissions: EmployeePermissions
    tenants_created: int
    payments_recorded: int
    total_payments_amount: float


# ----- Billing -----


class BillingRow(BaseModel):
    """Platform fee owed by one agent/landlord for the billing period."""

    agent: UserSummary
    employees: int
    properties: int
    tenants: int
    total_collected: float
    commission_rate: float
    platform_fee: float


class BillingSummary(BaseModel):
    start: date
    end: date
    commission_rate: float
    rows: list[BillingRow]
    total_agents: int
    total_collected: float
    total_platform_fee: float
