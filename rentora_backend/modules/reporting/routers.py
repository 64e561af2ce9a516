"""Hierarchy and billing report routes."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import AdminUser, CurrentUser
from ..commons import BaseResponse
from . import services
from .schemas import AgentDetails, AgentHierarchy, BillingSummary, EmployeeStats

router = APIRouter(prefix="/hierarchy", tags=["Hierarchy"])

DB = Annotated[AsyncSession, Depends(get_db)]


@router.get("/agents", response_model=BaseResponse[AgentHierarchy])
async def get_agent_hierarchy(current_user: AdminUser, db: DB):
    """Every agent and landlord with their company rollup."""
    hierarchy = await services.get_agent_hierarchy(db)
    return BaseResponse(data=hierarchy)


@router.get("/agent/{agent_id}", response_model=BaseResponse[AgentDetails])
async def get_agent_details(agent_id: int, current_user: CurrentUser, db: DB):
    """One agent's company, occupancy and monthly revenue."""
    details = await services.get_agent_details(db, current_user, agent_id)
    return BaseResponse(data=details)


@router.get("/employee/{employee_id}", response_model=BaseResponse[EmployeeStats])
async def get_employee_stats(employee_id: int, current_user: CurrentUser, db: DB):
    """Activity of one employee."""
    stats = await services.get_employee_stats(db, current_user, employee_id)
    return BaseResponse(data=stats)


@router.get("/billing", response_model=BaseResponse[BillingSummary])
async def get_billing_summary(
    current_user: CurrentUser,
    db: DB,
    start: date | None = Query(None, description="First day of the period"),
    end: date | None = Query(None, description="Last day of the period"),
):
    """Platform commission per agent for a period (default: current month)."""
    summary = await services.get_billing_summary(db, current_user, start, end)
    return BaseResponse(data=summary)
