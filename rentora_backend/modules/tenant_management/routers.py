"""Tenant management API routes."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.notifications import Notifier, get_notifier
from ...database import get_db
from ..auth.dependencies import CurrentUser, StaffUser, TenancyManagerUser
from ..commons import BaseResponse, PaginatedResponse, PaginationParams
from . import services
from .models import TenancyStatus
from .schemas import (
    TenantCreate,
    TenantCreatedResponse,
    TenantResponse,
    TenantStats,
    TenantUpdate,
    TerminateRequest,
)

router = APIRouter(prefix="/tenants", tags=["Tenants"])

DB = Annotated[AsyncSession, Depends(get_db)]
Pagination = Annotated[PaginationParams, Depends()]


@router.post(
    "",
    response_model=BaseResponse[TenantCreatedResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_tenant(
    data: TenantCreate,
    current_user: StaffUser,
    db: DB,
    notifier: Annotated[Notifier, Depends(get_notifier)],
):
    """Onboard a tenant onto a property or unit."""
    tenant, temporary_password = await services.create_tenant(
        db, current_user, data, notifier
    )
    response = TenantCreatedResponse.model_validate(tenant)
    response.temporary_password = temporary_password
    return BaseResponse(message="Tenant created successfully", data=response)


@router.get("", response_model=BaseResponse[PaginatedResponse[TenantResponse]])
async def list_tenants(
    current_user: CurrentUser,
    db: DB,
    pagination: Pagination,
    tenant_status: TenancyStatus | None = Query(None, alias="status"),
    property_id: int | None = Query(None),
):
    """List tenants within the current user's scope."""
    tenants, total = await services.list_tenants(
        db, current_user, pagination, status=tenant_status, property_id=property_id
    )
    return BaseResponse(
        data=PaginatedResponse.build(
            [TenantResponse.model_validate(t) for t in tenants],
            total,
            pagination,
        )
    )


@router.get("/stats", response_model=BaseResponse[TenantStats])
async def get_tenant_stats(current_user: CurrentUser, db: DB):
    """Tenant counts by status."""
    stats = await services.get_tenant_stats(db, current_user)
    return BaseResponse(data=stats)


@router.get("/{tenant_id}", response_model=BaseResponse[TenantResponse])
async def get_tenant(tenant_id: int, current_user: CurrentUser, db: DB):
    """Get a tenant by ID."""
    tenant = await services.get_tenant(db, current_user, tenant_id)
    return BaseResponse(data=TenantResponse.model_validate(tenant))


@router.patch("/{tenant_id}", response_model=BaseResponse[TenantResponse])
async def update_tenant(
    tenant_id: int, data: TenantUpdate, current_user: StaffUser, db: DB
):
    """Update a tenant."""
    tenant = await services.update_tenant(db, current_user, tenant_id, data)
    return BaseResponse(
        message="Tenant updated successfully",
        data=TenantResponse.model_validate(tenant),
    )


@router.delete("/{tenant_id}", response_model=BaseResponse[TenantResponse])
async def delete_tenant(
    tenant_id: int,
    current_user: TenancyManagerUser,
    db: DB,
    notifier: Annotated[Notifier, Depends(get_notifier)],
    data: Annotated[TerminateRequest | None, Body()] = None,
):
    """Terminate a tenancy and free its unit or occupancy slot."""
    tenant = await services.terminate_tenant(
        db, current_user, tenant_id, data.reason if data else None, notifier
    )
    return BaseResponse(
        message="Tenant terminated successfully",
        data=TenantResponse.model_validate(tenant),
    )
