"""Property management API routes."""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.notifications import Notifier, get_notifier
from ...database import get_db
from ..auth.dependencies import (
    ApproverUser,
    CurrentUser,
    ListingUser,
    OptionalUser,
)
from ..commons import BaseResponse, PaginatedResponse, PaginationParams
from . import services
from .models import ApprovalStatus, PropertyAvailability, PropertyType
from .schemas import (
    PropertyCreate,
    PropertyResponse,
    PropertyUpdate,
    RejectRequest,
    UnitOccupyRequest,
    UnitsAddRequest,
    UnitStats,
    UnitUpdate,
)

router = APIRouter(prefix="/properties", tags=["Properties"])

DB = Annotated[AsyncSession, Depends(get_db)]
Pagination = Annotated[PaginationParams, Depends()]


def _page(properties, total: int, pagination: PaginationParams):
    return PaginatedResponse.build(
        [PropertyResponse.model_validate(p) for p in properties],
        total,
        pagination,
    )


# ----- Listings -----


@router.get("", response_model=BaseResponse[PaginatedResponse[PropertyResponse]])
async def browse_properties(
    viewer: OptionalUser,
    db: DB,
    pagination: Pagination,
    property_type: PropertyType | None = Query(None),
    city: str | None = Query(None),
    availability: PropertyAvailability | None = Query(None),
    min_rent: Decimal | None = Query(None, ge=0),
    max_rent: Decimal | None = Query(None, ge=0),
    bedrooms: int | None = Query(None, ge=0),
    search: str | None = Query(None),
    approval_status: ApprovalStatus | None = Query(None),
):
    """Browse approved listings. Admins may filter by approval status."""
    properties, total = await services.browse_properties(
        db,
        viewer,
        pagination,
        property_type=property_type,
        city=city,
        availability=availability,
        min_rent=min_rent,
        max_rent=max_rent,
        bedrooms=bedrooms,
        search=search,
        approval_status=approval_status,
    )
    return BaseResponse(data=_page(properties, total, pagination))


@router.get(
    "/pending", response_model=BaseResponse[PaginatedResponse[PropertyResponse]]
)
async def list_pending_properties(
    current_user: ApproverUser, db: DB, pagination: Pagination
):
    """Pending properties awaiting the actor's approval."""
    properties, total = await services.list_pending_properties(
        db, current_user, pagination
    )
    return BaseResponse(data=_page(properties, total, pagination))


@router.get(
    "/my-properties", response_model=BaseResponse[PaginatedResponse[PropertyResponse]]
)
async def list_my_properties(
    current_user: CurrentUser,
    db: DB,
    pagination: Pagination,
    approval_status: ApprovalStatus | None = Query(None),
):
    """Properties the current user owns or entered."""
    properties, total = await services.list_my_properties(
        db, current_user, pagination, approval_status
    )
    return BaseResponse(data=_page(properties, total, pagination))


@router.get(
    "/company-properties",
    response_model=BaseResponse[PaginatedResponse[PropertyResponse]],
)
async def list_company_properties(
    current_user: CurrentUser,
    db: DB,
    pagination: Pagination,
    approval_status: ApprovalStatus | None = Query(None),
):
    """Properties across the current user's company."""
    properties, total = await services.list_company_properties(
        db, current_user, pagination, approval_status
    )
    return BaseResponse(data=_page(properties, total, pagination))


# ----- Single property -----


@router.post(
    "",
    response_model=BaseResponse[PropertyResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_property(data: PropertyCreate, current_user: ListingUser, db: DB):
    """Create a new property."""
    property_obj = await services.create_property(db, current_user, data)
    return BaseResponse(
        message="Property created successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.get("/{property_id}", response_model=BaseResponse[PropertyResponse])
async def get_property(property_id: int, viewer: OptionalUser, db: DB):
    """Get a property by ID."""
    property_obj = await services.get_property_for_viewer(db, viewer, property_id)
    return BaseResponse(data=PropertyResponse.model_validate(property_obj))


@router.patch("/{property_id}", response_model=BaseResponse[PropertyResponse])
async def update_property(
    property_id: int, data: PropertyUpdate, current_user: CurrentUser, db: DB
):
    """Update a property."""
    property_obj = await services.update_property(db, current_user, property_id, data)
    return BaseResponse(
        message="Property updated successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.delete("/{property_id}", response_model=BaseResponse[None])
async def delete_property(property_id: int, current_user: ApproverUser, db: DB):
    """Delete a property."""
    await services.delete_property(db, current_user, property_id)
    return BaseResponse(message="Property deleted successfully")


@router.patch("/{property_id}/approve", response_model=BaseResponse[PropertyResponse])
async def approve_property(
    property_id: int,
    current_user: ApproverUser,
    db: DB,
    notifier: Annotated[Notifier, Depends(get_notifier)],
):
    """Approve a pending property."""
    property_obj = await services.approve_property(
        db, current_user, property_id, notifier
    )
    return BaseResponse(
        message="Property approved successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.patch("/{property_id}/reject", response_model=BaseResponse[PropertyResponse])
async def reject_property(
    property_id: int,
    data: RejectRequest,
    current_user: ApproverUser,
    db: DB,
    notifier: Annotated[Notifier, Depends(get_notifier)],
):
    """Reject a pending property."""
    property_obj = await services.reject_property(
        db, current_user, property_id, data.reason, notifier
    )
    return BaseResponse(
        message="Property rejected",
        data=PropertyResponse.model_validate(property_obj),
    )


# ----- Units -----


@router.post(
    "/{property_id}/units",
    response_model=BaseResponse[PropertyResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_units(
    property_id: int, data: UnitsAddRequest, current_user: CurrentUser, db: DB
):
    """Add units to a property."""
    property_obj = await services.add_units(db, current_user, property_id, data.units)
    return BaseResponse(
        message=f"{len(data.units)} unit(s) added successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.get("/{property_id}/units/stats", response_model=BaseResponse[UnitStats])
async def get_unit_stats(property_id: int, current_user: CurrentUser, db: DB):
    """Occupancy statistics of a property's units."""
    stats = await services.get_unit_stats(db, current_user, property_id)
    return BaseResponse(data=stats)


@router.patch(
    "/{property_id}/units/{unit_id}", response_model=BaseResponse[PropertyResponse]
)
async def update_unit(
    property_id: int,
    unit_id: int,
    data: UnitUpdate,
    current_user: CurrentUser,
    db: DB,
):
    """Update a unit."""
    property_obj = await services.update_unit(
        db, current_user, property_id, unit_id, data
    )
    return BaseResponse(
        message="Unit updated successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.delete(
    "/{property_id}/units/{unit_id}", response_model=BaseResponse[PropertyResponse]
)
async def delete_unit(
    property_id: int, unit_id: int, current_user: CurrentUser, db: DB
):
    """Delete a vacant unit."""
    property_obj = await services.delete_unit(db, current_user, property_id, unit_id)
    return BaseResponse(
        message="Unit deleted successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.patch(
    "/{property_id}/units/{unit_id}/occupy",
    response_model=BaseResponse[PropertyResponse],
)
async def occupy_unit(
    property_id: int,
    unit_id: int,
    data: UnitOccupyRequest,
    current_user: CurrentUser,
    db: DB,
):
    """Assign a tenant to a unit."""
    property_obj = await services.occupy_unit(
        db,
        current_user,
        property_id,
        unit_id,
        tenant_id=data.tenant_id,
        lease_start=data.lease_start,
        lease_end=data.lease_end,
    )
    return BaseResponse(
        message="Unit occupied successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.patch(
    "/{property_id}/units/{unit_id}/vacate",
    response_model=BaseResponse[PropertyResponse],
)
async def vacate_unit(
    property_id: int, unit_id: int, current_user: CurrentUser, db: DB
):
    """Vacate a unit."""
    property_obj = await services.vacate_unit(db, current_user, property_id, unit_id)
    return BaseResponse(
        message="Unit vacated successfully",
        data=PropertyResponse.model_validate(property_obj),
    )
