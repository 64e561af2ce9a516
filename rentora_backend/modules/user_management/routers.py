"""User provisioning and administration routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.notifications import Notifier, get_notifier
from ...database import get_db
from ..auth.dependencies import AdminUser, AgentUser, CurrentUser
from ..auth.models import UserRole
from ..auth.schemas import EmployeePermissions, UserResponse
from ..commons import BaseResponse, PaginatedResponse, PaginationParams
from . import services
from .schemas import (
    AgentCreate,
    EmployeeCreate,
    ProvisionedUserResponse,
    UserStatusUpdate,
)

router = APIRouter(prefix="/users", tags=["Users"])

DB = Annotated[AsyncSession, Depends(get_db)]
NotifierDep = Annotated[Notifier, Depends(get_notifier)]


@router.post(
    "/agents",
    response_model=BaseResponse[ProvisionedUserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_agent(
    data: AgentCreate, current_user: AdminUser, db: DB, notifier: NotifierDep
):
    """Create an agent or landlord account."""
    user, temporary_password = await services.create_agent(
        db, current_user, data, notifier
    )
    return BaseResponse(
        message=f"{user.role.value.capitalize()} created successfully",
        data=ProvisionedUserResponse(
            user=UserResponse.model_validate(user),
            temporary_password=temporary_password,
        ),
    )


@router.post(
    "/employees",
    response_model=BaseResponse[ProvisionedUserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_employee(
    data: EmployeeCreate, current_user: AgentUser, db: DB, notifier: NotifierDep
):
    """Create an employee under the current agent or landlord."""
    user, temporary_password = await services.create_employee(
        db, current_user, data, notifier
    )
    return BaseResponse(
        message="Employee created successfully",
        data=ProvisionedUserResponse(
            user=UserResponse.model_validate(user),
            temporary_password=temporary_password,
        ),
    )


@router.get("/my-employees", response_model=BaseResponse[list[UserResponse]])
async def list_my_employees(current_user: AgentUser, db: DB):
    """Employees of the current agent or landlord."""
    employees = await services.list_my_employees(db, current_user)
    return BaseResponse(data=[UserResponse.model_validate(e) for e in employees])


@router.patch(
    "/employees/{employee_id}/permissions", response_model=BaseResponse[UserResponse]
)
async def update_employee_permissions(
    employee_id: int, data: EmployeePermissions, current_user: CurrentUser, db: DB
):
    """Replace an employee's capability flags."""
    employee = await services.update_employee_permissions(
        db, current_user, employee_id, data
    )
    return BaseResponse(
        message="Permissions updated successfully",
        data=UserResponse.model_validate(employee),
    )


@router.get("", response_model=BaseResponse[PaginatedResponse[UserResponse]])
async def list_users(
    current_user: AdminUser,
    db: DB,
    pagination: Annotated[PaginationParams, Depends()],
    role: UserRole | None = Query(None),
    is_active: bool | None = Query(None),
):
    """List all users."""
    users, total = await services.list_users(
        db, pagination, role=role, is_active=is_active
    )
    return BaseResponse(
        data=PaginatedResponse.build(
            [UserResponse.model_validate(u) for u in users],
            total,
            pagination,
        )
    )


@router.patch("/{user_id}/status", response_model=BaseResponse[UserResponse])
async def set_user_status(
    user_id: int, data: UserStatusUpdate, current_user: AdminUser, db: DB
):
    """Activate or deactivate an account."""
    user = await services.set_user_status(db, current_user, user_id, data.is_active)
    state = "activated" if user.is_active else "deactivated"
    return BaseResponse(
        message=f"User {state} successfully", data=UserResponse.model_validate(user)
    )
