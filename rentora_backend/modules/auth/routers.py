"""Authentication API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import NotFoundError
from ...database import get_db
from ..commons import BaseResponse
from . import crud, services
from .dependencies import PasswordChangeUser
from .schemas import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=BaseResponse[TokenResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Register a new seeker account."""
    user, tokens = await services.register_seeker(db, data)
    return BaseResponse(message=f"Welcome, {user.first_name}!", data=tokens)


@router.post("/login", response_model=BaseResponse[TokenResponse])
async def login(
    login_data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Authenticate user and return an access token."""
    user, tokens = await services.authenticate_user(
        db=db,
        email=login_data.email,
        password=login_data.password,
    )
    return BaseResponse(message=f"Welcome back, {user.first_name}!", data=tokens)


@router.get("/me", response_model=BaseResponse[UserResponse])
async def get_current_user_info(
    current_user: PasswordChangeUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get current user's profile."""
    user = await crud.get_user_by_id(db, current_user.id)
    if not user:
        raise NotFoundError("User not found")
    return BaseResponse(data=UserResponse.model_validate(user))


@router.post("/change-password", response_model=BaseResponse[UserResponse])
async def change_password(
    current_user: PasswordChangeUser,
    password_data: ChangePasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Change current user's password."""
    user = await services.change_password(
        db=db,
        user_id=current_user.id,
        current_password=password_data.current_password,
        new_password=password_data.new_password,
    )
    return BaseResponse(
        message="Password changed successfully",
        data=UserResponse.model_validate(user),
    )
