"""Envelopes and paging shared across modules."""

from .schemas import (
    BaseResponse,
    ErrorResponse,
    PaginatedResponse,
    PaginationParams,
    SortDirection,
)

__all__ = [
    "BaseResponse",
    "ErrorResponse",
    "PaginatedResponse",
    "PaginationParams",
    "SortDirection",
]
