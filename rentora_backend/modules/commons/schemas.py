"""Response envelopes and list paging shared by every router."""

from datetime import datetime
from enum import Enum
from math import ceil
from typing import Any, Generic, Literal, TypeVar

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from ...core.utils import utc_now

T = TypeVar("T")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class BaseResponse(BaseModel, Generic[T]):
    """Success envelope: ``{"status": "success", "message", "data"}``."""

    status: Literal["success"] = "success"
    message: str | None = None
    data: T | None = None
    timestamp: datetime = Field(default_factory=utc_now)


class ErrorResponse(BaseModel):
    """Failure envelope. ``details`` is omitted when there is nothing to add."""

    status: Literal["error"] = "error"
    message: str
    error: str
    data: None = None
    details: dict[str, Any] | None = None

    def body(self) -> dict[str, Any]:
        content = self.model_dump(mode="json", exclude={"details"})
        if self.details:
            content["details"] = jsonable_encoder(self.details)
        return content


class PaginationParams(BaseModel):
    """Query parameters for list endpoints, injected with ``Depends()``."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)
    sort_field: str | None = None
    sort_direction: SortDirection = SortDirection.DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    total_pages: int = 0

    @classmethod
    def build(cls, items: list, total: int, pagination: PaginationParams):
        return cls(
            items=items,
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=ceil(total / pagination.page_size),
        )
