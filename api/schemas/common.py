"""Common Pydantic schemas shared across the API."""

from datetime import datetime
from typing import Any, Generic, TypeVar, Optional
from pydantic import BaseModel, Field


T = TypeVar("T")


class PaginationParams(BaseModel):
    """Pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    limit: int = Field(default=10, ge=1, description="Items per page")

    @property
    def offset(self) -> int:
        """Calculate offset from page and limit."""
        return (self.page - 1) * self.limit


class Pagination(BaseModel):
    """Pagination block returned next to a page of results."""

    page: int = Field(ge=1, description="Current page number")
    limit: int = Field(ge=1, description="Items per page")
    total: int = Field(ge=0, description="Total number of items across all pages")
    pages: int = Field(ge=0, description="Total number of pages")

    @classmethod
    def create(cls, total: int, params: PaginationParams) -> "Pagination":
        return cls(
            page=params.page,
            limit=params.limit,
            total=total,
            pages=(total + params.limit - 1) // params.limit,
        )


class Envelope(BaseModel, Generic[T]):
    """Success envelope: `{success, message?, data?}`."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class ListEnvelope(Envelope[list[T]], Generic[T]):
    """Envelope for an unpaginated list."""

    count: int = 0


class PageEnvelope(Envelope[list[T]], Generic[T]):
    """Envelope for one page of a list."""

    pagination: Pagination


class MessageResponse(BaseModel):
    """Envelope carrying only a message."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Failure envelope."""

    success: bool = False
    message: str = Field(description="Human readable error")
    errors: Optional[list[Any]] = Field(None, description="Per-field validation errors")


class TimestampMixin(BaseModel):
    """Mixin for timestamp fields."""

    created_at: datetime = Field(description="Timestamp when the resource was created")
    updated_at: datetime = Field(description="Timestamp when the resource was last updated")


class UserSummary(BaseModel):
    """Minimal user reference embedded in other resources."""

    id: int
    email: str

    class Config:
        from_attributes = True
