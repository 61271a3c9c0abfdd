"""
Common Schemas

Shared schemas used across the application.
"""

from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


DataT = TypeVar("DataT")


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Fields are exposed in camelCase on the wire (``baseUrl``, ``isActive``)
    and accepted in either camelCase or snake_case on input.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class PaginationParams(BaseModel):
    """Pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number")
    per_page: int = Field(default=20, ge=1, le=100, description="Items per page")

    @property
    def offset(self) -> int:
        """Calculate offset for database query."""
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        """Get limit for database query."""
        return self.per_page


class PaginationMeta(BaseSchema):
    """Pagination metadata in response."""

    page: int
    per_page: int
    total: int
    total_pages: int

    @classmethod
    def create(cls, page: int, per_page: int, total: int) -> "PaginationMeta":
        """Create pagination meta from parameters."""
        total_pages = (total + per_page - 1) // per_page if per_page > 0 else 0
        return cls(
            page=page,
            per_page=per_page,
            total=total,
            total_pages=total_pages,
        )


class PaginatedResponse(BaseModel, Generic[DataT]):
    """Generic paginated response."""

    data: list[DataT]
    pagination: PaginationMeta


class DeletedResponse(BaseModel):
    """Response for a hard delete."""

    message: str
    id: str


class ErrorDetail(BaseModel):
    """Error detail in control-plane responses."""

    code: str
    message: str
    details: Optional[dict[str, Any]] = None
    hint: Optional[str] = None


class ErrorResponse(BaseModel):
    """Control-plane error response schema."""

    error: ErrorDetail


class GatewayErrorResponse(BaseModel):
    """Gateway rejection body."""

    error: str
    code: str
    hint: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    service: str = "turnstile"
    version: str = "0.1.0"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
