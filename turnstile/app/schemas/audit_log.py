"""
Audit Log Schemas

Response and query models for the audit-log reporting endpoints.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from app.config.constants import (
    AUDIT_LOG_DEFAULT_PAGE_SIZE,
    AUDIT_LOG_MAX_PAGE_SIZE,
    AuditStatus,
)
from app.schemas.common import BaseSchema


class AuditLogQueryParams(BaseModel):
    """Filters and pagination for listing audit logs."""

    page: int = Field(default=1, ge=1)
    per_page: int = Field(
        default=AUDIT_LOG_DEFAULT_PAGE_SIZE, ge=1, le=AUDIT_LOG_MAX_PAGE_SIZE
    )
    status: AuditStatus | None = None
    server_name: str | None = None
    tool_name: str | None = None
    proxy_key_id: UUID | None = None

    @property
    def offset(self) -> int:
        """Calculate offset for database query."""
        return (self.page - 1) * self.per_page


class AuditLogResponse(BaseSchema):
    """Schema for one audit log entry."""

    id: UUID
    project_id: UUID
    proxy_key_id: UUID | None
    user_id: str | None
    server_name: str | None
    tool_name: str | None
    status: str
    error_code: str | None
    request_body: Any
    response_body: Any
    request_id: str | None
    latency_ms: int | None
    created_at: datetime
