"""
MCP Server Schemas

Request/response models for server registration endpoints.

Field presence matters on update: a field that is omitted is left alone,
while ``authToken: null`` (or an empty string) removes the stored credential.
Name and URL emptiness is checked by the service so that each case gets its
own error code (INVALID_NAME, INVALID_BASE_URL, INVALID_URL_FORMAT).
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from app.schemas.common import BaseSchema


class McpServerCreate(BaseSchema):
    """Schema for registering an MCP server."""

    name: str = Field(..., max_length=255, description="Name callers use as server_name")
    base_url: str = Field(..., max_length=2048, description="MCP endpoint URL")
    auth_token: str | None = Field(
        None, description="Bearer token for the upstream server (optional)"
    )


class McpServerUpdate(BaseSchema):
    """Schema for updating an MCP server (all fields optional)."""

    name: str | None = Field(None, max_length=255)
    base_url: str | None = Field(None, max_length=2048)
    auth_token: str | None = None
    is_active: bool | None = None


class McpServerResponse(BaseSchema):
    """Schema for MCP server response.

    The upstream credential is never returned; ``hasAuthToken`` tells
    whether one is configured.
    """

    id: UUID
    project_id: UUID
    name: str
    base_url: str
    has_auth_token: bool
    cached_tools: list[Any]
    tool_names: list[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime
