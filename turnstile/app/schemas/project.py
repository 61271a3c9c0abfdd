"""
Project Schemas

Request/response models for project endpoints.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.common import BaseSchema
from app.schemas.mcp_server import McpServerResponse


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    name: str = Field(..., min_length=1, max_length=255, description="Project name")


class ProjectUpdate(BaseModel):
    """Schema for renaming a project."""

    name: str = Field(..., min_length=1, max_length=255)


class ProjectResponse(BaseSchema):
    """Schema for project response."""

    id: UUID
    owner_id: str
    name: str
    created_at: datetime
    updated_at: datetime


class ProjectDetailResponse(ProjectResponse):
    """Project with its registered servers."""

    servers: list[McpServerResponse] = Field(default_factory=list)
