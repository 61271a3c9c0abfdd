"""
Proxy Key Schemas

Request/response models for proxy key endpoints.

Policy fields:
- allowedTools: tool names the key may call; null or [] allows every tool
- blacklistWords: words that may not appear in a request body; null or []
  disables filtering
"""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.schemas.common import BaseSchema


class ProxyKeyCreate(BaseSchema):
    """Schema for issuing a proxy key."""

    label: str = Field(..., max_length=255, description="Human-readable label")
    allowed_tools: list[str] | None = Field(
        None, description="Tools this key may invoke (null/empty = all)"
    )
    blacklist_words: list[str] | None = Field(
        None, description="Words that block a request when present (case-insensitive)"
    )


class ProxyKeyUpdate(BaseSchema):
    """Schema for updating a proxy key (omitted fields are unchanged)."""

    label: str | None = Field(None, max_length=255)
    allowed_tools: list[str] | None = None
    blacklist_words: list[str] | None = None
    is_active: bool | None = None


class ProxyKeyResponse(BaseSchema):
    """Schema for proxy key response (masked, without the key itself)."""

    id: UUID
    project_id: UUID
    label: str
    key_prefix: str
    allowed_tools: list[str] | None
    blacklist_words: list[str] | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProxyKeyCreatedResponse(ProxyKeyResponse):
    """Schema for a newly issued proxy key (includes the actual key).

    IMPORTANT: The `key` field is only shown once at creation time.
    It cannot be retrieved again.
    """

    key: str
