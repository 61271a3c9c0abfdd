"""
Gateway Schemas

Models passed between the stages of the gateway pipeline.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ProxyKeyContext(BaseModel):
    """Context derived from a validated proxy key.

    This is everything the gateway knows about the caller after key
    authentication. All later lookups are scoped by ``project_id``.
    """

    proxy_key_id: UUID = Field(..., description="The proxy key ID")
    project_id: UUID = Field(..., description="Project the key belongs to")
    owner_id: str = Field(..., description="Owner of the project")
    label: str = Field(..., description="Key label")
    allowed_tools: list[str] = Field(default_factory=list)
    blacklist_words: list[str] = Field(default_factory=list)


@dataclass
class ResolvedTarget:
    """Server (and possibly tool) a request resolved to."""

    server_id: UUID
    server_name: str
    base_url: str
    auth_token: Optional[str] = field(default=None, repr=False)
    tool_name: Optional[str] = None


@dataclass
class ForwardResult:
    """Response received from an upstream MCP server."""

    status_code: int
    content: bytes
    content_type: Optional[str] = None
    response_time_ms: float = 0.0

    @property
    def is_success(self) -> bool:
        """Check if the upstream answered with a 2xx status."""
        return 200 <= self.status_code < 300

    def body_for_audit(self) -> Any:
        """Decoded JSON body, or the raw text wrapped in an object."""
        text = self.content.decode("utf-8", errors="replace")
        try:
            return json.loads(text)
        except ValueError:
            return {"raw": text}


@dataclass
class GatewayResult:
    """Final response the gateway returns to the caller."""

    status_code: int
    content: bytes
    content_type: str = "application/json"

    @classmethod
    def from_forward(cls, result: ForwardResult) -> "GatewayResult":
        """Relay an upstream response verbatim."""
        return cls(
            status_code=result.status_code,
            content=result.content,
            content_type=result.content_type or "application/json",
        )

    @classmethod
    def from_body(cls, status_code: int, body: dict[str, Any]) -> "GatewayResult":
        """Build a JSON response from a dict."""
        return cls(
            status_code=status_code,
            content=json.dumps(body).encode("utf-8"),
        )
