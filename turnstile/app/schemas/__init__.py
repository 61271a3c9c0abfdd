"""
Pydantic Schemas

Request/response models for API endpoints.
"""

from app.schemas.audit_log import AuditLogQueryParams, AuditLogResponse
from app.schemas.common import (
    DeletedResponse,
    ErrorResponse,
    GatewayErrorResponse,
    HealthResponse,
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
)
from app.schemas.gateway import (
    ForwardResult,
    GatewayResult,
    ProxyKeyContext,
    ResolvedTarget,
)
from app.schemas.mcp_server import (
    McpServerCreate,
    McpServerResponse,
    McpServerUpdate,
)
from app.schemas.project import (
    ProjectCreate,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectUpdate,
)
from app.schemas.proxy_key import (
    ProxyKeyCreate,
    ProxyKeyCreatedResponse,
    ProxyKeyResponse,
    ProxyKeyUpdate,
)

__all__ = [
    # Common
    "DeletedResponse",
    "ErrorResponse",
    "GatewayErrorResponse",
    "HealthResponse",
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    # Projects
    "ProjectCreate",
    "ProjectDetailResponse",
    "ProjectResponse",
    "ProjectUpdate",
    # MCP servers
    "McpServerCreate",
    "McpServerResponse",
    "McpServerUpdate",
    # Proxy keys
    "ProxyKeyCreate",
    "ProxyKeyCreatedResponse",
    "ProxyKeyResponse",
    "ProxyKeyUpdate",
    # Audit logs
    "AuditLogQueryParams",
    "AuditLogResponse",
    # Gateway
    "ForwardResult",
    "GatewayResult",
    "ProxyKeyContext",
    "ResolvedTarget",
]
