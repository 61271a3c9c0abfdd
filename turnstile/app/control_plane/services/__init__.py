"""Control Plane Services.

Business logic layer for control plane operations.
"""

from app.control_plane.services.audit_log_service import AuditLogService
from app.control_plane.services.mcp_server_service import McpServerService
from app.control_plane.services.project_service import ProjectService
from app.control_plane.services.proxy_key_service import ProxyKeyService

__all__ = [
    "ProjectService",
    "McpServerService",
    "ProxyKeyService",
    "AuditLogService",
]
