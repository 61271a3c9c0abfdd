"""
Turnstile SQLAlchemy Models

This package contains all database models for the MCP key-proxy gateway.

Model Hierarchy:
================
    Project (owned by one operator)
       ├── MCP Servers (upstream endpoints + cached tool catalogs)
       ├── Proxy Keys (caller credentials + allow-list/blacklist policy)
       └── Audit Logs (one entry per gateway decision)

Models Overview:
================
- Base: Base class and mixins (timestamps, enum validation)
- Project: Tenant boundary for all other records
- McpServer: Registered upstream MCP server
- ProxyKey: Credential issued to callers
- AuditLog: Record of every gateway decision

Usage:
======
    from app.models import Project, McpServer, ProxyKey, AuditLog

    project.mcp_servers  # Servers in registration order
    project.proxy_keys   # Issued keys
"""

from app.models.audit_log import AuditLog
from app.models.base import Base, EnumValidationMixin, TimestampMixin
from app.models.mcp_server import McpServer
from app.models.project import Project
from app.models.proxy_key import ProxyKey

__all__ = [
    # Base classes and mixins
    "Base",
    "TimestampMixin",
    "EnumValidationMixin",
    # Core models
    "Project",
    "McpServer",
    "ProxyKey",
    "AuditLog",
]
