"""
Repository Pattern Implementations

This module provides the Repository pattern for database operations.
Repositories encapsulate database queries and provide a clean API for data access.

Repository Hierarchy:
=====================
    BaseRepository[ModelType]                 ← Generic CRUD operations
         │
         ├── ProjectRepository                ← Owner-scoped project queries
         │
         └── ProjectScopedRepository[Model]   ← Every query filtered by project
                  │
                  ├── McpServerRepository     ← Name/tool resolution, catalogs
                  ├── ProxyKeyRepository      ← Key-hash authentication
                  └── AuditLogRepository      ← Decision log and reporting

Usage Example:
==============
    from app.db import get_db
    from app.db.repositories import McpServerRepository, ProxyKeyRepository

    async def resolve(db: AsyncSession, key_hash: str, tool: str):
        key = await ProxyKeyRepository(db).get_by_hash(key_hash)
        if key is None or not key.is_active:
            raise AuthenticationError("Invalid API key")

        return await McpServerRepository(db).find_by_tool(key.project_id, tool)
"""

from app.db.repositories.audit_log_repository import AuditLogRepository
from app.db.repositories.base import BaseRepository, ProjectScopedRepository
from app.db.repositories.mcp_server_repository import McpServerRepository
from app.db.repositories.project_repository import ProjectRepository
from app.db.repositories.proxy_key_repository import ProxyKeyRepository

__all__ = [
    # Base classes
    "BaseRepository",
    "ProjectScopedRepository",
    # Entity-specific repositories
    "ProjectRepository",
    "McpServerRepository",
    "ProxyKeyRepository",
    "AuditLogRepository",
]
