"""
MCP Server Repository

Database operations specific to the McpServer model.

Common Operations:
==================
- get_active_by_name()   → Gateway: resolve ``server_name`` inside a project
- list_active()          → Gateway: candidate servers for tool lookup
- find_by_tool()         → Gateway: first active server whose catalog has a tool
- name_exists()          → Registry: enforce per-project unique names

Registration Order:
===================
Tool lookup walks active servers oldest first. Ties on created_at are broken
by id so the order is stable between requests:

    SELECT * FROM mcp_servers
    WHERE project_id = :project_id AND is_active = true
    ORDER BY created_at ASC, id ASC
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.repositories.base import ProjectScopedRepository
from app.mcp.catalog import catalog_has_tool
from app.models.mcp_server import McpServer


class McpServerRepository(ProjectScopedRepository[McpServer]):
    """Repository for McpServer database operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(McpServer, session)

    # ═══════════════════════════════════════════════════════════════════════════
    # GATEWAY LOOKUPS (request path)
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_active_by_name(self, project_id: UUID, name: str) -> McpServer | None:
        """
        Get an active server by exact (case-sensitive) name within a project.

        SQL Generated:
            SELECT * FROM mcp_servers
            WHERE project_id = '...' AND name = 'github' AND is_active = true
        """
        result = await self.session.execute(
            select(McpServer).where(
                McpServer.project_id == project_id,
                McpServer.name == name,
                McpServer.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def list_active(self, project_id: UUID) -> list[McpServer]:
        """List a project's active servers in registration order."""
        result = await self.session.execute(
            select(McpServer)
            .where(
                McpServer.project_id == project_id,
                McpServer.is_active.is_(True),
            )
            .order_by(McpServer.created_at.asc(), McpServer.id.asc())
        )
        return list(result.scalars().all())

    async def find_by_tool(self, project_id: UUID, tool_name: str) -> McpServer | None:
        """
        Find the first active server whose cached catalog lists the tool.

        Catalog entries may be bare names or objects with a ``name``; both
        match. Servers with an empty catalog never match.
        """
        for server in await self.list_active(project_id):
            if catalog_has_tool(server.cached_tools, tool_name):
                return server
        return None

    # ═══════════════════════════════════════════════════════════════════════════
    # REGISTRY HELPERS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_by_name(self, project_id: UUID, name: str) -> McpServer | None:
        """Get a server by exact name within a project, active or not."""
        result = await self.session.execute(
            select(McpServer).where(
                McpServer.project_id == project_id,
                McpServer.name == name,
            )
        )
        return result.scalar_one_or_none()

    async def name_exists(
        self,
        project_id: UUID,
        name: str,
        exclude_id: UUID | None = None,
    ) -> bool:
        """
        Check if a server name is taken within a project.

        Args:
            project_id: Project to check in
            name: Server name (case-sensitive)
            exclude_id: Server to ignore (the one being renamed)
        """
        existing = await self.get_by_name(project_id, name)
        if existing is None:
            return False
        return exclude_id is None or existing.id != exclude_id
