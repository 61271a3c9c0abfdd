"""
Project Repository

Database operations specific to the Project model.

Common Operations:
==================
- get_owned()          → Project by id, only if the owner matches
- get_owned_with_servers() → Same, with servers eagerly loaded
- list_by_owner()      → An owner's projects, newest first
- count_by_owner()     → Number of projects an owner has

Ownership:
==========
The control plane never loads a project by id alone. Every lookup pairs the
id with the caller's owner id so that another operator's project behaves as
if it did not exist.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.repositories.base import BaseRepository
from app.models.project import Project


class ProjectRepository(BaseRepository[Project]):
    """Repository for Project database operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Project, session)

    # ═══════════════════════════════════════════════════════════════════════════
    # OWNERSHIP-SCOPED LOOKUPS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_owned(self, project_id: UUID, owner_id: str) -> Project | None:
        """
        Get a project by id if it belongs to the owner.

        SQL Generated:
            SELECT * FROM projects WHERE id = '...' AND owner_id = 'user_2f9c1a'
        """
        result = await self.session.execute(
            select(Project).where(
                Project.id == project_id,
                Project.owner_id == owner_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_owned_with_servers(
        self, project_id: UUID, owner_id: str
    ) -> Project | None:
        """Get an owned project with its servers loaded (registration order)."""
        result = await self.session.execute(
            select(Project)
            .options(selectinload(Project.mcp_servers))
            .where(
                Project.id == project_id,
                Project.owner_id == owner_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_owner(
        self,
        owner_id: str,
        offset: int = 0,
        limit: int = 100,
    ) -> list[Project]:
        """List an owner's projects, newest first."""
        return await self.list(
            offset=offset,
            limit=limit,
            filters={"owner_id": owner_id},
            order_by="created_at",
            order_desc=True,
        )

    async def count_by_owner(self, owner_id: str) -> int:
        """Count an owner's projects."""
        return await self.count(filters={"owner_id": owner_id})

    async def get_owner_id(self, project_id: UUID) -> str | None:
        """Get the owner of a project without loading the row."""
        result = await self.session.execute(
            select(Project.owner_id).where(Project.id == project_id)
        )
        return result.scalar_one_or_none()
