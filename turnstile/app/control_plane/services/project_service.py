"""
Project Service

Business logic for project management. Projects belong to the operator
whose JWT created them; all other resources hang off a project.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ProjectNotFoundError, ValidationError
from app.core.logging import logger
from app.db.repositories import ProjectRepository
from app.models.project import Project
from app.schemas.mcp_server import McpServerResponse
from app.schemas.project import ProjectDetailResponse, ProjectResponse


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Project name is required", error_code="INVALID_NAME")
    return cleaned


class ProjectService:
    """Service for project operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.repo = ProjectRepository(session)

    async def create_project(self, owner_id: str, name: str) -> ProjectResponse:
        """Create a project owned by the caller.

        Raises:
            ValidationError: INVALID_NAME if the name is blank
        """
        project = await self.repo.create(owner_id=owner_id, name=_clean_name(name))
        logger.info("Project created", project_id=str(project.id), owner_id=owner_id)
        return ProjectResponse.model_validate(project)

    async def list_projects(
        self,
        owner_id: str,
        offset: int = 0,
        limit: int = 100,
    ) -> tuple[list[ProjectResponse], int]:
        """List the caller's projects, newest first.

        Returns:
            Tuple of (projects, total_count)
        """
        projects = await self.repo.list_by_owner(owner_id, offset=offset, limit=limit)
        total = await self.repo.count_by_owner(owner_id)
        return [ProjectResponse.model_validate(p) for p in projects], total

    async def get_project_detail(self, project: Project) -> ProjectDetailResponse:
        """Get a project together with its servers in registration order."""
        loaded = await self.repo.get_owned_with_servers(project.id, project.owner_id)
        if loaded is None:
            raise ProjectNotFoundError(str(project.id))

        return ProjectDetailResponse(
            **ProjectResponse.model_validate(loaded).model_dump(),
            servers=[McpServerResponse.model_validate(s) for s in loaded.mcp_servers],
        )

    async def rename_project(self, project: Project, name: str) -> ProjectResponse:
        """Rename a project."""
        project = await self.repo.update_instance(project, name=_clean_name(name))
        return ProjectResponse.model_validate(project)

    async def delete_project(self, project: Project) -> None:
        """Delete a project with its servers, keys and audit log."""
        project_id = str(project.id)
        await self.repo.delete_instance(project)
        logger.info("Project deleted", project_id=project_id)
