"""
Project Management Endpoints

CRUD operations for the caller's projects.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.control_plane.api.dependencies import CurrentOwner, DbSession, OwnedProject
from app.control_plane.api.utils import paginate
from app.control_plane.services import ProjectService
from app.schemas.common import DeletedResponse, PaginatedResponse, PaginationParams
from app.schemas.project import (
    ProjectCreate,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectUpdate,
)

router = APIRouter()


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
    description="Create a new project owned by the authenticated operator.",
)
async def create_project(
    data: ProjectCreate,
    owner_id: CurrentOwner,
    db: DbSession,
) -> ProjectResponse:
    """Create a new project."""
    service = ProjectService(db)
    return await service.create_project(owner_id, data.name)


@router.get(
    "",
    response_model=PaginatedResponse[ProjectResponse],
    summary="List projects",
    description="List the authenticated operator's projects, newest first.",
)
async def list_projects(
    owner_id: CurrentOwner,
    db: DbSession,
    pagination: Annotated[PaginationParams, Depends()],
) -> PaginatedResponse[ProjectResponse]:
    """List the caller's projects."""
    service = ProjectService(db)
    projects, total = await service.list_projects(
        owner_id, offset=pagination.offset, limit=pagination.limit
    )
    return paginate(projects, pagination.page, pagination.per_page, total)


@router.get(
    "/{project_id}",
    response_model=ProjectDetailResponse,
    summary="Get project",
    description="Retrieve a project with its registered MCP servers.",
)
async def get_project(project: OwnedProject, db: DbSession) -> ProjectDetailResponse:
    """Get project details.

    Raises:
        404: Project not found (or owned by someone else)
    """
    return await ProjectService(db).get_project_detail(project)


@router.put(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Rename project",
)
async def update_project(
    data: ProjectUpdate,
    project: OwnedProject,
    db: DbSession,
) -> ProjectResponse:
    """Rename a project."""
    return await ProjectService(db).rename_project(project, data.name)


@router.delete(
    "/{project_id}",
    response_model=DeletedResponse,
    summary="Delete project",
    description="Delete a project together with its servers, keys and audit log.",
)
async def delete_project(project: OwnedProject, db: DbSession) -> DeletedResponse:
    """Delete a project."""
    project_id = str(project.id)
    await ProjectService(db).delete_project(project)
    return DeletedResponse(message="Project deleted", id=project_id)
