"""
Proxy Key Management Endpoints

Issue, inspect, restrict and revoke proxy keys for a project.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.control_plane.api.dependencies import DbSession, OwnedProject
from app.control_plane.api.utils import paginate, validate_uuid
from app.control_plane.services import ProxyKeyService
from app.schemas.common import DeletedResponse, PaginatedResponse, PaginationParams
from app.schemas.proxy_key import (
    ProxyKeyCreate,
    ProxyKeyCreatedResponse,
    ProxyKeyResponse,
    ProxyKeyUpdate,
)

router = APIRouter()


@router.post(
    "/{project_id}/keys",
    response_model=ProxyKeyCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue proxy key",
    description="""
Issue a new proxy key for the project.

**IMPORTANT:** The `key` field in the response is only shown once.
Store it securely - it cannot be retrieved again.
    """,
)
async def issue_key(
    data: ProxyKeyCreate,
    project: OwnedProject,
    db: DbSession,
) -> ProxyKeyCreatedResponse:
    """Issue a proxy key."""
    return await ProxyKeyService(db).issue_key(project, data)


@router.get(
    "/{project_id}/keys",
    response_model=PaginatedResponse[ProxyKeyResponse],
    summary="List proxy keys",
    description="List the project's keys (masked), newest first.",
)
async def list_keys(
    project: OwnedProject,
    db: DbSession,
    pagination: Annotated[PaginationParams, Depends()],
) -> PaginatedResponse[ProxyKeyResponse]:
    """List proxy keys."""
    keys, total = await ProxyKeyService(db).list_keys(
        project, offset=pagination.offset, limit=pagination.limit
    )
    return paginate(keys, pagination.page, pagination.per_page, total)


@router.get(
    "/{project_id}/keys/{key_id}",
    response_model=ProxyKeyResponse,
    summary="Get proxy key",
)
async def get_key(key_id: str, project: OwnedProject, db: DbSession) -> ProxyKeyResponse:
    """Get one proxy key (masked)."""
    return await ProxyKeyService(db).get_key(project, validate_uuid(key_id, "key_id"))


@router.patch(
    "/{project_id}/keys/{key_id}",
    response_model=ProxyKeyResponse,
    summary="Update proxy key",
    description="""
Update a key's `label`, `allowedTools`, `blacklistWords` or `isActive`.
Omitted fields are unchanged; an empty list removes the restriction.
    """,
)
async def update_key(
    key_id: str,
    data: ProxyKeyUpdate,
    project: OwnedProject,
    db: DbSession,
) -> ProxyKeyResponse:
    """Update a proxy key."""
    return await ProxyKeyService(db).update_key(
        project, validate_uuid(key_id, "key_id"), data
    )


@router.delete(
    "/{project_id}/keys/{key_id}",
    response_model=DeletedResponse,
    summary="Delete proxy key",
    description="Delete a key. Its audit entries are kept without the key reference.",
)
async def delete_key(key_id: str, project: OwnedProject, db: DbSession) -> DeletedResponse:
    """Delete a proxy key."""
    key_uuid = validate_uuid(key_id, "key_id")
    await ProxyKeyService(db).delete_key(project, key_uuid)
    return DeletedResponse(message="Proxy key deleted", id=str(key_uuid))
