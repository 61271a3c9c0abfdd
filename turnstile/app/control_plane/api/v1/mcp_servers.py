"""
MCP Server Registry Endpoints

Register, inspect, update, refresh and remove a project's MCP servers.
Registration and endpoint changes perform a live ``tools/list`` handshake.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.control_plane.api.dependencies import DbSession, Handshake, OwnedProject
from app.control_plane.api.utils import paginate, validate_uuid
from app.control_plane.services import McpServerService
from app.schemas.common import (
    DeletedResponse,
    ErrorResponse,
    PaginatedResponse,
    PaginationParams,
)
from app.schemas.mcp_server import (
    McpServerCreate,
    McpServerResponse,
    McpServerUpdate,
)

router = APIRouter()


@router.post(
    "/{project_id}/servers",
    response_model=McpServerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register MCP server",
    description="""
Register an MCP server in the project.

The gateway calls `tools/list` on the server before saving it. If the
handshake fails the server is not registered and the response explains why
(`HANDSHAKE_AUTH_FAILED`, `HANDSHAKE_TIMEOUT`, `HANDSHAKE_CONNECTION_REFUSED`, ...).
    """,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def register_server(
    data: McpServerCreate,
    project: OwnedProject,
    db: DbSession,
    handshake_client: Handshake,
) -> McpServerResponse:
    """Register an MCP server."""
    service = McpServerService(db, handshake_client)
    return await service.register_server(project, data)


@router.get(
    "/{project_id}/servers",
    response_model=PaginatedResponse[McpServerResponse],
    summary="List MCP servers",
    description="List the project's servers in registration order.",
)
async def list_servers(
    project: OwnedProject,
    db: DbSession,
    handshake_client: Handshake,
    pagination: Annotated[PaginationParams, Depends()],
) -> PaginatedResponse[McpServerResponse]:
    """List MCP servers."""
    service = McpServerService(db, handshake_client)
    servers, total = await service.list_servers(
        project, offset=pagination.offset, limit=pagination.limit
    )
    return paginate(servers, pagination.page, pagination.per_page, total)


@router.get(
    "/{project_id}/servers/{server_id}",
    response_model=McpServerResponse,
    summary="Get MCP server",
)
async def get_server(
    server_id: str,
    project: OwnedProject,
    db: DbSession,
    handshake_client: Handshake,
) -> McpServerResponse:
    """Get one MCP server."""
    service = McpServerService(db, handshake_client)
    return await service.get_server(project, validate_uuid(server_id, "server_id"))


@router.put(
    "/{project_id}/servers/{server_id}",
    response_model=McpServerResponse,
    summary="Update MCP server",
    description="""
Update a server. Omitted fields are unchanged; `authToken: null` removes the
stored credential. Changing `baseUrl` or `authToken` re-runs the handshake
and nothing is saved if it fails.
    """,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_server(
    server_id: str,
    data: McpServerUpdate,
    project: OwnedProject,
    db: DbSession,
    handshake_client: Handshake,
) -> McpServerResponse:
    """Update an MCP server."""
    service = McpServerService(db, handshake_client)
    return await service.update_server(
        project, validate_uuid(server_id, "server_id"), data
    )


@router.post(
    "/{project_id}/servers/{server_id}/refresh",
    response_model=McpServerResponse,
    summary="Refresh tool catalog",
    description="Re-run the handshake and replace the cached tool catalog.",
    responses={400: {"model": ErrorResponse}},
)
async def refresh_server(
    server_id: str,
    project: OwnedProject,
    db: DbSession,
    handshake_client: Handshake,
) -> McpServerResponse:
    """Refresh an MCP server's tool catalog."""
    service = McpServerService(db, handshake_client)
    return await service.refresh_catalog(project, validate_uuid(server_id, "server_id"))


@router.delete(
    "/{project_id}/servers/{server_id}",
    response_model=DeletedResponse,
    summary="Delete MCP server",
)
async def delete_server(
    server_id: str,
    project: OwnedProject,
    db: DbSession,
    handshake_client: Handshake,
) -> DeletedResponse:
    """Delete an MCP server."""
    server_uuid = validate_uuid(server_id, "server_id")
    service = McpServerService(db, handshake_client)
    await service.delete_server(project, server_uuid)
    return DeletedResponse(message="MCP server deleted", id=str(server_uuid))
