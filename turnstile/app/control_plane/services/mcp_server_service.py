"""
MCP Server Service

Business logic for registering MCP servers in a project.

A server is only stored after a successful ``tools/list`` handshake, so every
registered server has a catalog the gateway can resolve tools against. The
handshake is repeated on update when the endpoint or credential changes, and
on explicit refresh. A failed handshake never modifies the stored record.
"""

from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, McpServerNotFoundError, ValidationError
from app.core.logging import logger
from app.core.utils import non_empty_string
from app.db.repositories import McpServerRepository
from app.mcp.handshake import HandshakeClient, validate_base_url
from app.models.mcp_server import McpServer
from app.models.project import Project
from app.schemas.mcp_server import (
    McpServerCreate,
    McpServerResponse,
    McpServerUpdate,
)


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Server name is required", error_code="INVALID_NAME")
    return cleaned


def _clean_base_url(base_url: str | None) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValidationError("Base URL is required", error_code="INVALID_BASE_URL")
    return validate_base_url(cleaned)


class McpServerService:
    """Service for MCP server registry operations."""

    def __init__(self, session: AsyncSession, handshake_client: HandshakeClient) -> None:
        self.session = session
        self.repo = McpServerRepository(session)
        self.handshake_client = handshake_client

    async def _ensure_name_available(
        self, project_id: UUID, name: str, exclude_id: UUID | None = None
    ) -> None:
        if await self.repo.name_exists(project_id, name, exclude_id=exclude_id):
            raise ConflictError(
                f"An MCP server named '{name}' already exists in this project",
                error_code="SERVER_NAME_CONFLICT",
            )

    async def _get_server(self, project: Project, server_id: UUID) -> McpServer:
        server = await self.repo.get_in_project(project.id, server_id)
        if server is None:
            raise McpServerNotFoundError(str(server_id))
        return server

    async def register_server(
        self, project: Project, data: McpServerCreate
    ) -> McpServerResponse:
        """Register a server after a successful handshake.

        Args:
            project: Owning project
            data: Name, base URL and optional upstream token

        Returns:
            Created server with its discovered catalog

        Raises:
            ValidationError: INVALID_NAME, INVALID_BASE_URL, INVALID_URL_FORMAT
            ConflictError: SERVER_NAME_CONFLICT
            HandshakeError: The server could not be reached or answered badly
        """
        name = _clean_name(data.name)
        base_url = _clean_base_url(data.base_url)
        auth_token = non_empty_string(data.auth_token)

        await self._ensure_name_available(project.id, name)

        catalog = await self.handshake_client.fetch_catalog(base_url, auth_token)

        try:
            server = await self.repo.create(
                project_id=project.id,
                name=name,
                base_url=base_url,
                auth_token=auth_token,
                cached_tools=catalog,
            )
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError(
                f"An MCP server named '{name}' already exists in this project",
                error_code="SERVER_NAME_CONFLICT",
            ) from e

        logger.info(
            "MCP server registered",
            project_id=str(project.id),
            server_id=str(server.id),
            server_name=name,
            tool_count=len(catalog),
        )
        return McpServerResponse.model_validate(server)

    async def list_servers(
        self,
        project: Project,
        offset: int = 0,
        limit: int = 100,
    ) -> tuple[list[McpServerResponse], int]:
        """List a project's servers in registration order.

        Returns:
            Tuple of (servers, total_count)
        """
        servers = await self.repo.list_by_project(
            project.id, offset=offset, limit=limit, order_desc=False
        )
        total = await self.repo.count_by_project(project.id)
        return [McpServerResponse.model_validate(s) for s in servers], total

    async def get_server(self, project: Project, server_id: UUID) -> McpServerResponse:
        """Get one server in the project."""
        return McpServerResponse.model_validate(await self._get_server(project, server_id))

    async def update_server(
        self,
        project: Project,
        server_id: UUID,
        data: McpServerUpdate,
    ) -> McpServerResponse:
        """Update a server.

        Only fields present in the request are touched. When the base URL or
        the token changes, a new handshake runs against the merged values
        and its catalog replaces the cached one. If that handshake fails,
        nothing is saved.

        Raises:
            McpServerNotFoundError: SERVER_NOT_FOUND
            ValidationError: INVALID_NAME, INVALID_BASE_URL, INVALID_URL_FORMAT
            ConflictError: SERVER_NAME_CONFLICT
            HandshakeError: The new endpoint/credential failed the handshake
        """
        server = await self._get_server(project, server_id)
        fields = data.model_dump(exclude_unset=True)
        changes: dict[str, Any] = {}

        if "name" in fields:
            name = _clean_name(fields["name"])
            if name != server.name:
                await self._ensure_name_available(project.id, name, exclude_id=server.id)
                changes["name"] = name

        if "base_url" in fields:
            base_url = _clean_base_url(fields["base_url"])
            if base_url != server.base_url:
                changes["base_url"] = base_url

        if "auth_token" in fields:
            auth_token = non_empty_string(fields["auth_token"])
            if auth_token != server.auth_token:
                changes["auth_token"] = auth_token

        if fields.get("is_active") is not None:
            changes["is_active"] = fields["is_active"]

        if "base_url" in changes or "auth_token" in changes:
            changes["cached_tools"] = await self.handshake_client.fetch_catalog(
                changes.get("base_url", server.base_url),
                changes.get("auth_token", server.auth_token),
            )

        if changes:
            try:
                server = await self.repo.update_instance(server, **changes)
            except IntegrityError as e:
                await self.session.rollback()
                raise ConflictError(
                    "An MCP server with this name already exists in this project",
                    error_code="SERVER_NAME_CONFLICT",
                ) from e
            logger.info(
                "MCP server updated",
                server_id=str(server.id),
                fields=sorted(k for k in changes if k != "auth_token"),
                credential_changed="auth_token" in changes,
            )

        return McpServerResponse.model_validate(server)

    async def refresh_catalog(
        self, project: Project, server_id: UUID
    ) -> McpServerResponse:
        """Re-run the handshake and replace the cached catalog.

        Raises:
            McpServerNotFoundError: SERVER_NOT_FOUND
            HandshakeError: The old catalog is kept
        """
        server = await self._get_server(project, server_id)
        catalog = await self.handshake_client.fetch_catalog(
            server.base_url, server.auth_token
        )
        server = await self.repo.update_instance(server, cached_tools=catalog)
        logger.info(
            "MCP server catalog refreshed",
            server_id=str(server.id),
            tool_count=len(catalog),
        )
        return McpServerResponse.model_validate(server)

    async def delete_server(self, project: Project, server_id: UUID) -> None:
        """Delete a server. Audit entries keep its name."""
        server = await self._get_server(project, server_id)
        await self.repo.delete_instance(server)
        logger.info("MCP server deleted", server_id=str(server_id))
