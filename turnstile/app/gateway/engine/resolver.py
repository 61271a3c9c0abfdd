"""
Target Resolution

Works out which MCP server a gateway request is for.

Resolution order:
    1. ``server_name``      → active server with that exact name
    2. ``tool`` / ``method`` → first active server (registration order)
                              whose cached catalog lists the tool
    3. neither              → MISSING_SERVER_IDENTIFIER

Every lookup is scoped to the key's project.
"""

from typing import Any, Optional
from uuid import UUID

from app.config.constants import MISSING_IDENTIFIER_HINT, GatewayErrorCode
from app.core.exceptions import GatewayError
from app.core.logging import get_logger
from app.core.utils import non_empty_string
from app.db.repositories.mcp_server_repository import McpServerRepository
from app.models.mcp_server import McpServer
from app.schemas.gateway import ResolvedTarget

logger = get_logger(__name__)


def extract_identifiers(body: dict[str, Any]) -> tuple[Optional[str], Optional[str]]:
    """Pull ``server_name`` and the tool identifier out of a request body.

    Only non-empty strings count. ``tool`` takes precedence over ``method``.

    Returns:
        Tuple of (server_name, tool_name)
    """
    server_name = non_empty_string(body.get("server_name"))
    tool_name = non_empty_string(body.get("tool")) or non_empty_string(
        body.get("method")
    )
    return server_name, tool_name


def _to_target(server: McpServer, tool_name: Optional[str]) -> ResolvedTarget:
    return ResolvedTarget(
        server_id=server.id,
        server_name=server.name,
        base_url=server.base_url,
        auth_token=server.auth_token,
        tool_name=tool_name,
    )


class TargetResolver:
    """Resolves a request body to a server in one project."""

    def __init__(self, server_repo: McpServerRepository):
        self.server_repo = server_repo

    async def resolve(
        self,
        project_id: UUID,
        server_name: Optional[str],
        tool_name: Optional[str],
    ) -> ResolvedTarget:
        """
        Resolve the target server for a request.

        Args:
            project_id: The key's project
            server_name: Requested server name, if supplied
            tool_name: Requested tool, if supplied

        Returns:
            ResolvedTarget with the server and the tool identifier (if any)

        Raises:
            GatewayError: SERVER_NOT_FOUND, TOOL_NOT_FOUND or
                MISSING_SERVER_IDENTIFIER
        """
        if server_name:
            server = await self.server_repo.get_active_by_name(project_id, server_name)
            if server is None:
                raise GatewayError(
                    GatewayErrorCode.SERVER_NOT_FOUND,
                    f"MCP server '{server_name}' not found",
                )
            logger.debug("Resolved server by name", server_name=server_name)
            return _to_target(server, tool_name)

        if tool_name:
            server = await self.server_repo.find_by_tool(project_id, tool_name)
            if server is None:
                raise GatewayError(
                    GatewayErrorCode.TOOL_NOT_FOUND,
                    f"No MCP server provides tool '{tool_name}'",
                )
            logger.debug(
                "Resolved server by tool",
                tool_name=tool_name,
                server_name=server.name,
            )
            return _to_target(server, tool_name)

        raise GatewayError(
            GatewayErrorCode.MISSING_SERVER_IDENTIFIER,
            "Unable to determine target MCP server",
            hint=MISSING_IDENTIFIER_HINT,
        )
