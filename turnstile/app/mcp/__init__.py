"""MCP protocol helpers: tool catalogs and the tools/list handshake."""

from app.mcp.catalog import catalog_has_tool, normalize_catalog, tool_names
from app.mcp.handshake import HandshakeClient

__all__ = [
    "HandshakeClient",
    "catalog_has_tool",
    "normalize_catalog",
    "tool_names",
]
