"""
Tool Catalog Normalization

MCP servers answer ``tools/list`` in several shapes. The catalog stored on a
server is extracted by trying an ordered tuple of rules; each rule is a pure
function that returns the tool list when it recognises the shape and None
otherwise. The first rule that matches wins. A body no rule recognises is an
empty catalog, not an error.

Recognised shapes, in order:

    {"result": {"tools": [...]}}    JSON-RPC result envelope
    {"tools": [...]}                bare tools object
    {"result": [...]}               result holding the list directly
    [...]                           bare array

A catalog entry is either a tool name (``"search"``) or an object carrying at
least a string ``name`` (``{"name": "search", "description": "..."}``).
Entries keep the shape they arrived in.
"""

from typing import Any, Callable, Optional

from app.core.logging import get_logger

logger = get_logger(__name__)

ToolCatalog = list[Any]
ExtractionRule = Callable[[Any], Optional[ToolCatalog]]


# =============================================================================
# EXTRACTION RULES
# =============================================================================


def _result_tools(body: Any) -> Optional[ToolCatalog]:
    if isinstance(body, dict):
        result = body.get("result")
        if isinstance(result, dict) and isinstance(result.get("tools"), list):
            return result["tools"]
    return None


def _top_level_tools(body: Any) -> Optional[ToolCatalog]:
    if isinstance(body, dict) and isinstance(body.get("tools"), list):
        return body["tools"]
    return None


def _result_list(body: Any) -> Optional[ToolCatalog]:
    if isinstance(body, dict) and isinstance(body.get("result"), list):
        return body["result"]
    return None


def _bare_list(body: Any) -> Optional[ToolCatalog]:
    if isinstance(body, list):
        return body
    return None


EXTRACTION_RULES: tuple[tuple[str, ExtractionRule], ...] = (
    ("result.tools", _result_tools),
    ("tools", _top_level_tools),
    ("result", _result_list),
    ("array", _bare_list),
)


# =============================================================================
# NORMALIZATION
# =============================================================================


def entry_name(entry: Any) -> str | None:
    """Return the tool name of a catalog entry, or None if it has none."""
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict) and isinstance(entry.get("name"), str):
        return entry["name"]
    return None


def extract_tools(body: Any) -> tuple[str | None, ToolCatalog]:
    """Apply the extraction rules to a decoded handshake body.

    Returns:
        Tuple of (name of the matching rule or None, raw tool list)
    """
    for rule_name, rule in EXTRACTION_RULES:
        tools = rule(body)
        if tools is not None:
            return rule_name, tools
    return None, []


def normalize_catalog(body: Any) -> ToolCatalog:
    """Turn a decoded tools/list response into a stored catalog.

    Entries without a usable name are dropped.

    Args:
        body: Decoded JSON response from the MCP server

    Returns:
        List of catalog entries in their received shape
    """
    rule_name, tools = extract_tools(body)

    catalog: ToolCatalog = []
    dropped = 0
    for entry in tools:
        if entry_name(entry) is None:
            dropped += 1
            continue
        catalog.append(entry)

    if dropped:
        logger.warning(
            "Dropped catalog entries without a tool name",
            rule=rule_name,
            dropped=dropped,
        )
    logger.debug(
        "Tool catalog normalized",
        rule=rule_name or "none",
        tool_count=len(catalog),
    )
    return catalog


def tool_names(catalog: ToolCatalog) -> list[str]:
    """Project tool names out of a catalog."""
    names = []
    for entry in catalog:
        name = entry_name(entry)
        if name is not None:
            names.append(name)
    return names


def catalog_has_tool(catalog: ToolCatalog | None, tool_name: str) -> bool:
    """Check if a catalog holds a tool with exactly this name."""
    if not catalog:
        return False
    return any(entry_name(entry) == tool_name for entry in catalog)
