"""
Control Plane API Router

Aggregates all admin API routes. Every route below is scoped to a project
owned by the authenticated operator.
"""

from fastapi import APIRouter

from app.control_plane.api.v1 import audit_logs, mcp_servers, projects, proxy_keys

router = APIRouter()

router.include_router(
    projects.router,
    prefix="/projects",
    tags=["Control Plane: Projects"],
)
router.include_router(
    mcp_servers.router,
    prefix="/projects",
    tags=["Control Plane: MCP Servers"],
)
router.include_router(
    proxy_keys.router,
    prefix="/projects",
    tags=["Control Plane: Proxy Keys"],
)
router.include_router(
    audit_logs.router,
    prefix="/projects",
    tags=["Control Plane: Audit Logs"],
)
