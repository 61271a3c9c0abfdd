"""
Gateway API Router

Entry point for MCP clients holding a proxy key.
"""

from fastapi import APIRouter

from app.gateway.api.v1 import mcp

router = APIRouter()

router.include_router(mcp.router, prefix="/mcp", tags=["Gateway: MCP"])
