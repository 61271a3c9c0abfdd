"""
Turnstile Application Entry Point

FastAPI application setup with all routers and middleware.

Two API surfaces share one process:
- Control Plane: operator APIs for projects, MCP servers, proxy keys, audit logs
- Gateway: the single endpoint API-key holders call to reach their MCP servers
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import __version__
from app.config.settings import settings
from app.control_plane.api.router import router as control_plane_router
from app.core.logging import logger
from app.db.migrations import run_migrations
from app.db.session import check_db_health, close_db, init_db
from app.gateway.api.router import router as gateway_router
from app.gateway.proxy.client import create_upstream_client
from app.mcp.handshake import create_handshake_client
from app.middleware.error_handler import setup_exception_handlers
from app.middleware.logging import LoggingMiddleware
from app.schemas.common import HealthResponse


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    # Startup
    await init_db()
    await run_migrations()  # Run migrations if RUN_MIGRATIONS_ON_STARTUP=true

    app.state.handshake_client = create_handshake_client()
    app.state.upstream_client = create_upstream_client()
    await app.state.handshake_client.initialize()
    await app.state.upstream_client.initialize()
    logger.info("Turnstile started", environment=settings.APP_ENV, version=__version__)

    yield

    # Shutdown
    await app.state.upstream_client.close()
    await app.state.handshake_client.close()
    await close_db()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Key-scoped reverse proxy for MCP (Model Context Protocol) servers.\n\n"
            "Provides:\n"
            "- **Control Plane**: projects, MCP server registration, proxy keys, "
            "audit logs\n"
            "- **Gateway**: `POST /gateway/api/v1/mcp`, which authenticates a proxy "
            "key, routes the request to the right server and applies the key's "
            "allow-list and blacklist"
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS Middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Custom Middleware
    application.add_middleware(LoggingMiddleware)

    # Exception Handlers
    setup_exception_handlers(application)

    # Routers
    application.include_router(
        control_plane_router,
        prefix="/control-plane/api/v1",
    )
    application.include_router(
        gateway_router,
        prefix="/gateway/api/v1",
    )

    # Health Check
    @application.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(version=__version__)

    @application.get("/health/detailed", tags=["Health"])
    async def detailed_health_check() -> dict:
        """Detailed health check with component status."""
        database_ok = await check_db_health()
        return {
            "status": "healthy" if database_ok else "degraded",
            "service": "turnstile",
            "version": __version__,
            "environment": settings.APP_ENV,
            "components": {
                "database": {"status": "healthy" if database_ok else "unhealthy"},
                "gateway": {
                    "status": "healthy",
                    "upstream_timeout_seconds": settings.UPSTREAM_TIMEOUT_SECONDS,
                },
                "handshake": {
                    "status": "healthy",
                    "timeout_seconds": settings.HANDSHAKE_TIMEOUT_SECONDS,
                },
            },
        }

    return application


app = create_application()
