"""
API Dependencies

Common dependencies for Control Plane APIs.

Operators authenticate with a bearer JWT whose ``sub`` claim is their owner
id. Every project-scoped route resolves the project through
``get_project_from_path``, which only finds projects the caller owns.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.control_plane.api.utils import validate_uuid
from app.core.exceptions import AuthenticationError, ProjectNotFoundError
from app.core.security import decode_token
from app.db.repositories import ProjectRepository
from app.db.session import get_db
from app.mcp.handshake import HandshakeClient, create_handshake_client
from app.models.project import Project


# Security scheme for Swagger UI - shows "Authorize" button
security_scheme = HTTPBearer(auto_error=False)


async def get_current_owner(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(security_scheme)
    ],
) -> str:
    """Extract the owner id from the JWT in the Authorization header.

    Args:
        credentials: HTTP Bearer credentials from Authorization header

    Returns:
        Owner id (the token's ``sub`` claim)

    Raises:
        AuthenticationError: If token is missing, invalid or has no subject
    """
    if not credentials:
        raise AuthenticationError("Authorization header required")

    payload = decode_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    owner_id = payload.get("sub")
    if not owner_id or not isinstance(owner_id, str):
        raise AuthenticationError("Invalid token payload")

    return owner_id


async def get_project_from_path(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    owner_id: Annotated[str, Depends(get_current_owner)],
) -> Project:
    """Load the project named in the path, if the caller owns it.

    Another owner's project is reported exactly like a missing one.

    Raises:
        ValidationError: project_id is not a UUID
        ProjectNotFoundError: No such project for this owner
    """
    project_uuid = validate_uuid(project_id, "project_id")

    project = await ProjectRepository(db).get_owned(project_uuid, owner_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    return project


def get_handshake_client(request: Request) -> HandshakeClient:
    """Shared handshake client created by the application lifespan."""
    client = getattr(request.app.state, "handshake_client", None)
    if client is None:
        client = create_handshake_client()
        request.app.state.handshake_client = client
    return client


# Type aliases for cleaner signatures
CurrentOwner = Annotated[str, Depends(get_current_owner)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
OwnedProject = Annotated[Project, Depends(get_project_from_path)]
Handshake = Annotated[HandshakeClient, Depends(get_handshake_client)]
