#!/usr/bin/env python3
"""
Database Seeder

Creates a demo project for local development: one project, optionally one
registered MCP server (a real handshake is performed), and one proxy key.
Prints the proxy key and an operator token at the end.

Run from the project root (the directory holding alembic.ini):
    python -m scripts.seed_db --owner dev-operator
    python -m scripts.seed_db --server-url http://localhost:8080/mcp --server-name kb
"""

import asyncio
from typing import Optional

import click

from app.control_plane.services import (
    McpServerService,
    ProjectService,
    ProxyKeyService,
)
from app.core.exceptions import TurnstileException
from app.core.logging import logger
from app.core.security import create_access_token
from app.db.repositories import ProjectRepository
from app.db.session import AsyncSessionLocal, init_db
from app.mcp.handshake import create_handshake_client
from app.schemas.mcp_server import McpServerCreate
from app.schemas.proxy_key import ProxyKeyCreate

SEED_PROJECT_NAME = "Demo Project"


async def clean_seed_data(session, owner_id: str) -> None:
    """Remove the owner's existing demo project before reseeding."""
    service = ProjectService(session)
    for project in await ProjectRepository(session).list_by_owner(owner_id):
        if project.name == SEED_PROJECT_NAME:
            await service.delete_project(project)
            logger.info("Removed existing demo project", project_id=str(project.id))
    await session.commit()


async def seed_database(
    owner_id: str,
    server_name: str,
    server_url: Optional[str],
    server_token: Optional[str],
    clean: bool,
) -> dict[str, str]:
    """Seed the database and return the credentials to print."""
    await init_db()
    handshake_client = create_handshake_client()

    try:
        async with AsyncSessionLocal() as session:
            if clean:
                await clean_seed_data(session, owner_id)

            project = await ProjectService(session).create_project(
                owner_id, SEED_PROJECT_NAME
            )
            project_row = await ProjectRepository(session).get_owned(project.id, owner_id)

            if server_url:
                server = await McpServerService(session, handshake_client).register_server(
                    project_row,
                    McpServerCreate(
                        name=server_name, base_url=server_url, auth_token=server_token
                    ),
                )
                logger.info(
                    "Seeded MCP server",
                    server_name=server.name,
                    tools=server.tool_names,
                )

            key = await ProxyKeyService(session).issue_key(
                project_row, ProxyKeyCreate(label="Demo key")
            )
            await session.commit()
    finally:
        await handshake_client.close()

    return {
        "project_id": str(project.id),
        "proxy_key": key.key,
        "operator_token": create_access_token({"sub": owner_id}),
    }


@click.command()
@click.option("--owner", "owner_id", default="dev-operator", help="Owner id (JWT sub)")
@click.option("--server-name", default="demo", help="Name for the seeded MCP server")
@click.option("--server-url", default=None, help="MCP server to register (optional)")
@click.option("--server-token", default=None, help="Bearer token for the MCP server")
@click.option("--clean/--no-clean", default=True, help="Remove an earlier demo project")
def main(
    owner_id: str,
    server_name: str,
    server_url: Optional[str],
    server_token: Optional[str],
    clean: bool,
) -> None:
    """Seed a demo project, server and proxy key."""
    try:
        result = asyncio.run(
            seed_database(owner_id, server_name, server_url, server_token, clean)
        )
    except TurnstileException as e:
        raise click.ClickException(f"{e.error_code}: {e.message}") from e

    click.echo(f"Project ID:      {result['project_id']}")
    click.echo(f"Proxy key:       {result['proxy_key']}")
    click.echo(f"Operator token:  {result['operator_token']}")


if __name__ == "__main__":
    main()
