"""
Database Migration Runner

Runs Alembic migrations on application startup with distributed locking.
On PostgreSQL an advisory lock ensures only one instance runs migrations
at a time. Other backends (local SQLite) upgrade directly.

Usage:
    Set RUN_MIGRATIONS_ON_STARTUP=true in environment variables.
    Migrations will run automatically during app startup.
"""

import asyncio
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from alembic import command
from alembic.config import Config
from alembic.util.exc import CommandError

from app.config.settings import settings
from app.core.logging import logger
from app.db.session import engine

# Advisory lock ID for migrations (arbitrary unique number)
MIGRATION_LOCK_ID = 781_560_214
MIGRATION_LOCK_MAX_ATTEMPTS = 30


def get_alembic_config() -> Config:
    """Get Alembic configuration.

    Returns:
        Alembic Config object pointing to the project's alembic.ini
    """
    # app/db/migrations.py -> project root is three levels up
    project_root = Path(__file__).parent.parent.parent
    alembic_ini = project_root / "alembic.ini"

    if not alembic_ini.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini}")

    config = Config(str(alembic_ini))
    # Keep the application's structlog setup; env.py skips fileConfig
    config.attributes["skip_logging"] = True
    config.set_main_option("script_location", str(project_root / "alembic"))
    # env.py drives an async engine, so the async URL is passed through as-is.
    # ConfigParser treats % as interpolation syntax.
    config.set_main_option(
        "sqlalchemy.url", str(settings.DATABASE_URL).replace("%", "%%")
    )

    return config


async def acquire_migration_lock(conn: AsyncConnection) -> bool:
    """Try to acquire the PostgreSQL advisory lock for migrations.

    Advisory locks belong to the database session, so the same connection
    must be used to release it.

    Returns:
        True if lock acquired, False if another process holds it
    """
    result = await conn.execute(
        text("SELECT pg_try_advisory_lock(:lock_id)"),
        {"lock_id": MIGRATION_LOCK_ID},
    )
    row = result.fetchone()
    await conn.commit()
    return bool(row[0]) if row else False


async def release_migration_lock(conn: AsyncConnection) -> None:
    """Release the PostgreSQL advisory lock."""
    await conn.execute(
        text("SELECT pg_advisory_unlock(:lock_id)"),
        {"lock_id": MIGRATION_LOCK_ID},
    )
    await conn.commit()


def _run_alembic_upgrade_sync() -> None:
    """Run alembic upgrade head synchronously.

    Runs in a worker thread: env.py calls asyncio.run(), which cannot be
    nested inside the application's running event loop.
    """
    command.upgrade(get_alembic_config(), "head")


async def run_alembic_upgrade() -> None:
    """Run alembic upgrade head in a worker thread."""
    await asyncio.to_thread(_run_alembic_upgrade_sync)


async def run_migrations() -> None:
    """Run database migrations, with distributed locking on PostgreSQL.

    1. Attempts to acquire a PostgreSQL advisory lock
    2. If acquired, runs alembic upgrade head
    3. Releases the lock when done
    4. If lock not acquired, waits and retries (another instance is migrating)
    """
    if not settings.RUN_MIGRATIONS_ON_STARTUP:
        logger.debug("RUN_MIGRATIONS_ON_STARTUP is disabled, skipping migrations")
        return

    logger.info("Attempting to run database migrations...")

    if not settings.uses_postgres:
        await run_alembic_upgrade()
        logger.info("Database migrations completed successfully")
        return

    async with engine.connect() as conn:
        for attempt in range(1, MIGRATION_LOCK_MAX_ATTEMPTS + 1):
            try:
                lock_acquired = await acquire_migration_lock(conn)
            except SQLAlchemyError as e:
                logger.error("Could not acquire migration lock", error=str(e))
                raise

            if not lock_acquired:
                logger.info(
                    "Migration lock held by another instance, waiting...",
                    attempt=attempt,
                    max_attempts=MIGRATION_LOCK_MAX_ATTEMPTS,
                )
                await asyncio.sleep(1)
                continue

            logger.info("Migration lock acquired, running migrations...")
            try:
                await run_alembic_upgrade()
                logger.info("Database migrations completed successfully")
                return
            except (SQLAlchemyError, CommandError, OSError) as e:
                logger.error("Migration failed", error=str(e))
                raise
            finally:
                await release_migration_lock(conn)
                logger.debug("Migration lock released")

    logger.warning(
        "Could not acquire migration lock after max attempts. "
        "Assuming another instance completed migrations."
    )
