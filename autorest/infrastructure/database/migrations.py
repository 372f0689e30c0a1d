"""Alembic migration runner used at application startup.

Migrations live in the ``migrations`` script directory at the project root
(configurable through ``DATABASE_CONFIG__MIGRATIONS_PATH``). ``run_migrations``
upgrades the database to ``head`` in a worker thread because Alembic's
``env.py`` drives its own event loop. Any failure is raised as
``MigrationError`` so startup aborts before traffic is accepted.
"""

import asyncio
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from alembic.util import CommandError
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from autorest.core.config import get_settings
from autorest.core.exceptions import MigrationError
from autorest.infrastructure.database.session import get_engine

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def build_alembic_config(database_url: str | None = None) -> Config:
    """Build an Alembic config pointing at the script directory.

    Args:
        database_url: Database to migrate; defaults to the configured URL.

    Returns:
        Config: Alembic configuration with the URL in ``attributes``.
    """
    db_config = get_settings().database_config

    script_location = Path(db_config.migrations_path)
    if not script_location.is_absolute():
        script_location = PROJECT_ROOT / script_location

    config = Config()
    config.set_main_option("script_location", str(script_location))
    # Passed through attributes; URLs may contain '%' which ini interpolation rejects
    config.attributes["database_url"] = database_url or db_config.url
    return config


def head_revision(config: Config | None = None) -> str | None:
    """Return the newest revision available in the script directory."""
    script = ScriptDirectory.from_config(config or build_alembic_config())
    return script.get_current_head()


async def current_revision() -> str | None:
    """Return the revision the application database is currently at."""
    async with get_engine().connect() as conn:
        return await conn.run_sync(
            lambda sync_conn: MigrationContext.configure(sync_conn).get_current_revision()
        )


async def run_migrations(database_url: str | None = None) -> None:
    """Upgrade the database schema to the latest revision.

    Args:
        database_url: Database to migrate; defaults to the configured URL.

    Raises:
        MigrationError: If the script directory is invalid or a migration fails.
    """
    config = build_alembic_config(database_url)
    script_location = config.get_main_option("script_location")
    logger.info("Applying database migrations from {}", script_location)

    try:
        await asyncio.to_thread(command.upgrade, config, "head")
    except (CommandError, SQLAlchemyError, OSError) as e:
        logger.error("Database migration failed: {}", e)
        msg = f"Database migration failed: {e}"
        raise MigrationError(
            msg, context={"script_location": script_location}, cause=e
        ) from e

    logger.info("Database schema is at revision {}", head_revision(config))
