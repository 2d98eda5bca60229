"""Alembic entry points used by the CLI and the tests"""
import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.util.exc import CommandError
from sqlalchemy.exc import SQLAlchemyError

from bookshelf.config import get_settings
from bookshelf.sa.database import connect
from bookshelf.sa.errors import MigrationError

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"
VERSION_TABLE_SCHEMA = "public"


def version_table_schema(url: str) -> Optional[str]:
    """SQLite has no schemas, so the version table stays in the main database"""
    return None if url.startswith("sqlite") else VERSION_TABLE_SCHEMA


def alembic_config(url: Optional[str] = None) -> Config:
    """Build an Alembic config pointing at this project's migration scripts"""
    url = url or get_settings().database_url
    ini_path = PROJECT_ROOT / "alembic.ini"
    config = Config(str(ini_path)) if ini_path.exists() else Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    # ConfigParser interpolation: escape '%' from url-encoded passwords
    config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return config


def _run(action: str, func, *args, **kwargs):
    try:
        return func(*args, **kwargs)
    except (CommandError, SQLAlchemyError) as e:
        logger.error(f"Migration {action} failed: {e}")
        raise MigrationError(f"Migration {action} failed: {e}") from e


def migrate(revision: str = "head", url: Optional[str] = None) -> None:
    """Upgrade the database to a revision.

    Each revision runs in its own transaction, so a failing revision leaves
    the schema at the last one that succeeded.
    """
    logger.info(f"Upgrading database to {revision}")
    _run("upgrade", command.upgrade, alembic_config(url), revision)


def downgrade(revision: str, url: Optional[str] = None) -> None:
    logger.info(f"Downgrading database to {revision}")
    _run("downgrade", command.downgrade, alembic_config(url), revision)


def make_migration(name: str, autogenerate: bool = True, url: Optional[str] = None):
    """Write a new revision script, diffing the registry against the database when autogenerating"""
    logger.info(f"Creating migration '{name}'")
    return _run("revision", command.revision, alembic_config(url), message=name, autogenerate=autogenerate)


def current_revision(url: Optional[str] = None) -> Optional[str]:
    url = url or get_settings().database_url
    database = connect("migrate", url)
    try:
        with database.engine.connect() as conn:
            context = MigrationContext.configure(
                conn, opts={"version_table_schema": version_table_schema(url)}
            )
            return context.get_current_revision()
    except SQLAlchemyError as e:
        raise MigrationError(f"Could not read current revision: {e}") from e
    finally:
        database.dispose()
