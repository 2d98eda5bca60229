import logging

from alembic import context

from bookshelf.config import get_settings
from bookshelf.sa.database import connect
from bookshelf.sa.migrations import version_table_schema
from bookshelf.sa.registry import build_registry

logger = logging.getLogger("bookshelf.migrations")

config = context.config
settings = get_settings()

target_metadata = build_registry().metadata
MIGRATION_SCHEMAS = set(settings.migration_schemas)


def include_name(name, type_, parent_names):
    """Only look at the schemas this service owns"""
    if type_ == "schema":
        return name in MIGRATION_SCHEMAS
    return True


def _configure(url: str, **kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        include_schemas=True,
        include_name=include_name,
        version_table_schema=version_table_schema(url),
        transaction_per_migration=True,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of executing it"""
    url = config.get_main_option("sqlalchemy.url")
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = config.get_main_option("sqlalchemy.url")
    database = connect("migrate", url)
    try:
        with database.engine.connect() as connection:
            _configure(url, connection=connection)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        database.dispose()
    logger.debug(f"Migrations finished against {database.engine.url.render_as_string(hide_password=True)}")


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
