# cli/commands/db.py
import click
from sqlalchemy.exc import SQLAlchemyError

from bookshelf.config import get_settings
from bookshelf.sa import migrations
from bookshelf.sa.database import connect
from bookshelf.sa.ddl import DIALECT_URLS, check_database, generate_ddl
from bookshelf.sa.errors import BookshelfError
from bookshelf.sa.registry import build_registry


def _fail(message: str):
    click.echo(click.style(f"\n{message}", fg='red'), err=True)
    raise SystemExit(1)


def _database_option(func):
    return click.option('--database-url', default=None,
                        help='Database URL (defaults to DATABASE_URL)')(func)


@click.group()
def db():
    """Schema, migration and consistency commands"""
    pass


@db.command()
@_database_option
def init(database_url):
    """Create namespaces and every table directly from the models"""
    database = connect("migrate", database_url)
    try:
        database.init_db()
        click.echo(click.style("\nDatabase initialised", fg='green'))
    except (BookshelfError, SQLAlchemyError) as e:
        _fail(f"Error initialising database: {e}")
    finally:
        database.dispose()


@db.command()
@_database_option
@click.confirmation_option(prompt='Drop every table?')
def drop(database_url):
    """Drop every table"""
    database = connect("migrate", database_url)
    try:
        database.drop_db()
        click.echo(click.style("\nAll tables dropped", fg='yellow'))
    except SQLAlchemyError as e:
        _fail(f"Error dropping tables: {e}")
    finally:
        database.dispose()


@db.command()
@click.option('--dialect', type=click.Choice(sorted(DIALECT_URLS)), default='postgresql',
              help='SQL dialect to render')
@click.option('--schema', 'schemas', multiple=True, help='Only render this namespace (repeatable)')
def ddl(dialect, schemas):
    """Print the DDL for the declared schema"""
    for statement in generate_ddl(build_registry(), dialect, schemas or None):
        click.echo(f"{statement};\n")


@db.command()
@click.argument('revision', default='head')
@_database_option
def migrate(revision, database_url):
    """Upgrade the database to REVISION (default: head)"""
    try:
        migrations.migrate(revision, database_url)
    except BookshelfError as e:
        _fail(str(e))
    click.echo(click.style(f"\nDatabase at {revision}", fg='green'))


@db.command()
@click.argument('revision')
@_database_option
def downgrade(revision, database_url):
    """Downgrade the database to REVISION"""
    try:
        migrations.downgrade(revision, database_url)
    except BookshelfError as e:
        _fail(str(e))
    click.echo(click.style(f"\nDatabase at {revision}", fg='green'))


@db.command()
@click.argument('name')
@click.option('--empty', is_flag=True, help='Write an empty revision instead of autogenerating')
@_database_option
def makemigration(name, empty, database_url):
    """Write a new migration script called NAME"""
    try:
        script = migrations.make_migration(name, autogenerate=not empty, url=database_url)
    except BookshelfError as e:
        _fail(str(e))
    click.echo(click.style(f"\nCreated revision {script.revision}", fg='green'))


@db.command()
@_database_option
def current(database_url):
    """Show the current migration revision"""
    try:
        revision = migrations.current_revision(database_url)
    except BookshelfError as e:
        _fail(str(e))
    click.echo(revision or "No revision applied")


@db.command()
@_database_option
def check(database_url):
    """Validate the models and compare them with the live database"""
    try:
        registry = build_registry()
    except BookshelfError as e:
        _fail(f"Schema is invalid: {e}")

    database = connect("migrate", database_url, registry=registry)
    try:
        differences = check_database(database.engine, registry, get_settings().migration_schemas)
    finally:
        database.dispose()

    if differences:
        click.echo(click.style(f"\nFound {len(differences)} difference(s):", fg='yellow'))
        for difference in differences:
            click.echo(click.style(f"  {difference}", fg='yellow'))
        raise SystemExit(1)
    click.echo(click.style("\nDatabase matches the models", fg='green'))
