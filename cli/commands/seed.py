# cli/commands/seed.py
import click

from bookshelf.sa.database import connect
from bookshelf.seeds import FAILED, OK, seed_modules, run_seeds

COLORS = {OK: 'green', FAILED: 'red'}


@click.group()
def seed():
    """Sample data commands"""
    pass


@seed.command(name='list')
def list_seeds():
    """List seed modules in run order"""
    for name in seed_modules():
        click.echo(name)


@seed.command()
@click.option('--database-url', default=None, help='Database URL (defaults to DATABASE_URL)')
def run(database_url):
    """Reset and reseed every table"""
    database = connect("seeder", database_url)
    try:
        results = run_seeds(database)
    finally:
        database.dispose()

    click.echo("\n" + click.style("Results:", fg='blue'))
    for name, outcome in results.items():
        click.echo(f"{name}: " + click.style(outcome, fg=COLORS.get(outcome, 'yellow')))
    if FAILED in results.values():
        raise SystemExit(1)
