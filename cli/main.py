# cli/main.py
import click

from bookshelf.utils.logging import configure_logging
from .commands.db import db
from .commands.seed import seed


@click.group()
@click.option('--log-level', default=None, help='Log level (defaults to LOG_LEVEL or INFO)')
@click.option('--sql-log-level', default=None, help='Level for the SQL statement logger')
def cli(log_level, sql_log_level):
    """Bookshelf database CLI"""
    configure_logging(log_level, sql_log_level)


cli.add_command(db)
cli.add_command(seed)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
