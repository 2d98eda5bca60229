"""Bookshelf database package: entity schema, migrations and query layer."""

__version__ = "0.1.0"
