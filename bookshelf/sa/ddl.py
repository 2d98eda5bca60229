"""DDL generation and schema introspection.

``generate_ddl`` renders the registry as the statements a fresh database
needs. ``declared_snapshot``/``introspect`` reduce the declared model and a
live database to the same shape so ``diff_snapshots`` can compare them.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import BLANK_SCHEMA, MetaData, Table, create_mock_engine, inspect
from sqlalchemy.engine import Dialect, Engine

from bookshelf.sa.registry import SchemaRegistry

logger = logging.getLogger(__name__)

DIALECT_URLS = {
    "postgresql": "postgresql+psycopg2://",
    "sqlite": "sqlite://",
}

POSTGRES_EXTENSIONS = ('uuid-ossp', 'pg_trgm')


def _mock_engine(dialect: str, executor):
    try:
        url = DIALECT_URLS[dialect]
    except KeyError:
        raise ValueError(f"Unsupported dialect '{dialect}', expected one of {', '.join(DIALECT_URLS)}") from None
    return create_mock_engine(url, executor)


def _without_namespaces(registry: SchemaRegistry, tables: List[Table]) -> Tuple[MetaData, List[Table]]:
    """Copy tables into a schema-less MetaData, keeping only indexes SQLite can build"""
    metadata = MetaData(naming_convention=registry.metadata.naming_convention)
    copies = []
    for table in tables:
        copy = table.to_metadata(metadata, schema=None, referred_schema_fn=lambda *args: BLANK_SCHEMA)
        supported = {index.name for index in registry.indexes(table, "sqlite")}
        for index in list(copy.indexes):
            if index.name not in supported:
                copy.indexes.discard(index)
        copies.append(copy)
    return metadata, copies


def generate_ddl(registry: SchemaRegistry, dialect: str = "postgresql",
                 namespaces: Optional[Iterable[str]] = None) -> List[str]:
    """Render CREATE statements for the registry's tables.

    Args:
        registry: Schema registry to render
        dialect: Target dialect name ("postgresql" or "sqlite")
        namespaces: Only render tables in these namespaces (all when None)

    Returns:
        DDL statements in execution order
    """
    statements: List[str] = []
    tables = registry.tables(namespaces)
    is_sqlite = dialect == "sqlite"
    metadata = registry.metadata
    if is_sqlite:
        metadata, tables = _without_namespaces(registry, tables)

    def executor(sql, *multiparams, **params):
        statements.append(str(sql.compile(dialect=engine.dialect)).strip())

    engine = _mock_engine(dialect, executor)

    if not is_sqlite:
        statements.extend(f'CREATE EXTENSION IF NOT EXISTS "{ext}"' for ext in POSTGRES_EXTENSIONS)
        for schema in sorted({t.schema for t in tables if t.schema}):
            statements.append(f'CREATE SCHEMA IF NOT EXISTS "{schema}"')

    metadata.create_all(engine, tables=tables, checkfirst=False)
    logger.debug(f"Generated {len(statements)} {dialect} DDL statements for {len(tables)} tables")
    return statements


@dataclass(frozen=True)
class ColumnSnapshot:
    name: str
    type: str
    nullable: bool


@dataclass(frozen=True)
class IndexSnapshot:
    name: str
    unique: bool
    # None for expression indexes
    columns: Optional[Tuple[str, ...]]


@dataclass
class TableSnapshot:
    name: str
    columns: Dict[str, ColumnSnapshot] = field(default_factory=dict)
    indexes: Dict[str, IndexSnapshot] = field(default_factory=dict)


SchemaSnapshot = Dict[str, TableSnapshot]


def _type_name(type_, dialect: Dialect) -> str:
    return type_.compile(dialect=dialect).upper().replace(" ", "")


def declared_snapshot(registry: SchemaRegistry, dialect: Dialect,
                      namespaces: Optional[Iterable[str]] = None) -> SchemaSnapshot:
    snapshot: SchemaSnapshot = {}
    for table in registry.tables(namespaces):
        entry = TableSnapshot(table.name)
        for column in table.columns:
            entry.columns[column.name] = ColumnSnapshot(
                column.name, _type_name(column.type, dialect), bool(column.nullable)
            )
        for index in registry.indexes(table, dialect.name):
            plain = len(index.expressions) == len(index.columns)
            entry.indexes[index.name] = IndexSnapshot(
                index.name, bool(index.unique), tuple(c.name for c in index.columns) if plain else None
            )
        snapshot[table.name] = entry
    return snapshot


def introspect(engine: Engine, registry: SchemaRegistry,
               namespaces: Optional[Iterable[str]] = None) -> SchemaSnapshot:
    """Read back the tables the registry declares from a live database"""
    inspector = inspect(engine)
    is_sqlite = engine.dialect.name == "sqlite"
    snapshot: SchemaSnapshot = {}
    for table in registry.tables(namespaces):
        schema = None if is_sqlite else table.schema
        if not inspector.has_table(table.name, schema=schema):
            continue
        entry = TableSnapshot(table.name)
        for column in inspector.get_columns(table.name, schema=schema):
            entry.columns[column["name"]] = ColumnSnapshot(
                column["name"], _type_name(column["type"], engine.dialect), bool(column["nullable"])
            )
        for index in inspector.get_indexes(table.name, schema=schema):
            names = index.get("column_names") or []
            plain = bool(names) and all(names) and not index.get("expressions")
            entry.indexes[index["name"]] = IndexSnapshot(
                index["name"], bool(index["unique"]), tuple(names) if plain else None
            )
        snapshot[table.name] = entry
    return snapshot


def diff_snapshots(expected: SchemaSnapshot, actual: SchemaSnapshot) -> List[str]:
    """Human-readable differences between two snapshots (empty when they match)"""
    differences = []
    for name in sorted(set(expected) - set(actual)):
        differences.append(f"Table '{name}' is declared but missing from the database")
    for name in sorted(set(actual) - set(expected)):
        differences.append(f"Table '{name}' exists in the database but is not declared")

    for name in sorted(set(expected) & set(actual)):
        want, have = expected[name], actual[name]
        for col in sorted(set(want.columns) - set(have.columns)):
            differences.append(f"Column '{name}.{col}' exists in model but not in database")
        for col in sorted(set(have.columns) - set(want.columns)):
            differences.append(f"Column '{name}.{col}' exists in database but not in model")
        for col in sorted(set(want.columns) & set(have.columns)):
            a, b = want.columns[col], have.columns[col]
            if a.type != b.type:
                differences.append(f"Column '{name}.{col}' type {a.type} != {b.type}")
            if a.nullable != b.nullable:
                differences.append(f"Column '{name}.{col}' nullable {a.nullable} != {b.nullable}")

        for idx in sorted(set(want.indexes) - set(have.indexes)):
            differences.append(f"Index '{idx}' on '{name}' is declared but missing")
        for idx in sorted(set(have.indexes) - set(want.indexes)):
            differences.append(f"Index '{idx}' on '{name}' exists but is not declared")
        for idx in sorted(set(want.indexes) & set(have.indexes)):
            a, b = want.indexes[idx], have.indexes[idx]
            if a.unique != b.unique:
                differences.append(f"Index '{idx}' unique {a.unique} != {b.unique}")
            if a.columns is not None and b.columns is not None and a.columns != b.columns:
                differences.append(f"Index '{idx}' columns {a.columns} != {b.columns}")
    return differences


def check_database(engine: Engine, registry: SchemaRegistry,
                   namespaces: Optional[Iterable[str]] = None) -> List[str]:
    return diff_snapshots(
        declared_snapshot(registry, engine.dialect, namespaces),
        introspect(engine, registry, namespaces),
    )
