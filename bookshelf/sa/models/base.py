# bookshelf/sa/models/base.py
import uuid
from datetime import datetime, UTC
from enum import Enum as PyEnum
from typing import Dict, Set, Type

from sqlalchemy import DateTime, Enum, Index, JSON, MetaData, Text, Uuid, func
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql.functions import FunctionElement
from sqlalchemy.types import TypeDecorator

from bookshelf.sa.errors import DuplicateTableError, UnknownNamespaceError

# Logical schemas a table may be bound to. Bookshelf entities live in "server".
NAMESPACES = (
    "server",
    "gateway",
    "memory",
    "items",
    "slackbot",
    "flirt",
    "basic_mine",
    "summarizer",
    "recipe_craft",
    "npc",
)

NAMING_CONVENTION = {
    "pk": "%(table_name)s_pkey",
    "fk": "%(table_name)s_%(column_0_name)s_%(referred_table_name)s_%(referred_column_0_name)s_fk",
    "uq": "%(table_name)s_%(column_0_name)s_unique",
    "ck": "%(table_name)s_%(constraint_name)s_check",
}


class Namespace:
    """Binds tables to one logical schema.

    Declaring the same table name twice in a namespace fails when the second
    model class is defined, not when it is first queried.
    """

    def __init__(self, name: str):
        if name not in NAMESPACES:
            raise UnknownNamespaceError(name)
        self.name = name
        self._tables: Set[str] = set()

    def declare(self, table_name: str) -> str:
        if table_name in self._tables:
            raise DuplicateTableError(self.name, table_name)
        self._tables.add(table_name)
        return table_name

    def table_args(self, *args, **kwargs) -> tuple:
        return (*args, {"schema": self.name, **kwargs})

    def ref(self, target: str) -> str:
        """Qualify a 'table.column' foreign key target with this schema"""
        return f"{self.name}.{target}"

    @property
    def tables(self) -> Set[str]:
        return set(self._tables)

    def __repr__(self) -> str:
        return f"Namespace({self.name!r})"


_namespaces: Dict[str, Namespace] = {}


def namespace(name: str) -> Namespace:
    if name not in _namespaces:
        _namespaces[name] = Namespace(name)
    return _namespaces[name]


server = namespace("server")


class generate_uuid(FunctionElement):
    """Server-side UUID default"""
    type = Uuid()
    name = "generate_uuid"
    inherit_cache = True


@compiles(generate_uuid)
def _generate_uuid_default(element, compiler, **kw):
    # 32 hex chars, the storage format of Uuid on backends without a native type
    return "lower(hex(randomblob(16)))"


@compiles(generate_uuid, "postgresql")
def _generate_uuid_postgresql(element, compiler, **kw):
    return "uuid_generate_v4()"


def idpk():
    return mapped_column(
        Uuid,
        primary_key=True,
        nullable=False,
        default=uuid.uuid4,
        server_default=generate_uuid(),
    )


def utcnow() -> datetime:
    return datetime.now(UTC)


class UTCDateTime(TypeDecorator):
    """Timezone-aware DateTime that always hands back UTC-aware values.

    SQLite drops the offset on storage, so naive values read back are UTC.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value == '':
            return None
        if value is not None:
            if value.tzinfo is None:
                value = value.replace(tzinfo=UTC)
            else:
                value = value.astimezone(UTC)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


def timestamp_column(nullable: bool = False, default_now: bool = True):
    if default_now:
        return mapped_column(UTCDateTime, nullable=nullable, default=utcnow, server_default=func.now())
    return mapped_column(UTCDateTime, nullable=nullable)


def enum_type(enum_cls: Type[PyEnum], name: str, ns: Namespace = server) -> Enum:
    """Named enum type stored by value, created in the namespace schema"""
    return Enum(
        enum_cls,
        name=name,
        schema=ns.name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


StringList = JSON().with_variant(postgresql.ARRAY(Text), "postgresql")


def postgres_only(index: Index) -> Index:
    """Emit an index only on PostgreSQL (GIN, trigram and text-search indexes)"""
    index.info["dialect"] = "postgresql"
    return index.ddl_if(dialect="postgresql")


class Base(DeclarativeBase):
    """Base class for all models"""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class CreatedAtMixin:
    """Mixin to add a created_at column"""
    created_at: Mapped[datetime] = timestamp_column()


class TimestampMixin(CreatedAtMixin):
    """Mixin to add created_at and updated_at columns.

    updated_at is maintained by the repositories, not by the database.
    """
    updated_at: Mapped[datetime] = timestamp_column()
