"""Schema registry.

Composes the entity classes and their relationship declarations into one
object that the connection factory, the DDL/migration tooling and the
repositories share. Nothing here changes column constraints; relations are
read-only metadata used for eager-load resolution and schema checks.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Type, Union

from sqlalchemy import Index, Table, inspect
from sqlalchemy.orm import RelationshipDirection, configure_mappers

from bookshelf.sa.errors import (
    AmbiguousRelationError,
    DuplicateIndexError,
    MissingDeletePolicyError,
    UnknownEntityError,
    UnknownNamespaceError,
    UnknownRelationError,
)
from bookshelf.sa.models import Base, NAMESPACES

logger = logging.getLogger(__name__)

EntityRef = Union[str, Type[Base]]

_KINDS = {
    RelationshipDirection.MANYTOONE: "many-to-one",
    RelationshipDirection.ONETOMANY: "one-to-many",
    RelationshipDirection.MANYTOMANY: "many-to-many",
}


@dataclass(frozen=True)
class Relation:
    name: str
    source: str
    target: str
    kind: str
    foreign_keys: Tuple[str, ...]
    secondary: Optional[str] = None
    viewonly: bool = False


@dataclass(frozen=True)
class ForeignKeyRule:
    table: str
    columns: Tuple[str, ...]
    referred_table: str
    referred_columns: Tuple[str, ...]
    ondelete: Optional[str]
    onupdate: Optional[str]


class SchemaRegistry:
    """All entity and relation definitions, bound to one MetaData"""

    def __init__(self, base: Type[Base] = Base):
        self.base = base
        self.metadata = base.metadata
        configure_mappers()

        self._entities: Dict[str, Type[Base]] = {}
        self._by_table: Dict[str, Type[Base]] = {}
        for mapper in base.registry.mappers:
            cls = mapper.class_
            self._entities[cls.__name__] = cls
            self._by_table[cls.__table__.name] = cls
            self._by_table[cls.__table__.fullname] = cls

        self._relations: Dict[str, Dict[str, Relation]] = {
            name: self._collect_relations(cls) for name, cls in self._entities.items()
        }

    # Entities

    @property
    def entities(self) -> Dict[str, Type[Base]]:
        return dict(self._entities)

    def entity(self, ref: EntityRef) -> Type[Base]:
        """Look up an entity by class, class name or (qualified) table name"""
        if isinstance(ref, type):
            if ref.__name__ in self._entities and self._entities[ref.__name__] is ref:
                return ref
            raise UnknownEntityError(ref.__name__)
        if ref in self._entities:
            return self._entities[ref]
        if ref in self._by_table:
            return self._by_table[ref]
        raise UnknownEntityError(ref)

    @property
    def namespaces(self) -> List[str]:
        return sorted({t.schema for t in self.metadata.tables.values() if t.schema})

    def tables(self, namespaces: Optional[Iterable[str]] = None) -> List[Table]:
        """Tables in dependency order, optionally limited to some namespaces"""
        wanted = set(namespaces) if namespaces is not None else None
        return [t for t in self.metadata.sorted_tables if wanted is None or t.schema in wanted]

    def table(self, ref: EntityRef) -> Table:
        return self.entity(ref).__table__

    # Relations

    def _collect_relations(self, cls: Type[Base]) -> Dict[str, Relation]:
        relations = {}
        for rel in inspect(cls).relationships:
            kind = _KINDS[rel.direction]
            if rel.direction is RelationshipDirection.ONETOMANY and not rel.uselist:
                kind = "one-to-one"
            fk_columns: List[str] = []
            for pair in rel.local_remote_pairs:
                for column in pair:
                    name = f"{column.table.name}.{column.name}"
                    if column.foreign_keys and name not in fk_columns:
                        fk_columns.append(name)
            relations[rel.key] = Relation(
                name=rel.key,
                source=cls.__name__,
                target=rel.mapper.class_.__name__,
                kind=kind,
                foreign_keys=tuple(fk_columns),
                secondary=rel.secondary.name if rel.secondary is not None else None,
                viewonly=rel.viewonly,
            )
        return relations

    def relations(self, ref: EntityRef) -> Dict[str, Relation]:
        return dict(self._relations[self.entity(ref).__name__])

    def relation(self, ref: EntityRef, name: str) -> Relation:
        cls = self.entity(ref)
        try:
            return self._relations[cls.__name__][name]
        except KeyError:
            raise UnknownRelationError(cls.__name__, name) from None

    def resolve_path(self, ref: EntityRef, path: str) -> List[Relation]:
        """Resolve a dotted relation path such as 'library_book.book'"""
        current = self.entity(ref)
        resolved = []
        for name in path.split("."):
            rel = self.relation(current, name)
            resolved.append(rel)
            current = self.entity(rel.target)
        return resolved

    def loader_path(self, ref: EntityRef, path: str) -> list:
        """Class-bound relationship attributes for a dotted path, for loader options"""
        attributes = []
        for rel in self.resolve_path(ref, path):
            attributes.append(getattr(self.entity(rel.source), rel.name))
        return attributes

    # Constraints

    def foreign_keys(self, namespaces: Optional[Iterable[str]] = None) -> List[ForeignKeyRule]:
        rules = []
        for table in self.tables(namespaces):
            for fk in sorted(table.foreign_key_constraints, key=lambda c: c.column_keys):
                rules.append(ForeignKeyRule(
                    table=table.name,
                    columns=tuple(fk.column_keys),
                    referred_table=fk.referred_table.name,
                    referred_columns=tuple(e.column.name for e in fk.elements),
                    ondelete=fk.ondelete,
                    onupdate=fk.onupdate,
                ))
        return rules

    def delete_policy(self, table: str, column: str) -> Optional[str]:
        for rule in self.foreign_keys():
            if rule.table == table and rule.columns == (column,):
                return rule.ondelete
        raise KeyError(f"{table}.{column} is not a foreign key")

    def indexes(self, ref: Union[EntityRef, Table], dialect: Optional[str] = None) -> List[Index]:
        """Declared indexes that apply to a dialect (all of them when dialect is None)"""
        table = ref if isinstance(ref, Table) else self.table(ref)
        return sorted(
            (i for i in table.indexes if dialect is None or i.info.get("dialect", dialect) == dialect),
            key=lambda i: i.name,
        )

    # Checks

    def validate(self) -> "SchemaRegistry":
        """Schema-build checks; raises a SchemaError subclass on the first problem"""
        index_names: Dict[str, set] = defaultdict(set)
        for table in self.metadata.sorted_tables:
            if table.schema not in NAMESPACES:
                raise UnknownNamespaceError(str(table.schema))
            for index in table.indexes:
                if index.name in index_names[table.schema]:
                    raise DuplicateIndexError(table.schema, index.name)
                index_names[table.schema].add(index.name)
            for fk in table.foreign_key_constraints:
                if not fk.ondelete:
                    raise MissingDeletePolicyError(
                        f"{table.name}({', '.join(fk.column_keys)}) has no ON DELETE action"
                    )

        for entity, relations in self._relations.items():
            seen: Dict[Tuple[str, str, Tuple[str, ...]], str] = {}
            for rel in relations.values():
                if rel.viewonly:
                    continue
                key = (rel.target, rel.kind, rel.foreign_keys)
                if key in seen:
                    raise AmbiguousRelationError(
                        f"{entity}.{rel.name} and {entity}.{seen[key]} both join {rel.target} "
                        f"through {', '.join(rel.foreign_keys)}"
                    )
                seen[key] = rel.name

        logger.debug(f"Schema registry validated: {len(self._entities)} entities")
        return self


def build_registry(base: Type[Base] = Base) -> SchemaRegistry:
    """Compose and validate the registry from every entity module"""
    return SchemaRegistry(base).validate()


__all__ = ["SchemaRegistry", "Relation", "ForeignKeyRule", "build_registry"]
