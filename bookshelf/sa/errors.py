from typing import Optional


class BookshelfError(Exception):
    """Base class for all bookshelf database errors"""


# Schema-build errors

class SchemaError(BookshelfError):
    pass


class UnknownNamespaceError(SchemaError):
    def __init__(self, name: str):
        super().__init__(f"Unknown namespace '{name}'")
        self.name = name


class DuplicateTableError(SchemaError):
    def __init__(self, namespace: str, table: str):
        super().__init__(f"Table '{table}' is already declared in namespace '{namespace}'")
        self.namespace = namespace
        self.table = table


class DuplicateIndexError(SchemaError):
    def __init__(self, namespace: str, index: str):
        super().__init__(f"Index '{index}' is declared more than once in namespace '{namespace}'")
        self.namespace = namespace
        self.index = index


class AmbiguousRelationError(SchemaError):
    pass


class MissingDeletePolicyError(SchemaError):
    pass


class UnknownEntityError(SchemaError, KeyError):
    def __init__(self, name: str):
        super().__init__(f"Unknown entity '{name}'")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class UnknownRelationError(SchemaError, KeyError):
    def __init__(self, entity: str, name: str):
        super().__init__(f"Entity '{entity}' has no relation named '{name}'")
        self.entity = entity
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class MigrationError(BookshelfError):
    pass


# Query-layer errors. These subclass ValueError so callers that only know
# about ValueError keep working.

class RepositoryError(BookshelfError, ValueError):
    pass


class InvalidInputError(RepositoryError):
    pass


class NotFoundError(RepositoryError):
    def __init__(self, entity: str, key):
        super().__init__(f"{entity} '{key}' not found")
        self.entity = entity
        self.key = key


class IntegrityViolation(RepositoryError):
    """Write rejected by the storage engine"""

    def __init__(self, message: str, constraint: Optional[str] = None):
        super().__init__(message)
        self.constraint = constraint


class DuplicateEntryError(IntegrityViolation):
    pass


class ReferenceViolationError(IntegrityViolation):
    pass


class ConstraintViolationError(IntegrityViolation):
    pass


class InvalidTransitionError(RepositoryError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move borrow request from '{current}' to '{target}'")
        self.current = current
        self.target = target


class TokenInvalidError(RepositoryError):
    pass


class SubjectCycleError(RepositoryError):
    pass
