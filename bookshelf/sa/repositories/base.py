import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Dict, Generic, Iterable, Iterator, List, Optional, Sequence, Tuple, Type, TypeVar, Union
import uuid

from pydantic import BaseModel, ConfigDict, ValidationError, create_model
from sqlalchemy import JSON, Table, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from bookshelf.sa.errors import (
    ConstraintViolationError,
    DuplicateEntryError,
    IntegrityViolation,
    InvalidInputError,
    NotFoundError,
    ReferenceViolationError,
)
from bookshelf.sa.models import Base, utcnow
from bookshelf.sa.registry import SchemaRegistry, build_registry

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# PostgreSQL SQLSTATE codes
_UNIQUE_VIOLATION = "23505"
_REFERENCE_VIOLATIONS = ("23503", "23001")


@lru_cache(maxsize=None)
def default_registry() -> SchemaRegistry:
    return build_registry()


def _python_type(column) -> Any:
    if isinstance(column.type, JSON):
        return List[str]
    try:
        return column.type.python_type
    except NotImplementedError:
        return Any


def _input_models(table: Table) -> Tuple[Type[BaseModel], Type[BaseModel]]:
    """Pydantic models for insert and update input, derived from the table's columns"""
    config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)
    create_fields: Dict[str, Any] = {}
    update_fields: Dict[str, Any] = {}
    for column in table.columns:
        annotation = _python_type(column)
        if column.nullable:
            annotation = Optional[annotation]
        has_default = column.default is not None or column.server_default is not None
        required = not column.nullable and not has_default and not column.primary_key
        create_fields[column.key] = (annotation, ... if required else None)
        if not column.primary_key:
            update_fields[column.key] = (annotation, None)
    name = "".join(part.title() for part in table.name.split("_"))
    return (
        create_model(f"{name}Create", __config__=config, **create_fields),
        create_model(f"{name}Update", __config__=config, **update_fields),
    )


def as_uuid(value: Union[str, uuid.UUID]) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise InvalidInputError(f"Invalid id '{value}'") from None


def translate_integrity_error(error: IntegrityError) -> IntegrityViolation:
    """Map a driver integrity error onto the repository error hierarchy"""
    orig = error.orig
    code = getattr(orig, "pgcode", None)
    diag = getattr(orig, "diag", None)
    constraint = getattr(diag, "constraint_name", None)
    message = str(orig).strip().splitlines()[0] if orig is not None else str(error)

    if code == _UNIQUE_VIOLATION or "UNIQUE constraint failed" in message:
        return DuplicateEntryError(message, constraint)
    if code in _REFERENCE_VIOLATIONS or "FOREIGN KEY constraint failed" in message:
        return ReferenceViolationError(message, constraint)
    return ConstraintViolationError(message, constraint)


class Repository(Generic[ModelT]):
    """Generic create/read/update/delete for one entity.

    Writes are validated against the declared column types before any SQL is
    issued and committed immediately; integrity failures are rolled back and
    re-raised as IntegrityViolation subclasses.
    """

    model: Type[ModelT] = None

    def __init__(self, session: Session, model: Optional[Type[ModelT]] = None,
                 registry: Optional[SchemaRegistry] = None):
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy session for database operations
            model: Entity class; defaults to the subclass's ``model``
            registry: Schema registry used to resolve relation paths
        """
        self.session = session
        self.model = model or self.model
        if self.model is None:
            raise TypeError(f"{type(self).__name__} needs a model")
        self.registry = registry or default_registry()
        self.table: Table = self.model.__table__
        self._create_schema, self._update_schema = _input_models(self.table)

    # Validation

    def _validate(self, schema: Type[BaseModel], values: Dict[str, Any]) -> Dict[str, Any]:
        try:
            validated = schema.model_validate(values)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid {self.model.__name__} input: {e}") from e
        return validated.model_dump(exclude_unset=True)

    def _column_filters(self, filters: Optional[Dict[str, Any]]) -> list:
        criteria = []
        for key, value in (filters or {}).items():
            if key not in self.table.c:
                raise InvalidInputError(f"{self.model.__name__} has no column '{key}'")
            column = getattr(self.model, key)
            if isinstance(value, (list, tuple, set, frozenset)):
                criteria.append(column.in_(list(value)))
            elif value is None:
                criteria.append(column.is_(None))
            else:
                criteria.append(column == value)
        return criteria

    def _ordering(self, order_by: Union[str, Sequence[str], None]) -> list:
        if order_by is None:
            return []
        fields = [order_by] if isinstance(order_by, str) else list(order_by)
        clauses = []
        for field in fields:
            descending = field.startswith("-")
            name = field.lstrip("-")
            if name not in self.table.c:
                raise InvalidInputError(f"Cannot order {self.model.__name__} by '{name}'")
            column = getattr(self.model, name)
            clauses.append(column.desc() if descending else column.asc())
        return clauses

    def _load_options(self, load: Iterable[str]) -> list:
        options = []
        for path in load:
            attributes = self.registry.loader_path(self.model, path)
            option = joinedload(attributes[0])
            for attribute in attributes[1:]:
                option = option.joinedload(attribute)
            options.append(option)
        return options

    @contextmanager
    def writing(self) -> Iterator[None]:
        """Commit on exit; integrity failures roll back and surface as IntegrityViolation"""
        try:
            yield
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            error = translate_integrity_error(e)
            logger.warning(f"{self.model.__name__} write rejected: {error}")
            raise error from e
        except Exception:
            self.session.rollback()
            raise

    # Reads

    def get_by_id(self, id: uuid.UUID, load: Iterable[str] = ()) -> Optional[ModelT]:
        """Get an entity by its primary key.

        Args:
            id: Primary key value
            load: Relation names or dotted paths to load eagerly

        Returns:
            The entity if found, None otherwise
        """
        return (
            self.session.query(self.model)
            .options(*self._load_options(load))
            .filter(self.model.id == as_uuid(id))
            .first()
        )

    def get_or_raise(self, id: uuid.UUID, load: Iterable[str] = ()) -> ModelT:
        entity = self.get_by_id(id, load)
        if entity is None:
            raise NotFoundError(self.model.__name__, id)
        return entity

    def find_many(
        self,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Union[str, Sequence[str], None] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        load: Iterable[str] = (),
    ) -> List[ModelT]:
        """Find entities matching column equality filters.

        Args:
            filters: Column name to value; lists and tuples match any of their items
            order_by: Column name or names, prefixed with '-' for descending order
            limit: Maximum number of results to return
            offset: Number of records to skip
            load: Relation names or dotted paths (e.g. 'library_book.book') to load eagerly

        Returns:
            List of matching entities
        """
        query = (
            self.session.query(self.model)
            .options(*self._load_options(load))
            .filter(*self._column_filters(filters))
            .order_by(*self._ordering(order_by))
        )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        return (
            self.session.query(func.count(self.model.id))
            .filter(*self._column_filters(filters))
            .scalar()
        )

    # Writes

    def build(self, **values) -> ModelT:
        """Validate input and add a new entity to the session without committing"""
        entity = self.model(**self._validate(self._create_schema, values))
        self.session.add(entity)
        return entity

    def insert(self, **values) -> ModelT:
        with self.writing():
            entity = self.build(**values)
        logger.debug(f"Inserted {self.model.__name__} {entity.id}")
        return entity

    def update(self, id: uuid.UUID, /, **values) -> ModelT:
        """Update columns of an existing entity.

        Raises:
            NotFoundError: If no entity has the given id
            InvalidInputError: If a value does not fit its column
        """
        changes = self._validate(self._update_schema, values)
        entity = self.get_or_raise(id)
        if "updated_at" in self.table.c and "updated_at" not in changes:
            changes["updated_at"] = utcnow()
        with self.writing():
            for key, value in changes.items():
                setattr(entity, key, value)
        return entity

    def delete(self, id: uuid.UUID) -> bool:
        """Delete an entity; the database applies each foreign key's delete action.

        Returns:
            True if a row was deleted, False if not found
        """
        with self.writing():
            result = self.session.execute(
                delete(self.model).where(self.model.id == as_uuid(id)).execution_options(synchronize_session=False)
            )
        return result.rowcount > 0
