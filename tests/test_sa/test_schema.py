# tests/test_sa/test_schema.py
import pytest
from sqlalchemy import Column, ForeignKey, Integer, MetaData, Table, Uuid
from bookshelf.sa import migrations
from bookshelf.sa.database import connect
from bookshelf.sa.ddl import check_database, declared_snapshot, diff_snapshots, generate_ddl, introspect
from bookshelf.sa.errors import (
    DuplicateTableError, MigrationError, MissingDeletePolicyError, UnknownEntityError,
    UnknownNamespaceError, UnknownRelationError,
)
from bookshelf.sa.models import Book, BorrowRequest, Namespace, User, UserAuth
from tests.test_sa.utils import DBInspector, compare_model_to_db, print_table_schema

ENTITY_TABLES = {
    "user", "user_auth", "user_session", "password_reset_token", "email_verification_token",
    "oauth_profile", "login_attempt", "account_lockout", "security_audit_log", "role", "user_role",
    "author", "publisher", "subject", "book", "library", "library_books", "library_member", "borrow_request",
}


def test_every_entity_lives_in_server_namespace(registry):
    assert {t.name for t in registry.tables()} == ENTITY_TABLES
    assert registry.namespaces == ["server"]
    assert all(t.fullname == f"server.{t.name}" for t in registry.tables())


def test_tables_are_dependency_ordered(registry):
    names = [t.name for t in registry.tables()]
    assert names.index("user") < names.index("library") < names.index("library_books")
    assert names.index("library_books") < names.index("borrow_request")
    assert registry.tables(["gateway"]) == []


def test_entity_lookup(registry):
    assert registry.entity("Book") is Book
    assert registry.entity("book") is Book
    assert registry.entity("server.book") is Book
    assert registry.entity(Book) is Book
    with pytest.raises(UnknownEntityError):
        registry.entity("Shelf")


def test_relations_are_named_per_foreign_key(registry):
    """Each user reference on a borrow request is its own many-to-one relation"""
    relations = registry.relations(BorrowRequest)
    for name, column in [("borrower", "user_id"), ("approver", "approved_by"),
                         ("rejecter", "rejected_by"), ("returner", "returned_by")]:
        assert relations[name].target == "User"
        assert relations[name].kind == "many-to-one"
        assert relations[name].foreign_keys == (f"borrow_request.{column}",)

    assert registry.relation(User, "user_auth").kind == "one-to-one"
    assert registry.relation("Library", "catalog").kind == "many-to-many"
    assert registry.relation("Library", "catalog").secondary == "library_books"
    with pytest.raises(UnknownRelationError):
        registry.relation(User, "friends")


def test_resolve_dotted_path(registry):
    path = registry.resolve_path(BorrowRequest, "library_book.book")
    assert [rel.target for rel in path] == ["LibraryBooks", "Book"]


def test_delete_policies(registry):
    assert registry.delete_policy("user_auth", "user_id") == "CASCADE"
    assert registry.delete_policy("security_audit_log", "user_id") == "SET NULL"
    assert registry.delete_policy("user_role", "role_id") == "RESTRICT"
    assert registry.delete_policy("user_role", "assigned_by") == "SET NULL"
    assert registry.delete_policy("library", "owner_id") == "RESTRICT"
    assert registry.delete_policy("library_books", "book_id") == "CASCADE"
    assert registry.delete_policy("borrow_request", "user_id") == "RESTRICT"
    assert registry.delete_policy("borrow_request", "approved_by") == "SET NULL"
    assert registry.delete_policy("subject", "parent_id") == "SET NULL"
    assert all(rule.onupdate == "CASCADE" for rule in registry.foreign_keys())


def test_postgres_only_indexes_are_filtered(registry):
    pg = {i.name for i in registry.indexes(Book, "postgresql")}
    lite = {i.name for i in registry.indexes(Book, "sqlite")}
    assert {"books_title_trgm_idx", "books_title_tsv_idx", "books_search_idx"} <= pg
    assert not lite & {"books_title_trgm_idx", "books_title_tsv_idx", "books_search_idx"}
    assert "unique_isbn" in lite


def test_namespace_rejects_duplicate_table():
    gateway = Namespace("gateway")
    gateway.declare("session")
    with pytest.raises(DuplicateTableError):
        gateway.declare("session")
    assert gateway.tables == {"session"}


def test_unknown_namespace():
    with pytest.raises(UnknownNamespaceError):
        Namespace("billing")


def test_table_args_bind_schema():
    args = Namespace("memory").table_args("index")
    assert args == ("index", {"schema": "memory"})


def test_validate_requires_delete_policy(registry, monkeypatch):
    """A foreign key without ON DELETE fails the schema checks"""
    metadata = MetaData()
    Table("parent", metadata, Column("id", Uuid, primary_key=True), schema="server")
    Table(
        "child", metadata,
        Column("id", Integer, primary_key=True),
        Column("parent_id", Uuid, ForeignKey("server.parent.id")),
        schema="server",
    )
    monkeypatch.setattr(registry, "metadata", metadata)
    with pytest.raises(MissingDeletePolicyError):
        registry.validate()


def test_postgres_ddl(registry):
    statements = generate_ddl(registry, "postgresql")
    sql = "\n".join(statements)
    assert statements[0] == 'CREATE EXTENSION IF NOT EXISTS "uuid-ossp"'
    assert 'CREATE SCHEMA IF NOT EXISTS "server"' in statements
    assert "CREATE TYPE server.borrow_request_status AS ENUM" in sql
    assert "CREATE TABLE server.user_role" in sql
    assert "DEFAULT uuid_generate_v4()" in sql
    assert "ON DELETE RESTRICT ON UPDATE CASCADE" in sql
    assert "ON DELETE SET NULL ON UPDATE CASCADE" in sql
    assert "CREATE UNIQUE INDEX unique_email ON server.\"user\" (email)" in sql
    assert "USING gin" in sql
    assert "to_tsvector('english', title)" in sql
    assert "setweight(to_tsvector('arabic', overview), 'B')" in sql


def test_sqlite_ddl(registry):
    sql = "\n".join(generate_ddl(registry, "sqlite"))
    assert "CREATE SCHEMA" not in sql
    assert "server." not in sql
    assert "USING gin" not in sql
    assert "CREATE TABLE library_books" in sql
    assert "REFERENCES library_books (id)" in sql
    assert "unique_isbn ON book (isbn)" in sql
    assert "books_title_trgm_idx" not in sql
    assert "to_tsvector" not in sql


def test_ddl_namespace_filter(registry):
    assert generate_ddl(registry, "sqlite", ["gateway"]) == []


def test_ddl_unknown_dialect(registry):
    with pytest.raises(ValueError):
        generate_ddl(registry, "oracle")


def test_created_schema_matches_models(database, registry, db_session):
    """Introspecting the test database gives back what the models declare"""
    assert check_database(database.engine, registry) == []
    print_table_schema(db_session, "borrow_request")
    for model in (User, Book, BorrowRequest, UserAuth):
        assert compare_model_to_db(db_session, model) == []


def test_stored_foreign_key_actions(db_session):
    inspector = DBInspector(db_session)
    assert inspector.foreign_key_actions("library_books") == {"library_id": "CASCADE", "book_id": "CASCADE"}
    assert inspector.foreign_key_actions("user_role") == {
        "user_id": "CASCADE", "role_id": "RESTRICT", "assigned_by": "SET NULL",
    }
    assert inspector.unique_indexes("library_books") == {"unique_library_book": ["library_id", "book_id"]}


def test_diff_reports_missing_pieces(database, registry):
    expected = declared_snapshot(registry, database.engine.dialect)
    actual = introspect(database.engine, registry)
    del actual["book"]
    actual["user"].columns.pop("email")
    actual["user"].indexes.pop("unique_email")

    differences = diff_snapshots(expected, actual)
    assert any("'book'" in d for d in differences)
    assert any("user.email" in d for d in differences)
    assert any("unique_email" in d for d in differences)


def test_migrate_sqlite(tmp_path, registry):
    """The initial revision builds the same schema the models declare, and reverses cleanly"""
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    migrations.migrate(url=url)
    assert migrations.current_revision(url) == "0001"

    database = connect("test", url, registry=registry)
    try:
        assert check_database(database.engine, registry) == []
        migrations.downgrade("base", url=url)
        assert migrations.current_revision(url) is None
        assert len(check_database(database.engine, registry)) == len(registry.tables())
    finally:
        database.dispose()


def test_migrate_unknown_revision(tmp_path):
    with pytest.raises(MigrationError):
        migrations.migrate("9999", url=f"sqlite:///{tmp_path / 'bad.db'}")


def test_sqlite_ddl_builds_a_database(registry, tmp_path):
    """The rendered SQLite statements run as-is against an empty file"""
    database = connect("test", f"sqlite:///{tmp_path / 'rendered.db'}", registry=registry)
    try:
        with database.engine.begin() as conn:
            for statement in generate_ddl(registry, "sqlite"):
                conn.exec_driver_sql(statement)
        assert check_database(database.engine, registry) == []
    finally:
        database.dispose()


def test_enum_types_live_in_namespace():
    assert Book.__table__.c.language.type.schema == "server"
    assert BorrowRequest.__table__.c.status.type.schema == "server"
