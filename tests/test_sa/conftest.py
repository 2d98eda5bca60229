# tests/test_sa/conftest.py
import sys
import pytest
from pathlib import Path
from datetime import datetime, UTC, timedelta
from sqlalchemy import delete
from sqlalchemy.orm import Session

# Add project root to Python path so tests.test_sa.utils imports
project_root = str(Path(__file__).parent.parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from bookshelf.sa.database import connect
from bookshelf.sa.models import (
    Author, Book, BookLanguage, Library, LibraryBooks, Publisher, Role, Subject, User,
)
from bookshelf.sa.registry import build_registry


@pytest.fixture(scope="session")
def registry():
    """Validated schema registry shared by every test"""
    return build_registry()


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory):
    """Create a temporary directory for the test database."""
    test_dir = tmp_path_factory.mktemp("test_db")
    return str(test_dir / "test_bookshelf.db")


@pytest.fixture(scope="session")
def database(test_db_path, registry):
    """Create a test database instance"""
    db = connect("test", f"sqlite:///{test_db_path}", registry=registry)
    db.drop_db()
    db.init_db()

    yield db

    db.dispose()


@pytest.fixture(autouse=True)
def cleanup_db(database):
    """Empty every table before each test, children first"""
    with database.engine.begin() as conn:
        for table in reversed(database.registry.tables()):
            conn.execute(delete(table))
    yield


@pytest.fixture(scope="function")
def db_session(database):
    """Create a new database session for a test"""
    session: Session = database._SessionFactory()
    try:
        yield session
    finally:
        session.close()


def make_user(db_session, username="reader", **values):
    user = User(
        username=username,
        email=values.pop("email", f"{username}@example.com"),
        first_name=values.pop("first_name", "Test"),
        last_name=values.pop("last_name", "User"),
        **values
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def sample_user(db_session):
    """Create a sample user for testing."""
    return make_user(db_session, "test.user")


@pytest.fixture
def other_user(db_session):
    """A second user, for staff and ownership references"""
    return make_user(db_session, "other.user", first_name="Other")


@pytest.fixture
def sample_author(db_session):
    """Create a sample author for testing."""
    author = Author(name="Test Author")
    db_session.add(author)
    db_session.commit()
    return author


@pytest.fixture
def sample_publisher(db_session):
    publisher = Publisher(name="Test Publisher")
    db_session.add(publisher)
    db_session.commit()
    return publisher


@pytest.fixture
def sample_subject(db_session):
    """A parent subject with one child"""
    parent = Subject(name="Fiction")
    child = Subject(name="Science Fiction", parent=parent)
    db_session.add_all([parent, child])
    db_session.commit()
    return child


@pytest.fixture
def sample_book(db_session, sample_author, sample_publisher, sample_subject):
    """Create a sample book for testing."""
    book = Book(
        title="Test Book",
        title_long="Test Book: The Long Title",
        isbn="1234567890",
        isbn13="9781234567890",
        language=BookLanguage.ENGLISH,
        date_published=datetime.now(UTC) - timedelta(days=365),
        pages=200,
        overview="Test book overview",
        author=sample_author,
        publisher=sample_publisher,
        subject=sample_subject,
    )
    db_session.add(book)
    db_session.commit()
    return book


@pytest.fixture
def multiple_books(db_session, sample_author):
    """Create multiple books for testing."""
    books = []
    for i in range(1, 11):
        book = Book(
            title=f"Test Book {i:02d}",
            isbn=f"{i:010d}",
            isbn13=f"978{i:010d}",
            pages=100 + i,
            author=sample_author,
        )
        db_session.add(book)
        books.append(book)
    db_session.commit()
    return books


@pytest.fixture
def sample_library(db_session, sample_user):
    """Create a library owned by the sample user."""
    library = Library(owner=sample_user, name="Test Library", location="Test City")
    db_session.add(library)
    db_session.commit()
    return library


@pytest.fixture
def sample_holding(db_session, sample_library, sample_book):
    """One copy of the sample book in the sample library"""
    holding = LibraryBooks(library=sample_library, book=sample_book, quantity=2, shelf_location="A1")
    db_session.add(holding)
    db_session.commit()
    return holding


@pytest.fixture
def admin_role(db_session):
    role = Role(name="admin", description="Administrators", permissions=["system:manage"])
    db_session.add(role)
    db_session.commit()
    return role
