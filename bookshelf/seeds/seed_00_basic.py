"""Users, roles and the book catalogue. Resets every table first."""
from datetime import datetime, timedelta, UTC

from sqlalchemy.orm import Session

from bookshelf.permissions import ROLE_TEMPLATES
from bookshelf.sa.models import (
    Author, Book, BookLanguage, Library, Publisher, Role, Subject, User, UserRoleType,
)
from bookshelf.sa.repositories import default_registry
from bookshelf.seeds import reset_tables, rng
from bookshelf.seeds import catalog_data as data

USER_COUNT = 25
ADMIN_COUNT = 3


def run_seed(session: Session) -> None:
    random = rng(__name__)
    reset_tables(session, default_registry().tables(["server"]))

    users = []
    for i in range(USER_COUNT):
        first = data.FIRST_NAMES[i % len(data.FIRST_NAMES)]
        last = random.choice(data.LAST_NAMES)
        username = f"{first}.{last}.{i}".lower()
        users.append(User(
            username=username,
            email=f"{username}@example.com",
            first_name=first,
            last_name=last,
            role=UserRoleType.ADMIN if i < ADMIN_COUNT else UserRoleType.USER,
        ))
    session.add_all(users)

    session.add_all([
        Role(name=template.name, description=template.description, permissions=list(template.permissions))
        for template in ROLE_TEMPLATES.values()
    ])

    authors = [Author(name=name) for name in data.AUTHORS]
    publishers = [Publisher(name=name) for name in data.PUBLISHERS]
    session.add_all(authors + publishers)

    subjects = {}
    for parent_name, children in data.SUBJECTS.items():
        parent = subjects.setdefault(parent_name, Subject(name=parent_name))
        for child_name in children:
            child = subjects.setdefault(child_name, Subject(name=child_name))
            child.parent = parent
    session.add_all(subjects.values())

    for i, (title, language) in enumerate(data.BOOKS):
        published = datetime(1900, 1, 1, tzinfo=UTC) + timedelta(days=random.randint(0, 45_000))
        session.add(Book(
            title=title,
            isbn=f"{i:010d}",
            isbn13=f"978{i:010d}",
            binding=random.choice(data.BINDINGS),
            language=BookLanguage(language),
            date_published=published,
            pages=random.randint(50, 1000),
            overview=f"{title}, a sample catalogue entry.",
            author=authors[i % len(authors)],
            publisher=random.choice(publishers),
            subject=random.choice(list(subjects.values())),
        ))

    session.flush()
    for name in data.LIBRARY_NAMES:
        session.add(Library(
            owner=random.choice(users),
            name=name,
            description=f"{name} community library",
            location=random.choice(data.CITIES),
        ))
