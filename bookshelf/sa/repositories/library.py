import logging
from typing import List, Optional
import uuid

from sqlalchemy import delete
from sqlalchemy.orm import contains_eager

from bookshelf.sa.errors import InvalidInputError, NotFoundError
from bookshelf.sa.models import Book, Library, LibraryBooks, LibraryMember, LibraryMemberRole, utcnow
from .base import Repository, as_uuid

logger = logging.getLogger(__name__)


class LibraryRepository(Repository[Library]):
    """Repository for managing libraries, their holdings and their members."""

    model = Library

    def __init__(self, session, registry=None):
        super().__init__(session, registry=registry)
        self.holdings = Repository(session, LibraryBooks, registry=self.registry)
        self.memberships = Repository(session, LibraryMember, registry=self.registry)

    def create_library(self, owner_id: uuid.UUID, name: str, description: Optional[str] = None,
                       address: Optional[str] = None, location: Optional[str] = None) -> Library:
        """Create a library and register its owner as an OWNER member.

        Raises:
            ReferenceViolationError: If the owner does not exist
        """
        with self.writing():
            library = self.build(
                owner_id=owner_id, name=name, description=description, address=address, location=location
            )
            self.session.flush()
            self.memberships.build(user_id=owner_id, library_id=library.id, role=LibraryMemberRole.OWNER)
        logger.info(f"Created library '{name}'")
        return library

    def get_holding(self, library_id: uuid.UUID, book_id: uuid.UUID) -> Optional[LibraryBooks]:
        return (
            self.session.query(LibraryBooks)
            .filter(LibraryBooks.library_id == as_uuid(library_id), LibraryBooks.book_id == as_uuid(book_id))
            .first()
        )

    def add_book(self, library_id: uuid.UUID, book_id: uuid.UUID, quantity: int = 1,
                 shelf_location: Optional[str] = None, condition: Optional[str] = None) -> LibraryBooks:
        """Add a book to a library's holdings.

        Args:
            library_id: The library receiving the book
            book_id: The book being added
            quantity: Number of copies (at least 1)
            shelf_location: Where the copies are shelved
            condition: Free-form condition note

        Returns:
            The created LibraryBooks row

        Raises:
            DuplicateEntryError: If the library already holds this book; use set_quantity instead
            ReferenceViolationError: If the library or book does not exist
        """
        if quantity < 1:
            raise InvalidInputError(f"Quantity must be at least 1, got {quantity}")
        return self.holdings.insert(
            library_id=library_id, book_id=book_id, quantity=quantity,
            shelf_location=shelf_location, condition=condition,
        )

    def set_quantity(self, library_id: uuid.UUID, book_id: uuid.UUID, quantity: int) -> LibraryBooks:
        if quantity < 0:
            raise InvalidInputError(f"Quantity cannot be negative, got {quantity}")
        holding = self.get_holding(library_id, book_id)
        if holding is None:
            raise NotFoundError("LibraryBooks", f"{library_id}/{book_id}")
        return self.holdings.update(holding.id, quantity=quantity)

    def remove_book(self, library_id: uuid.UUID, book_id: uuid.UUID) -> bool:
        """Remove a book from a library. Its borrow requests go with it.

        Returns:
            True if the holding was removed, False if the library did not hold the book
        """
        with self.writing():
            result = self.session.execute(
                delete(LibraryBooks)
                .where(LibraryBooks.library_id == as_uuid(library_id), LibraryBooks.book_id == as_uuid(book_id))
                .execution_options(synchronize_session=False)
            )
        return result.rowcount > 0

    def books_in_library(self, library_id: uuid.UUID) -> List[LibraryBooks]:
        """Holdings of a library with their books loaded, ordered by title"""
        return (
            self.session.query(LibraryBooks)
            .join(LibraryBooks.book)
            .options(contains_eager(LibraryBooks.book))
            .filter(LibraryBooks.library_id == as_uuid(library_id))
            .order_by(Book.title)
            .all()
        )

    def add_member(self, library_id: uuid.UUID, user_id: uuid.UUID,
                   role: LibraryMemberRole = LibraryMemberRole.MEMBER,
                   invited_by: Optional[uuid.UUID] = None,
                   permissions: Optional[List[str]] = None) -> LibraryMember:
        """Add a user to a library.

        Raises:
            DuplicateEntryError: If the user is already a member
        """
        return self.memberships.insert(
            library_id=library_id, user_id=user_id, role=role,
            invited_by=invited_by, permissions=permissions, join_date=utcnow(),
        )

    def members(self, library_id: uuid.UUID, active_only: bool = True) -> List[LibraryMember]:
        query = self.session.query(LibraryMember).filter(LibraryMember.library_id == as_uuid(library_id))
        if active_only:
            query = query.filter(LibraryMember.is_active.is_(True))
        return query.order_by(LibraryMember.join_date).all()
