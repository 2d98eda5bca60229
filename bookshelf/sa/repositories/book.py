from typing import List, Optional
import uuid

from sqlalchemy import or_
from sqlalchemy.orm import joinedload

from bookshelf.sa.models import Book
from .base import Repository, as_uuid


class BookRepository(Repository[Book]):
    model = Book

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        """Get a book by ISBN-10 or ISBN-13"""
        return (
            self.session.query(Book)
            .filter(or_(Book.isbn == isbn, Book.isbn13 == isbn))
            .first()
        )

    def search_by_title(self, query: str, limit: int = 20) -> List[Book]:
        """Search for books by title.

        Args:
            query: The search query string, matched case-insensitively against title and long title
            limit: Maximum number of results to return (default: 20)

        Returns:
            List of matching Book objects ordered by title
        """
        pattern = f"%{query}%"
        return (
            self.session.query(Book)
            .filter(or_(Book.title.ilike(pattern), Book.title_long.ilike(pattern)))
            .order_by(Book.title)
            .limit(limit)
            .all()
        )

    def with_metadata(self, book_id: uuid.UUID) -> Optional[Book]:
        """Get a book with its author, publisher and subject loaded"""
        return (
            self.session.query(Book)
            .filter(Book.id == as_uuid(book_id))
            .options(
                joinedload(Book.author),
                joinedload(Book.publisher),
                joinedload(Book.subject),
            )
            .first()
        )
