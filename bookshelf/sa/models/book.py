# bookshelf/sa/models/book.py
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from sqlalchemy import ForeignKey, Index, Integer, Text, Uuid, func, literal_column
from sqlalchemy.orm import relationship, Mapped, mapped_column

from .base import Base, CreatedAtMixin, UTCDateTime, enum_type, idpk, postgres_only, server


class BookLanguage(str, Enum):
    ENGLISH = "en"
    ARABIC = "ar"
    OTHER = "other"


def _catalog_fk(target: str):
    return mapped_column(
        Uuid, ForeignKey(server.ref(target), ondelete='SET NULL', onupdate='CASCADE'), nullable=True
    )


class Book(Base, CreatedAtMixin):
    __tablename__ = server.declare('book')

    id: Mapped[uuid.UUID] = idpk()
    title: Mapped[str] = mapped_column(Text, nullable=False)
    title_long: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    isbn: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    isbn13: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    dewey_decimal: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    binding: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    language: Mapped[BookLanguage] = mapped_column(
        enum_type(BookLanguage, 'language'), nullable=False,
        default=BookLanguage.OTHER, server_default=BookLanguage.OTHER.value
    )
    date_published: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    edition: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pages: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    overview: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    excerpt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    synopsis: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    author_id: Mapped[Optional[uuid.UUID]] = _catalog_fk('author.id')
    publisher_id: Mapped[Optional[uuid.UUID]] = _catalog_fk('publisher.id')
    subject_id: Mapped[Optional[uuid.UUID]] = _catalog_fk('subject.id')

    # Relationships
    author = relationship('Author', back_populates='books')
    publisher = relationship('Publisher', back_populates='books')
    subject = relationship('Subject', back_populates='books')
    library_entries = relationship('LibraryBooks', back_populates='book', passive_deletes='all')

    # Convenience relationship
    libraries = relationship('Library', secondary='server.library_books', viewonly=True)

    __table_args__ = server.table_args(
        Index('unique_isbn', 'isbn', unique=True),
        Index('idx_book_author_id', 'author_id'),
        Index('idx_book_publisher_id', 'publisher_id'),
        Index('idx_book_subject_id', 'subject_id'),
    )


def _tsvector(config: str, column):
    return func.to_tsvector(literal_column(f"'{config}'"), column)


def _weighted(column, config: str, weight: str):
    return func.setweight(_tsvector(config, column), literal_column(f"'{weight}'"))


# Search indexes (PostgreSQL only: pg_trgm and text search)
_title = Book.__table__.c.title
_overview = Book.__table__.c.overview

postgres_only(Index(
    'books_title_trgm_idx', _title,
    postgresql_using='gin', postgresql_ops={'title': 'gin_trgm_ops'},
))
postgres_only(Index(
    'books_title_tsv_idx',
    _tsvector('english', _title).op('||')(_tsvector('arabic', _title)),
    postgresql_using='gin',
))
postgres_only(Index(
    'books_search_idx',
    _weighted(_title, 'english', 'A')
    .op('||')(_weighted(_title, 'arabic', 'A'))
    .op('||')(_weighted(_overview, 'english', 'B'))
    .op('||')(_weighted(_overview, 'arabic', 'B')),
    postgresql_using='gin',
))
