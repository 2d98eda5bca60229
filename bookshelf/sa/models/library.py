# bookshelf/sa/models/library.py
from datetime import datetime
from enum import Enum
from typing import List, Optional
import uuid

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Text, Uuid, true
from sqlalchemy.orm import relationship, Mapped, mapped_column

from .base import Base, StringList, TimestampMixin, enum_type, idpk, server, timestamp_column


class LibraryMemberRole(str, Enum):
    OWNER = "owner"
    MANAGER = "manager"
    STAFF = "staff"
    MEMBER = "member"


class Library(Base, TimestampMixin):
    __tablename__ = server.declare('library')

    id: Mapped[uuid.UUID] = idpk()
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(server.ref('user.id'), ondelete='RESTRICT', onupdate='CASCADE'), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    owner = relationship('User', back_populates='owned_libraries')
    books = relationship('LibraryBooks', back_populates='library', passive_deletes='all')
    members = relationship('LibraryMember', back_populates='library', passive_deletes='all')

    # Convenience relationship
    catalog = relationship('Book', secondary='server.library_books', viewonly=True)

    __table_args__ = server.table_args(
        Index('idx_library_owner_id', 'owner_id'),
        Index('idx_library_name', 'name'),
    )


class LibraryBooks(Base):
    """Copies of a book held by a library. Goes away with either side."""
    __tablename__ = server.declare('library_books')

    id: Mapped[uuid.UUID] = idpk()
    library_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(server.ref('library.id'), ondelete='CASCADE', onupdate='CASCADE'), nullable=False
    )
    book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(server.ref('book.id'), ondelete='CASCADE', onupdate='CASCADE'), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default='1')
    shelf_location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    condition: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    added_at: Mapped[datetime] = timestamp_column()
    updated_at: Mapped[datetime] = timestamp_column()

    # Relationships
    library = relationship('Library', back_populates='books')
    book = relationship('Book', back_populates='library_entries')
    borrow_requests = relationship('BorrowRequest', back_populates='library_book', passive_deletes='all')

    __table_args__ = server.table_args(
        Index('unique_library_book', 'library_id', 'book_id', unique=True),
        Index('idx_library_books_book_id', 'book_id'),
    )


class LibraryMember(Base, TimestampMixin):
    __tablename__ = server.declare('library_member')

    id: Mapped[uuid.UUID] = idpk()
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(server.ref('user.id'), ondelete='RESTRICT', onupdate='CASCADE'), nullable=False
    )
    library_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(server.ref('library.id'), ondelete='RESTRICT', onupdate='CASCADE'), nullable=False
    )
    role: Mapped[LibraryMemberRole] = mapped_column(
        enum_type(LibraryMemberRole, 'library_member_role'), nullable=False,
        default=LibraryMemberRole.MEMBER, server_default=LibraryMemberRole.MEMBER.value
    )
    permissions: Mapped[Optional[List[str]]] = mapped_column(StringList, nullable=True)
    join_date: Mapped[datetime] = timestamp_column()
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    invited_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey(server.ref('user.id'), ondelete='SET NULL', onupdate='CASCADE'), nullable=True
    )

    # Relationships
    user = relationship('User', foreign_keys=[user_id], back_populates='library_memberships')
    library = relationship('Library', back_populates='members')
    inviter = relationship('User', foreign_keys=[invited_by], back_populates='sent_library_invitations')

    __table_args__ = server.table_args(
        Index('unique_library_member', 'user_id', 'library_id', unique=True),
        Index('idx_library_member_library_id', 'library_id'),
    )
