# bookshelf/sa/models/borrow_request.py
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from sqlalchemy import ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from .base import Base, TimestampMixin, UTCDateTime, enum_type, idpk, server, timestamp_column


class BorrowRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    BORROWED = "borrowed"
    RETURNED = "returned"
    OVERDUE = "overdue"


def _staff_fk():
    return mapped_column(
        Uuid, ForeignKey(server.ref('user.id'), ondelete='SET NULL', onupdate='CASCADE'), nullable=True
    )


class BorrowRequest(Base, TimestampMixin):
    """Loan lifecycle for one library copy.

    Four columns point at user; each relationship names its column so joins
    never have to guess.
    """
    __tablename__ = server.declare('borrow_request')

    id: Mapped[uuid.UUID] = idpk()
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(server.ref('user.id'), ondelete='RESTRICT', onupdate='CASCADE'), nullable=False
    )
    library_book_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(server.ref('library_books.id'), ondelete='CASCADE', onupdate='CASCADE'), nullable=False
    )
    status: Mapped[BorrowRequestStatus] = mapped_column(
        enum_type(BorrowRequestStatus, 'borrow_request_status'), nullable=False,
        default=BorrowRequestStatus.PENDING, server_default=BorrowRequestStatus.PENDING.value
    )
    request_date: Mapped[datetime] = timestamp_column()
    approved_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    approved_by: Mapped[Optional[uuid.UUID]] = _staff_fk()
    rejected_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    rejected_by: Mapped[Optional[uuid.UUID]] = _staff_fk()
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    due_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    return_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    returned_by: Mapped[Optional[uuid.UUID]] = _staff_fk()
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    borrower = relationship('User', foreign_keys=[user_id], back_populates='borrow_requests')
    approver = relationship('User', foreign_keys=[approved_by], back_populates='approved_borrow_requests')
    rejecter = relationship('User', foreign_keys=[rejected_by], back_populates='rejected_borrow_requests')
    returner = relationship('User', foreign_keys=[returned_by], back_populates='returned_borrow_requests')
    library_book = relationship('LibraryBooks', back_populates='borrow_requests')

    __table_args__ = server.table_args(
        Index('idx_borrow_request_user_id', 'user_id'),
        Index('idx_borrow_request_library_book_id', 'library_book_id'),
        Index('idx_borrow_request_status', 'status'),
    )
