# bookshelf/sa/models/subject.py
from typing import Optional
import uuid
from sqlalchemy import ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, CreatedAtMixin, idpk, server


class Subject(Base, CreatedAtMixin):
    """Subject tree node.

    parent_id points back into this table. The target is given as a string so
    it resolves once the table exists; the schema itself does not stop a
    subject from becoming its own ancestor (SubjectRepository does).
    """
    __tablename__ = server.declare('subject')

    id: Mapped[uuid.UUID] = idpk()
    name: Mapped[str] = mapped_column(Text, nullable=False)
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey(server.ref('subject.id'), ondelete='SET NULL', onupdate='CASCADE'), nullable=True
    )

    # Relationships
    parent = relationship('Subject', remote_side='Subject.id', back_populates='children')
    children = relationship('Subject', back_populates='parent', passive_deletes='all')
    books = relationship('Book', back_populates='subject', passive_deletes='all')

    __table_args__ = server.table_args(
        Index('unique_subject_name', 'name', unique=True),
        Index('idx_subject_parent_id', 'parent_id'),
    )
