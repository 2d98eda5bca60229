# bookshelf/sa/models/publisher.py
import uuid
from sqlalchemy import Index, Text
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, CreatedAtMixin, idpk, server


class Publisher(Base, CreatedAtMixin):
    __tablename__ = server.declare('publisher')

    id: Mapped[uuid.UUID] = idpk()
    name: Mapped[str] = mapped_column(Text, nullable=False)

    # Relationships
    books = relationship('Book', back_populates='publisher', passive_deletes='all')

    __table_args__ = server.table_args(
        Index('unique_publisher_name', 'name', unique=True),
    )
