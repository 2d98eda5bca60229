# bookshelf/sa/models/role.py
from datetime import datetime
from typing import List, Optional
import uuid

from sqlalchemy import ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import relationship, Mapped, mapped_column

from .base import Base, StringList, TimestampMixin, idpk, server, timestamp_column


class Role(Base, TimestampMixin):
    """Named permission set"""
    __tablename__ = server.declare('role')

    id: Mapped[uuid.UUID] = idpk()
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    permissions: Mapped[Optional[List[str]]] = mapped_column(StringList, nullable=True)

    user_roles = relationship('UserRole', back_populates='role', passive_deletes='all')

    # Convenience relationship
    users = relationship(
        'User',
        secondary=lambda: UserRole.__table__,
        primaryjoin='Role.id == UserRole.role_id',
        secondaryjoin='User.id == UserRole.user_id',
        viewonly=True,
    )

    __table_args__ = server.table_args(
        Index('unique_role_name', 'name', unique=True),
    )


class UserRole(Base):
    """Role assignment. A role cannot be deleted while assigned."""
    __tablename__ = server.declare('user_role')

    id: Mapped[uuid.UUID] = idpk()
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(server.ref('user.id'), ondelete='CASCADE', onupdate='CASCADE'), nullable=False
    )
    role_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(server.ref('role.id'), ondelete='RESTRICT', onupdate='CASCADE'), nullable=False
    )
    assigned_at: Mapped[datetime] = timestamp_column()
    assigned_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey(server.ref('user.id'), ondelete='SET NULL', onupdate='CASCADE'), nullable=True
    )

    user = relationship('User', foreign_keys=[user_id], back_populates='user_roles')
    role = relationship('Role', back_populates='user_roles')
    assigned_by_user = relationship('User', foreign_keys=[assigned_by], back_populates='assigned_user_roles')

    __table_args__ = server.table_args(
        Index('unique_user_role', 'user_id', 'role_id', unique=True),
        Index('idx_user_roles_user_id', 'user_id'),
        Index('idx_user_roles_role_id', 'role_id'),
    )
