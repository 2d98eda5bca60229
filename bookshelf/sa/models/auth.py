# bookshelf/sa/models/auth.py
from datetime import datetime
from typing import Optional
import uuid

from sqlalchemy import Boolean, ForeignKey, Index, Text, Uuid, true, false
from sqlalchemy.orm import relationship, Mapped, mapped_column

from .base import Base, CreatedAtMixin, TimestampMixin, UTCDateTime, idpk, server, timestamp_column


def _user_fk():
    return mapped_column(
        Uuid, ForeignKey(server.ref('user.id'), ondelete='CASCADE', onupdate='CASCADE'), nullable=False
    )


class UserAuth(Base):
    """Password credentials, one row per user"""
    __tablename__ = server.declare('user_auth')

    id: Mapped[uuid.UUID] = idpk()
    user_id: Mapped[uuid.UUID] = _user_fk()
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)

    user = relationship('User', back_populates='user_auth')

    __table_args__ = server.table_args(
        Index('unique_user_auth_user_id', 'user_id', unique=True),
    )


class UserSession(Base, CreatedAtMixin):
    __tablename__ = server.declare('user_session')

    id: Mapped[uuid.UUID] = idpk()
    user_id: Mapped[uuid.UUID] = _user_fk()
    session_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    last_accessed_at: Mapped[datetime] = timestamp_column()

    user = relationship('User', back_populates='sessions')

    __table_args__ = server.table_args(
        Index('unique_session_token', 'session_token', unique=True),
        Index('unique_refresh_token', 'refresh_token', unique=True),
        Index('idx_user_sessions_user_id', 'user_id'),
        Index('idx_user_sessions_expires_at', 'expires_at'),
    )


class PasswordResetToken(Base, CreatedAtMixin):
    """Single-use credential; invalidated through is_used, never deleted"""
    __tablename__ = server.declare('password_reset_token')

    id: Mapped[uuid.UUID] = idpk()
    user_id: Mapped[uuid.UUID] = _user_fk()
    token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    is_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    user = relationship('User', back_populates='password_reset_tokens')

    __table_args__ = server.table_args(
        Index('unique_password_reset_token', 'token', unique=True),
        Index('idx_password_reset_user_id', 'user_id'),
        Index('idx_password_reset_expires_at', 'expires_at'),
    )


class EmailVerificationToken(Base, TimestampMixin):
    __tablename__ = server.declare('email_verification_token')

    id: Mapped[uuid.UUID] = idpk()
    user_id: Mapped[uuid.UUID] = _user_fk()
    token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    is_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    user = relationship('User', back_populates='email_verification_tokens')

    __table_args__ = server.table_args(
        Index('unique_email_verification_token', 'token', unique=True),
        Index('idx_email_verification_user_id', 'user_id'),
        Index('idx_email_verification_expires_at', 'expires_at'),
    )


class OAuthProfile(Base, TimestampMixin):
    __tablename__ = server.declare('oauth_profile')

    id: Mapped[uuid.UUID] = idpk()
    user_id: Mapped[uuid.UUID] = _user_fk()
    provider: Mapped[str] = mapped_column(Text, nullable=False)
    provider_id: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    profile_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    access_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    token_expires_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    user = relationship('User', back_populates='oauth_profiles')

    __table_args__ = server.table_args(
        Index('unique_oauth_provider_user', 'provider', 'provider_id', unique=True),
        Index('unique_oauth_user_provider', 'user_id', 'provider', unique=True),
        Index('idx_oauth_profile_user_id', 'user_id'),
        Index('idx_oauth_profile_provider', 'provider'),
        Index('idx_oauth_profile_email', 'email'),
    )
