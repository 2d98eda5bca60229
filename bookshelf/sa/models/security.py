# bookshelf/sa/models/security.py
from datetime import datetime
from enum import Enum
from typing import Optional
import uuid

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Text, Uuid, true
from sqlalchemy.orm import relationship, Mapped, mapped_column

from .base import Base, UTCDateTime, idpk, server, timestamp_column


class AuditSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class LoginAttempt(Base):
    """Append-only record of sign-in attempts, keyed by email rather than user"""
    __tablename__ = server.declare('login_attempt')

    id: Mapped[uuid.UUID] = idpk()
    email: Mapped[str] = mapped_column(Text, nullable=False)
    ip_address: Mapped[str] = mapped_column(Text, nullable=False)
    is_successful: Mapped[bool] = mapped_column(Boolean, nullable=False)
    attempted_at: Mapped[datetime] = timestamp_column()
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    failure_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = server.table_args(
        Index('idx_login_attempts_email', 'email'),
        Index('idx_login_attempts_ip', 'ip_address'),
        Index('idx_login_attempts_attempted_at', 'attempted_at'),
    )


class AccountLockout(Base):
    __tablename__ = server.declare('account_lockout')

    id: Mapped[uuid.UUID] = idpk()
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey(server.ref('user.id'), ondelete='CASCADE', onupdate='CASCADE'), nullable=False
    )
    locked_at: Mapped[datetime] = timestamp_column()
    locked_until: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    failed_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default='0')
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    user = relationship('User', back_populates='account_lockouts')

    __table_args__ = server.table_args(
        Index('idx_account_lockout_user_id', 'user_id'),
        Index('idx_account_lockout_locked_until', 'locked_until'),
    )


class SecurityAuditLog(Base):
    """Audit trail. Rows outlive their user; user_id is nulled on user deletion."""
    __tablename__ = server.declare('security_audit_log')

    id: Mapped[uuid.UUID] = idpk()
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey(server.ref('user.id'), ondelete='SET NULL', onupdate='CASCADE'), nullable=True
    )
    action: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = timestamp_column()
    severity: Mapped[str] = mapped_column(
        Text, nullable=False, default=AuditSeverity.INFO.value, server_default=AuditSeverity.INFO.value
    )

    user = relationship('User', back_populates='audit_logs')

    __table_args__ = server.table_args(
        Index('idx_audit_log_user_id', 'user_id'),
        Index('idx_audit_log_action', 'action'),
        Index('idx_audit_log_timestamp', 'timestamp'),
        Index('idx_audit_log_severity', 'severity'),
    )
