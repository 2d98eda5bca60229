import logging
from datetime import datetime, timedelta
from typing import Optional
import uuid

from sqlalchemy import func, update

from bookshelf.sa.models import AccountLockout, AuditSeverity, LoginAttempt, SecurityAuditLog, utcnow
from .base import Repository, as_uuid

logger = logging.getLogger(__name__)

FAILURE_WINDOW = timedelta(minutes=15)
LOCKOUT_PERIOD = timedelta(minutes=30)


class SecurityRepository:
    """Login attempts, account lockouts and the security audit trail"""

    def __init__(self, session, registry=None):
        self.session = session
        self.attempts = Repository(session, LoginAttempt, registry=registry)
        self.lockouts = Repository(session, AccountLockout, registry=registry)
        self.audit_log = Repository(session, SecurityAuditLog, registry=registry)

    def record_login_attempt(self, email: str, ip_address: str, is_successful: bool,
                             user_agent: Optional[str] = None,
                             failure_reason: Optional[str] = None) -> LoginAttempt:
        return self.attempts.insert(
            email=email.lower(), ip_address=ip_address, is_successful=is_successful,
            user_agent=user_agent, failure_reason=failure_reason, attempted_at=utcnow(),
        )

    def recent_failures(self, email: str, window: timedelta = FAILURE_WINDOW,
                        now: Optional[datetime] = None) -> int:
        """Count failed attempts for an email within the window ending now"""
        since = (now or utcnow()) - window
        return (
            self.session.query(func.count(LoginAttempt.id))
            .filter(
                LoginAttempt.email == email.lower(),
                LoginAttempt.is_successful.is_(False),
                LoginAttempt.attempted_at >= since,
            )
            .scalar()
        )

    def lock_account(self, user_id: uuid.UUID, reason: str, failed_attempts: int = 0,
                     period: timedelta = LOCKOUT_PERIOD) -> AccountLockout:
        now = utcnow()
        lockout = self.lockouts.insert(
            user_id=user_id, reason=reason, failed_attempts=failed_attempts,
            locked_at=now, locked_until=now + period, is_active=True,
        )
        logger.warning(f"Locked account {user_id} until {lockout.locked_until}: {reason}")
        return lockout

    def active_lockout(self, user_id: uuid.UUID, now: Optional[datetime] = None) -> Optional[AccountLockout]:
        return (
            self.session.query(AccountLockout)
            .filter(
                AccountLockout.user_id == as_uuid(user_id),
                AccountLockout.is_active.is_(True),
                AccountLockout.locked_until > (now or utcnow()),
            )
            .order_by(AccountLockout.locked_until.desc())
            .first()
        )

    def release_lockout(self, user_id: uuid.UUID) -> int:
        with self.lockouts.writing():
            result = self.session.execute(
                update(AccountLockout)
                .where(AccountLockout.user_id == as_uuid(user_id), AccountLockout.is_active.is_(True))
                .values(is_active=False)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount

    def audit(self, action: str, user_id: Optional[uuid.UUID] = None, details: Optional[str] = None,
              severity: AuditSeverity = AuditSeverity.INFO, ip_address: Optional[str] = None,
              user_agent: Optional[str] = None) -> SecurityAuditLog:
        """Append an entry to the security audit log"""
        return self.audit_log.insert(
            action=action, user_id=user_id, details=details, severity=AuditSeverity(severity).value,
            ip_address=ip_address, user_agent=user_agent, timestamp=utcnow(),
        )
