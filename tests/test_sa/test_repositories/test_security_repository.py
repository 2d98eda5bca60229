# tests/test_sa/test_repositories/test_security_repository.py
import pytest
from datetime import datetime, UTC, timedelta
from bookshelf.sa.models import AuditSeverity, SecurityAuditLog
from bookshelf.sa.repositories import SecurityRepository


@pytest.fixture
def security_repo(db_session):
    """Fixture to create a SecurityRepository instance"""
    return SecurityRepository(db_session)


def test_recent_failures(security_repo):
    for _ in range(3):
        security_repo.record_login_attempt("Reader@Example.com", "10.0.0.1", False, failure_reason="invalid_password")
    security_repo.record_login_attempt("reader@example.com", "10.0.0.1", True)
    security_repo.record_login_attempt("someone@example.com", "10.0.0.2", False)

    assert security_repo.recent_failures("reader@example.com") == 3
    # Outside the window
    later = datetime.now(UTC) + timedelta(hours=1)
    assert security_repo.recent_failures("reader@example.com", now=later) == 0


def test_lockout(security_repo, sample_user):
    lockout = security_repo.lock_account(sample_user.id, "Too many failed login attempts", failed_attempts=5)
    assert lockout.is_active is True
    assert security_repo.active_lockout(sample_user.id).id == lockout.id

    # Lockouts lapse on their own
    after = lockout.locked_until + timedelta(seconds=1)
    assert security_repo.active_lockout(sample_user.id, now=after) is None

    assert security_repo.release_lockout(sample_user.id) == 1
    assert security_repo.active_lockout(sample_user.id) is None


def test_audit(security_repo, sample_user, db_session):
    security_repo.audit("login", user_id=sample_user.id, ip_address="10.0.0.1")
    security_repo.audit("role_assignment", details="granted librarian", severity=AuditSeverity.WARNING)

    logs = db_session.query(SecurityAuditLog).order_by(SecurityAuditLog.action).all()
    assert [(log.action, log.severity) for log in logs] == [("login", "info"), ("role_assignment", "warning")]
    assert logs[0].user_id == sample_user.id
    assert logs[1].user_id is None
