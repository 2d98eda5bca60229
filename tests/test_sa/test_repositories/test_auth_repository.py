# tests/test_sa/test_repositories/test_auth_repository.py
import pytest
from datetime import timedelta
from bookshelf.sa.errors import TokenInvalidError
from bookshelf.sa.models import EmailVerificationToken, PasswordResetToken
from bookshelf.sa.repositories import AuthTokenRepository


@pytest.fixture
def auth_repo(db_session):
    """Fixture to create an AuthTokenRepository instance"""
    return AuthTokenRepository(db_session)


def test_issue_and_consume_reset_token(auth_repo, sample_user):
    issued = auth_repo.issue_password_reset(sample_user.id)
    assert issued.is_used is False
    assert len(issued.token) >= 32

    consumed = auth_repo.consume(PasswordResetToken, issued.token)
    assert consumed.id == issued.id
    assert consumed.is_used is True


def test_token_is_single_use(auth_repo, sample_user):
    issued = auth_repo.issue_email_verification(sample_user.id)
    auth_repo.consume(EmailVerificationToken, issued.token)
    with pytest.raises(TokenInvalidError):
        auth_repo.consume(EmailVerificationToken, issued.token)


def test_expired_token(auth_repo, sample_user):
    issued = auth_repo.issue_password_reset(sample_user.id, ttl=timedelta(seconds=-1))
    with pytest.raises(TokenInvalidError):
        auth_repo.consume(PasswordResetToken, issued.token)


def test_unknown_token(auth_repo):
    with pytest.raises(TokenInvalidError):
        auth_repo.consume(PasswordResetToken, "nope")


def test_token_kinds_do_not_mix(auth_repo, sample_user):
    issued = auth_repo.issue_password_reset(sample_user.id)
    with pytest.raises(TokenInvalidError):
        auth_repo.consume(EmailVerificationToken, issued.token)


def test_invalidate_for_user(auth_repo, sample_user, other_user, db_session):
    first = auth_repo.issue_password_reset(sample_user.id)
    auth_repo.issue_password_reset(sample_user.id)
    theirs = auth_repo.issue_password_reset(other_user.id)

    assert auth_repo.invalidate_for_user(PasswordResetToken, sample_user.id) == 2
    db_session.expire_all()
    with pytest.raises(TokenInvalidError):
        auth_repo.consume(PasswordResetToken, first.token)
    assert auth_repo.consume(PasswordResetToken, theirs.token).is_used is True


def test_sessions(auth_repo, sample_user):
    session = auth_repo.create_session(sample_user.id, ip_address="10.0.0.1", user_agent="pytest")
    assert session.session_token != session.refresh_token
    assert auth_repo.get_active_session(session.session_token).id == session.id

    assert auth_repo.revoke_session(session.session_token) is True
    assert auth_repo.revoke_session(session.session_token) is False
    assert auth_repo.get_active_session(session.session_token) is None


def test_expired_session_is_not_active(auth_repo, sample_user):
    session = auth_repo.create_session(sample_user.id, ttl=timedelta(seconds=-1))
    assert auth_repo.get_active_session(session.session_token) is None
