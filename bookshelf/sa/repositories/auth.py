import logging
import secrets
from datetime import timedelta
from typing import Optional, Type, Union
import uuid

from sqlalchemy import update

from bookshelf.sa.errors import TokenInvalidError
from bookshelf.sa.models import EmailVerificationToken, PasswordResetToken, UserSession, utcnow
from .base import Repository, as_uuid

logger = logging.getLogger(__name__)

Token = Union[PasswordResetToken, EmailVerificationToken]

PASSWORD_RESET_TTL = timedelta(hours=1)
EMAIL_VERIFICATION_TTL = timedelta(hours=24)
SESSION_TTL = timedelta(days=30)


def new_token() -> str:
    return secrets.token_urlsafe(32)


class AuthTokenRepository:
    """Single-use tokens and login sessions.

    Tokens are never deleted; consuming one flips is_used so it cannot be replayed.
    """

    def __init__(self, session, registry=None):
        self.session = session
        self.reset_tokens = Repository(session, PasswordResetToken, registry=registry)
        self.verification_tokens = Repository(session, EmailVerificationToken, registry=registry)
        self.sessions = Repository(session, UserSession, registry=registry)

    def _repository(self, model: Type[Token]) -> Repository:
        return self.reset_tokens if model is PasswordResetToken else self.verification_tokens

    def issue_password_reset(self, user_id: uuid.UUID, ttl: timedelta = PASSWORD_RESET_TTL) -> PasswordResetToken:
        return self.reset_tokens.insert(user_id=user_id, token=new_token(), expires_at=utcnow() + ttl)

    def issue_email_verification(self, user_id: uuid.UUID,
                                 ttl: timedelta = EMAIL_VERIFICATION_TTL) -> EmailVerificationToken:
        return self.verification_tokens.insert(user_id=user_id, token=new_token(), expires_at=utcnow() + ttl)

    def consume(self, model: Type[Token], token: str) -> Token:
        """Mark a token used and return it.

        Args:
            model: PasswordResetToken or EmailVerificationToken
            token: The token string handed to the user

        Returns:
            The consumed token row

        Raises:
            TokenInvalidError: If the token is unknown, already used, or expired
        """
        repository = self._repository(model)
        found = self.session.query(model).filter(model.token == token).first()
        if found is None:
            raise TokenInvalidError("Unknown token")
        if found.is_used:
            raise TokenInvalidError("Token has already been used")
        if found.expires_at <= utcnow():
            raise TokenInvalidError("Token has expired")

        values = {"is_used": True}
        if "updated_at" in repository.table.c:
            values["updated_at"] = utcnow()
        # Conditional update so two concurrent consumers cannot both succeed
        with repository.writing():
            result = self.session.execute(
                update(model)
                .where(model.id == found.id, model.is_used.is_(False))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        if result.rowcount == 0:
            raise TokenInvalidError("Token has already been used")
        self.session.refresh(found)
        logger.info(f"Consumed {model.__name__} for user {found.user_id}")
        return found

    def invalidate_for_user(self, model: Type[Token], user_id: uuid.UUID) -> int:
        """Mark every outstanding token of one kind for a user as used"""
        repository = self._repository(model)
        values = {"is_used": True}
        if "updated_at" in repository.table.c:
            values["updated_at"] = utcnow()
        with repository.writing():
            result = self.session.execute(
                update(model)
                .where(model.user_id == as_uuid(user_id), model.is_used.is_(False))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount

    def create_session(self, user_id: uuid.UUID, ip_address: Optional[str] = None,
                       user_agent: Optional[str] = None, ttl: timedelta = SESSION_TTL) -> UserSession:
        now = utcnow()
        return self.sessions.insert(
            user_id=user_id,
            session_token=new_token(),
            refresh_token=new_token(),
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=now + ttl,
            last_accessed_at=now,
        )

    def get_active_session(self, session_token: str) -> Optional[UserSession]:
        return (
            self.session.query(UserSession)
            .filter(
                UserSession.session_token == session_token,
                UserSession.is_active.is_(True),
                UserSession.expires_at > utcnow(),
            )
            .first()
        )

    def revoke_session(self, session_token: str) -> bool:
        with self.sessions.writing():
            result = self.session.execute(
                update(UserSession)
                .where(UserSession.session_token == session_token, UserSession.is_active.is_(True))
                .values(is_active=False)
                .execution_options(synchronize_session=False)
            )
        return result.rowcount > 0
