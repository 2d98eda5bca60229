"""Role assignments, credentials, sessions, tokens and security history for the seeded users."""
import hashlib
from datetime import timedelta

from sqlalchemy.orm import Session

from bookshelf.sa.models import (
    AccountLockout, AuditSeverity, EmailVerificationToken, LoginAttempt, OAuthProfile,
    PasswordResetToken, Role, SecurityAuditLog, User, UserAuth, UserRole, UserRoleType,
    UserSession, utcnow,
)
from bookshelf.sa.repositories.auth import new_token
from bookshelf.seeds import reset_tables, rng
from bookshelf.seeds import catalog_data as data

AUTH_TABLES = [
    UserAuth.__table__,
    UserRole.__table__,
    UserSession.__table__,
    PasswordResetToken.__table__,
    EmailVerificationToken.__table__,
    AccountLockout.__table__,
    OAuthProfile.__table__,
    LoginAttempt.__table__,
    SecurityAuditLog.__table__,
]


def _fake_hash(username: str) -> str:
    # Placeholder credential; seeded accounts cannot be logged into
    return "sha256$" + hashlib.sha256(f"seed:{username}".encode()).hexdigest()


def run_seed(session: Session) -> None:
    random = rng(__name__)
    reset_tables(session, AUTH_TABLES)

    users = session.query(User).order_by(User.username).all()
    roles = {role.name: role for role in session.query(Role).all()}
    if not users or not roles:
        raise RuntimeError("seed_01_auth needs the users and roles from seed_00_basic")

    now = utcnow()
    for user in users:
        session.add(UserAuth(user=user, hashed_password=_fake_hash(user.username)))
        role_name = "Administrator" if user.role == UserRoleType.ADMIN else "Reader"
        session.add(UserRole(user=user, role=roles[role_name], assigned_at=now))

        for _ in range(random.randint(0, 2)):
            session.add(UserSession(
                user=user,
                session_token=new_token(),
                refresh_token=new_token(),
                ip_address="192.168.1.1",
                user_agent=random.choice(data.USER_AGENTS),
                is_active=random.random() > 0.2,
                expires_at=now + timedelta(days=random.randint(1, 30)),
                last_accessed_at=now,
            ))

        for _ in range(random.randint(1, 4)):
            ok = random.random() > 0.3
            session.add(LoginAttempt(
                email=user.email,
                ip_address="192.168.1.1",
                is_successful=ok,
                attempted_at=now - timedelta(minutes=random.randint(1, 600)),
                user_agent=random.choice(data.USER_AGENTS),
                failure_reason=None if ok else "invalid_password",
            ))
            session.add(SecurityAuditLog(
                user=user,
                action="login" if ok else "failed_login",
                ip_address="192.168.1.1",
                severity=(AuditSeverity.INFO if ok else AuditSeverity.WARNING).value,
                timestamp=now,
            ))

    for user in random.sample(users, 10):
        session.add(PasswordResetToken(
            user=user, token=new_token(), expires_at=now + timedelta(hours=1), is_used=random.random() > 0.5,
        ))
    for user in random.sample(users, 8):
        session.add(EmailVerificationToken(
            user=user, token=new_token(), expires_at=now + timedelta(hours=24), is_used=False,
        ))
    for user in random.sample(users, 3):
        session.add(AccountLockout(
            user=user,
            locked_at=now,
            locked_until=now + timedelta(hours=random.randint(1, 24)),
            reason=random.choice(data.LOCKOUT_REASONS),
            failed_attempts=random.randint(3, 10),
        ))

    # One profile per (user, provider)
    for user in random.sample(users, 15):
        provider = random.choice(data.OAUTH_PROVIDERS)
        session.add(OAuthProfile(
            user=user,
            provider=provider,
            provider_id=f"{provider}-{user.id.hex[:12]}",
            email=user.email,
            access_token=new_token(),
            token_expires_at=now + timedelta(days=random.randint(1, 30)),
        ))
