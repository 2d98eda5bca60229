# bookshelf/sa/models/__init__.py
from .base import (
    Base, CreatedAtMixin, TimestampMixin, Namespace, NAMESPACES, namespace, server,
    idpk, postgres_only, UTCDateTime, StringList, utcnow,
)
from .user import User, UserRoleType
from .auth import UserAuth, UserSession, PasswordResetToken, EmailVerificationToken, OAuthProfile
from .security import LoginAttempt, AccountLockout, SecurityAuditLog, AuditSeverity
from .role import Role, UserRole
from .author import Author
from .publisher import Publisher
from .subject import Subject
from .book import Book, BookLanguage
from .library import Library, LibraryBooks, LibraryMember, LibraryMemberRole
from .borrow_request import BorrowRequest, BorrowRequestStatus

__all__ = [
    'Base',
    'CreatedAtMixin',
    'TimestampMixin',
    'Namespace',
    'NAMESPACES',
    'namespace',
    'server',
    'idpk',
    'postgres_only',
    'UTCDateTime',
    'StringList',
    'utcnow',
    'User',
    'UserRoleType',
    'UserAuth',
    'UserSession',
    'PasswordResetToken',
    'EmailVerificationToken',
    'OAuthProfile',
    'LoginAttempt',
    'AccountLockout',
    'SecurityAuditLog',
    'AuditSeverity',
    'Role',
    'UserRole',
    'Author',
    'Publisher',
    'Subject',
    'Book',
    'BookLanguage',
    'Library',
    'LibraryBooks',
    'LibraryMember',
    'LibraryMemberRole',
    'BorrowRequest',
    'BorrowRequestStatus',
]
