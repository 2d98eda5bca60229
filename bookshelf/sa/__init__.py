# bookshelf/sa/__init__.py
from .database import Database, connect
from .registry import SchemaRegistry, build_registry
from .models import (
    Base, Namespace, namespace, server,
    User, UserAuth, UserSession, PasswordResetToken, EmailVerificationToken, OAuthProfile,
    LoginAttempt, AccountLockout, SecurityAuditLog, Role, UserRole,
    Author, Publisher, Subject, Book, Library, LibraryBooks, LibraryMember, BorrowRequest,
)

__all__ = [
    'Database',
    'connect',
    'SchemaRegistry',
    'build_registry',
    'Base',
    'Namespace',
    'namespace',
    'server',
    'User',
    'UserAuth',
    'UserSession',
    'PasswordResetToken',
    'EmailVerificationToken',
    'OAuthProfile',
    'LoginAttempt',
    'AccountLockout',
    'SecurityAuditLog',
    'Role',
    'UserRole',
    'Author',
    'Publisher',
    'Subject',
    'Book',
    'Library',
    'LibraryBooks',
    'LibraryMember',
    'BorrowRequest',
]
