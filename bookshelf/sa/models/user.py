# bookshelf/sa/models/user.py
from enum import Enum
from sqlalchemy import Index, Text
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, enum_type, idpk, server
import uuid


class UserRoleType(str, Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base, TimestampMixin):
    __tablename__ = server.declare('user')

    id: Mapped[uuid.UUID] = idpk()
    username: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[UserRoleType] = mapped_column(
        enum_type(UserRoleType, 'role'), nullable=False, default=UserRoleType.USER, server_default=UserRoleType.USER.value
    )

    # Auth records
    user_auth = relationship('UserAuth', back_populates='user', uselist=False, passive_deletes='all')
    sessions = relationship('UserSession', back_populates='user', passive_deletes='all')
    password_reset_tokens = relationship('PasswordResetToken', back_populates='user', passive_deletes='all')
    email_verification_tokens = relationship('EmailVerificationToken', back_populates='user', passive_deletes='all')
    oauth_profiles = relationship('OAuthProfile', back_populates='user', passive_deletes='all')

    # Security telemetry
    audit_logs = relationship('SecurityAuditLog', back_populates='user', passive_deletes='all')
    account_lockouts = relationship('AccountLockout', back_populates='user', passive_deletes='all')

    # Roles: held vs. handed out
    user_roles = relationship(
        'UserRole', foreign_keys='UserRole.user_id', back_populates='user', passive_deletes='all'
    )
    assigned_user_roles = relationship(
        'UserRole', foreign_keys='UserRole.assigned_by', back_populates='assigned_by_user', passive_deletes='all'
    )

    # Libraries
    owned_libraries = relationship('Library', back_populates='owner', passive_deletes='all')
    library_memberships = relationship(
        'LibraryMember', foreign_keys='LibraryMember.user_id', back_populates='user', passive_deletes='all'
    )
    sent_library_invitations = relationship(
        'LibraryMember', foreign_keys='LibraryMember.invited_by', back_populates='inviter', passive_deletes='all'
    )

    # Borrowing, one collection per role the user plays on a request
    borrow_requests = relationship(
        'BorrowRequest', foreign_keys='BorrowRequest.user_id', back_populates='borrower', passive_deletes='all'
    )
    approved_borrow_requests = relationship(
        'BorrowRequest', foreign_keys='BorrowRequest.approved_by', back_populates='approver', passive_deletes='all'
    )
    rejected_borrow_requests = relationship(
        'BorrowRequest', foreign_keys='BorrowRequest.rejected_by', back_populates='rejecter', passive_deletes='all'
    )
    returned_borrow_requests = relationship(
        'BorrowRequest', foreign_keys='BorrowRequest.returned_by', back_populates='returner', passive_deletes='all'
    )

    __table_args__ = server.table_args(
        Index('unique_email', 'email', unique=True),
        Index('unique_username', 'username', unique=True),
    )

    def __repr__(self) -> str:
        return f"<User {self.username}>"
