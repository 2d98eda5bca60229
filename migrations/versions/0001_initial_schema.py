"""Initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import bookshelf.sa.models.base
from bookshelf.sa.models.base import StringList, generate_uuid


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA = 'server'
ENUM_TYPES = ('role', 'language', 'library_member_role', 'borrow_request_status')


def _id():
    return sa.Column('id', sa.Uuid(), server_default=generate_uuid(), nullable=False)


def _now(name: str):
    return sa.Column(name, bookshelf.sa.models.base.UTCDateTime(), server_default=sa.func.now(), nullable=False)


def _fk(table: str, column: str, referred: str, ondelete: str):
    return sa.ForeignKeyConstraint(
        [column], [f'{SCHEMA}.{referred}.id'],
        name=f'{table}_{column}_{referred}_id_fk', ondelete=ondelete, onupdate='CASCADE',
    )


def upgrade() -> None:
    bind = op.get_bind()
    is_postgres = bind.dialect.name == 'postgresql'
    if is_postgres:
        op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')
        op.execute('CREATE EXTENSION IF NOT EXISTS pg_trgm')
        op.execute(f'CREATE SCHEMA IF NOT EXISTS "{SCHEMA}"')

    # Catalogue and identity roots
    op.create_table('user',
        _id(),
        sa.Column('username', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('first_name', sa.Text(), nullable=False),
        sa.Column('last_name', sa.Text(), nullable=False),
        sa.Column('role', sa.Enum('user', 'admin', name='role', schema=SCHEMA),
                  server_default='user', nullable=False),
        _now('created_at'),
        _now('updated_at'),
        sa.PrimaryKeyConstraint('id', name='user_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_email', 'user', ['email'], unique=True, schema=SCHEMA)
    op.create_index('unique_username', 'user', ['username'], unique=True, schema=SCHEMA)

    op.create_table('author',
        _id(),
        sa.Column('name', sa.Text(), nullable=False),
        _now('created_at'),
        sa.PrimaryKeyConstraint('id', name='author_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_author_name', 'author', ['name'], unique=True, schema=SCHEMA)

    op.create_table('publisher',
        _id(),
        sa.Column('name', sa.Text(), nullable=False),
        _now('created_at'),
        sa.PrimaryKeyConstraint('id', name='publisher_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_publisher_name', 'publisher', ['name'], unique=True, schema=SCHEMA)

    op.create_table('subject',
        _id(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('parent_id', sa.Uuid(), nullable=True),
        _now('created_at'),
        _fk('subject', 'parent_id', 'subject', 'SET NULL'),
        sa.PrimaryKeyConstraint('id', name='subject_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_subject_name', 'subject', ['name'], unique=True, schema=SCHEMA)
    op.create_index('idx_subject_parent_id', 'subject', ['parent_id'], unique=False, schema=SCHEMA)

    op.create_table('role',
        _id(),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('permissions', StringList, nullable=True),
        _now('created_at'),
        _now('updated_at'),
        sa.PrimaryKeyConstraint('id', name='role_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_role_name', 'role', ['name'], unique=True, schema=SCHEMA)

    op.create_table('login_attempt',
        _id(),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('ip_address', sa.Text(), nullable=False),
        sa.Column('is_successful', sa.Boolean(), nullable=False),
        _now('attempted_at'),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='login_attempt_pkey'),
        schema=SCHEMA
    )
    op.create_index('idx_login_attempts_email', 'login_attempt', ['email'], unique=False, schema=SCHEMA)
    op.create_index('idx_login_attempts_ip', 'login_attempt', ['ip_address'], unique=False, schema=SCHEMA)
    op.create_index('idx_login_attempts_attempted_at', 'login_attempt', ['attempted_at'], unique=False, schema=SCHEMA)

    # Authentication
    op.create_table('user_auth',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('hashed_password', sa.Text(), nullable=False),
        _fk('user_auth', 'user_id', 'user', 'CASCADE'),
        sa.PrimaryKeyConstraint('id', name='user_auth_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_user_auth_user_id', 'user_auth', ['user_id'], unique=True, schema=SCHEMA)

    op.create_table('user_session',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('session_token', sa.Text(), nullable=False),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('expires_at', bookshelf.sa.models.base.UTCDateTime(), nullable=False),
        _now('last_accessed_at'),
        _now('created_at'),
        _fk('user_session', 'user_id', 'user', 'CASCADE'),
        sa.PrimaryKeyConstraint('id', name='user_session_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_session_token', 'user_session', ['session_token'], unique=True, schema=SCHEMA)
    op.create_index('unique_refresh_token', 'user_session', ['refresh_token'], unique=True, schema=SCHEMA)
    op.create_index('idx_user_sessions_user_id', 'user_session', ['user_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_user_sessions_expires_at', 'user_session', ['expires_at'], unique=False, schema=SCHEMA)

    op.create_table('password_reset_token',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('token', sa.Text(), nullable=False),
        sa.Column('expires_at', bookshelf.sa.models.base.UTCDateTime(), nullable=False),
        sa.Column('is_used', sa.Boolean(), server_default=sa.false(), nullable=False),
        _now('created_at'),
        _fk('password_reset_token', 'user_id', 'user', 'CASCADE'),
        sa.PrimaryKeyConstraint('id', name='password_reset_token_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_password_reset_token', 'password_reset_token', ['token'], unique=True, schema=SCHEMA)
    op.create_index('idx_password_reset_user_id', 'password_reset_token', ['user_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_password_reset_expires_at', 'password_reset_token', ['expires_at'], unique=False, schema=SCHEMA)

    op.create_table('email_verification_token',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('token', sa.Text(), nullable=False),
        sa.Column('expires_at', bookshelf.sa.models.base.UTCDateTime(), nullable=False),
        sa.Column('is_used', sa.Boolean(), server_default=sa.false(), nullable=False),
        _now('created_at'),
        _now('updated_at'),
        _fk('email_verification_token', 'user_id', 'user', 'CASCADE'),
        sa.PrimaryKeyConstraint('id', name='email_verification_token_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_email_verification_token', 'email_verification_token', ['token'], unique=True, schema=SCHEMA)
    op.create_index('idx_email_verification_user_id', 'email_verification_token', ['user_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_email_verification_expires_at', 'email_verification_token', ['expires_at'], unique=False, schema=SCHEMA)

    op.create_table('oauth_profile',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('provider', sa.Text(), nullable=False),
        sa.Column('provider_id', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('profile_data', sa.Text(), nullable=True),
        sa.Column('access_token', sa.Text(), nullable=True),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('token_expires_at', bookshelf.sa.models.base.UTCDateTime(), nullable=True),
        _now('created_at'),
        _now('updated_at'),
        _fk('oauth_profile', 'user_id', 'user', 'CASCADE'),
        sa.PrimaryKeyConstraint('id', name='oauth_profile_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_oauth_provider_user', 'oauth_profile', ['provider', 'provider_id'], unique=True, schema=SCHEMA)
    op.create_index('unique_oauth_user_provider', 'oauth_profile', ['user_id', 'provider'], unique=True, schema=SCHEMA)
    op.create_index('idx_oauth_profile_user_id', 'oauth_profile', ['user_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_oauth_profile_provider', 'oauth_profile', ['provider'], unique=False, schema=SCHEMA)
    op.create_index('idx_oauth_profile_email', 'oauth_profile', ['email'], unique=False, schema=SCHEMA)

    # Security
    op.create_table('account_lockout',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        _now('locked_at'),
        sa.Column('locked_until', bookshelf.sa.models.base.UTCDateTime(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('failed_attempts', sa.Integer(), server_default='0', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        _fk('account_lockout', 'user_id', 'user', 'CASCADE'),
        sa.PrimaryKeyConstraint('id', name='account_lockout_pkey'),
        schema=SCHEMA
    )
    op.create_index('idx_account_lockout_user_id', 'account_lockout', ['user_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_account_lockout_locked_until', 'account_lockout', ['locked_until'], unique=False, schema=SCHEMA)

    op.create_table('security_audit_log',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        _now('timestamp'),
        sa.Column('severity', sa.Text(), server_default='info', nullable=False),
        _fk('security_audit_log', 'user_id', 'user', 'SET NULL'),
        sa.PrimaryKeyConstraint('id', name='security_audit_log_pkey'),
        schema=SCHEMA
    )
    op.create_index('idx_audit_log_user_id', 'security_audit_log', ['user_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_audit_log_action', 'security_audit_log', ['action'], unique=False, schema=SCHEMA)
    op.create_index('idx_audit_log_timestamp', 'security_audit_log', ['timestamp'], unique=False, schema=SCHEMA)
    op.create_index('idx_audit_log_severity', 'security_audit_log', ['severity'], unique=False, schema=SCHEMA)

    op.create_table('user_role',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('role_id', sa.Uuid(), nullable=False),
        _now('assigned_at'),
        sa.Column('assigned_by', sa.Uuid(), nullable=True),
        _fk('user_role', 'user_id', 'user', 'CASCADE'),
        _fk('user_role', 'role_id', 'role', 'RESTRICT'),
        _fk('user_role', 'assigned_by', 'user', 'SET NULL'),
        sa.PrimaryKeyConstraint('id', name='user_role_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_user_role', 'user_role', ['user_id', 'role_id'], unique=True, schema=SCHEMA)
    op.create_index('idx_user_roles_user_id', 'user_role', ['user_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_user_roles_role_id', 'user_role', ['role_id'], unique=False, schema=SCHEMA)

    # Catalogue
    op.create_table('book',
        _id(),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('title_long', sa.Text(), nullable=True),
        sa.Column('isbn', sa.Text(), nullable=True),
        sa.Column('isbn13', sa.Text(), nullable=True),
        sa.Column('dewey_decimal', sa.Text(), nullable=True),
        sa.Column('binding', sa.Text(), nullable=True),
        sa.Column('language', sa.Enum('en', 'ar', 'other', name='language', schema=SCHEMA),
                  server_default='other', nullable=False),
        sa.Column('date_published', bookshelf.sa.models.base.UTCDateTime(), nullable=True),
        sa.Column('edition', sa.Text(), nullable=True),
        sa.Column('pages', sa.Integer(), nullable=True),
        sa.Column('overview', sa.Text(), nullable=True),
        sa.Column('image', sa.Text(), nullable=True),
        sa.Column('excerpt', sa.Text(), nullable=True),
        sa.Column('synopsis', sa.Text(), nullable=True),
        sa.Column('author_id', sa.Uuid(), nullable=True),
        sa.Column('publisher_id', sa.Uuid(), nullable=True),
        sa.Column('subject_id', sa.Uuid(), nullable=True),
        _now('created_at'),
        _fk('book', 'author_id', 'author', 'SET NULL'),
        _fk('book', 'publisher_id', 'publisher', 'SET NULL'),
        _fk('book', 'subject_id', 'subject', 'SET NULL'),
        sa.PrimaryKeyConstraint('id', name='book_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_isbn', 'book', ['isbn'], unique=True, schema=SCHEMA)
    op.create_index('idx_book_author_id', 'book', ['author_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_book_publisher_id', 'book', ['publisher_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_book_subject_id', 'book', ['subject_id'], unique=False, schema=SCHEMA)
    if is_postgres:
        op.create_index('books_title_trgm_idx', 'book', ['title'], schema=SCHEMA,
                        postgresql_using='gin', postgresql_ops={'title': 'gin_trgm_ops'})
        op.create_index('books_title_tsv_idx', 'book',
                        [sa.text("(to_tsvector('english', title) || to_tsvector('arabic', title))")],
                        schema=SCHEMA, postgresql_using='gin')
        op.create_index('books_search_idx', 'book',
                        [sa.text(
                            "(setweight(to_tsvector('english', title), 'A') || "
                            "setweight(to_tsvector('arabic', title), 'A') || "
                            "setweight(to_tsvector('english', overview), 'B') || "
                            "setweight(to_tsvector('arabic', overview), 'B'))"
                        )],
                        schema=SCHEMA, postgresql_using='gin')

    # Libraries and lending
    op.create_table('library',
        _id(),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('location', sa.Text(), nullable=True),
        _now('created_at'),
        _now('updated_at'),
        _fk('library', 'owner_id', 'user', 'RESTRICT'),
        sa.PrimaryKeyConstraint('id', name='library_pkey'),
        schema=SCHEMA
    )
    op.create_index('idx_library_owner_id', 'library', ['owner_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_library_name', 'library', ['name'], unique=False, schema=SCHEMA)

    op.create_table('library_books',
        _id(),
        sa.Column('library_id', sa.Uuid(), nullable=False),
        sa.Column('book_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), server_default='1', nullable=False),
        sa.Column('shelf_location', sa.Text(), nullable=True),
        sa.Column('condition', sa.Text(), nullable=True),
        _now('added_at'),
        _now('updated_at'),
        _fk('library_books', 'library_id', 'library', 'CASCADE'),
        _fk('library_books', 'book_id', 'book', 'CASCADE'),
        sa.PrimaryKeyConstraint('id', name='library_books_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_library_book', 'library_books', ['library_id', 'book_id'], unique=True, schema=SCHEMA)
    op.create_index('idx_library_books_book_id', 'library_books', ['book_id'], unique=False, schema=SCHEMA)

    op.create_table('library_member',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('library_id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.Enum('owner', 'manager', 'staff', 'member', name='library_member_role', schema=SCHEMA),
                  server_default='member', nullable=False),
        sa.Column('permissions', StringList, nullable=True),
        _now('join_date'),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('invited_by', sa.Uuid(), nullable=True),
        _now('created_at'),
        _now('updated_at'),
        _fk('library_member', 'user_id', 'user', 'RESTRICT'),
        _fk('library_member', 'library_id', 'library', 'RESTRICT'),
        _fk('library_member', 'invited_by', 'user', 'SET NULL'),
        sa.PrimaryKeyConstraint('id', name='library_member_pkey'),
        schema=SCHEMA
    )
    op.create_index('unique_library_member', 'library_member', ['user_id', 'library_id'], unique=True, schema=SCHEMA)
    op.create_index('idx_library_member_library_id', 'library_member', ['library_id'], unique=False, schema=SCHEMA)

    op.create_table('borrow_request',
        _id(),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('library_book_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.Enum('pending', 'approved', 'rejected', 'borrowed', 'returned', 'overdue',
                                    name='borrow_request_status', schema=SCHEMA),
                  server_default='pending', nullable=False),
        _now('request_date'),
        sa.Column('approved_date', bookshelf.sa.models.base.UTCDateTime(), nullable=True),
        sa.Column('approved_by', sa.Uuid(), nullable=True),
        sa.Column('rejected_date', bookshelf.sa.models.base.UTCDateTime(), nullable=True),
        sa.Column('rejected_by', sa.Uuid(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('due_date', bookshelf.sa.models.base.UTCDateTime(), nullable=True),
        sa.Column('return_date', bookshelf.sa.models.base.UTCDateTime(), nullable=True),
        sa.Column('returned_by', sa.Uuid(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _now('created_at'),
        _now('updated_at'),
        _fk('borrow_request', 'user_id', 'user', 'RESTRICT'),
        _fk('borrow_request', 'library_book_id', 'library_books', 'CASCADE'),
        _fk('borrow_request', 'approved_by', 'user', 'SET NULL'),
        _fk('borrow_request', 'rejected_by', 'user', 'SET NULL'),
        _fk('borrow_request', 'returned_by', 'user', 'SET NULL'),
        sa.PrimaryKeyConstraint('id', name='borrow_request_pkey'),
        schema=SCHEMA
    )
    op.create_index('idx_borrow_request_user_id', 'borrow_request', ['user_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_borrow_request_library_book_id', 'borrow_request', ['library_book_id'], unique=False, schema=SCHEMA)
    op.create_index('idx_borrow_request_status', 'borrow_request', ['status'], unique=False, schema=SCHEMA)


def downgrade() -> None:
    # Drop tables in reverse dependency order
    for table in (
        'borrow_request', 'library_member', 'library_books', 'library', 'book',
        'user_role', 'security_audit_log', 'account_lockout', 'oauth_profile',
        'email_verification_token', 'password_reset_token', 'user_session', 'user_auth',
        'login_attempt', 'role', 'subject', 'publisher', 'author', 'user',
    ):
        op.drop_table(table, schema=SCHEMA)

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name in ENUM_TYPES:
            sa.Enum(name=name, schema=SCHEMA).drop(bind, checkfirst=True)
