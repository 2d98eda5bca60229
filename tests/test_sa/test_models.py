# tests/test_sa/test_models.py
import uuid
import pytest
from datetime import datetime, UTC, timedelta
from bookshelf.sa.models import (
    Book, BookLanguage, BorrowRequest, BorrowRequestStatus, Library, LibraryMember, LibraryMemberRole,
    Role, Subject, User, UserAuth, UserRole, UserRoleType, UserSession,
)


def test_user_defaults(db_session, sample_user):
    """Ids, timestamps and the role default are filled in on insert"""
    user = db_session.query(User).filter_by(username="test.user").first()
    assert isinstance(user.id, uuid.UUID)
    assert user.role == UserRoleType.USER
    assert user.created_at is not None
    assert user.created_at.tzinfo is not None
    assert user.updated_at is not None


def test_book_relationships(db_session, sample_book):
    """Book author, publisher and subject are many-to-one"""
    book = db_session.query(Book).filter_by(isbn="1234567890").first()
    assert book is not None
    assert book.language == BookLanguage.ENGLISH
    assert book.author.name == "Test Author"
    assert book.publisher.name == "Test Publisher"
    assert book.subject.name == "Science Fiction"

    # Reverse collections
    assert book in book.author.books
    assert book in book.publisher.books


def test_book_language_default(db_session):
    book = Book(title="Untitled")
    db_session.add(book)
    db_session.commit()
    assert book.language == BookLanguage.OTHER


def test_subject_tree(db_session, sample_subject):
    """Subjects reference their parent in the same table"""
    parent = db_session.query(Subject).filter_by(name="Fiction").first()
    assert sample_subject.parent is parent
    assert [child.name for child in parent.children] == ["Science Fiction"]
    assert parent.parent is None


def test_library_catalog(db_session, sample_holding, sample_library, sample_book):
    """Holdings link libraries to books; catalog is a read-only view through them"""
    library = db_session.get(Library, sample_library.id)
    assert len(library.books) == 1
    assert library.books[0].quantity == 2
    assert library.catalog == [sample_book]
    assert sample_book.libraries == [library]
    assert library.owner.username == "test.user"


def test_user_auth_is_one_to_one(db_session, sample_user):
    db_session.add(UserAuth(user=sample_user, hashed_password="hash"))
    db_session.commit()
    db_session.refresh(sample_user)
    assert sample_user.user_auth.hashed_password == "hash"


def test_user_role_relationships(db_session, sample_user, other_user, admin_role):
    """A user can hold a role and hand one out; each side has its own collection"""
    db_session.add(UserRole(user=sample_user, role=admin_role, assigned_by_user=other_user))
    db_session.commit()

    assert [ur.role.name for ur in sample_user.user_roles] == ["admin"]
    assert [ur.user.username for ur in other_user.assigned_user_roles] == ["test.user"]
    assert other_user.user_roles == []
    assert admin_role.users == [sample_user]


def test_borrow_request_user_references(db_session, sample_user, other_user, sample_holding):
    """Every user reference on a borrow request resolves to its own relationship"""
    now = datetime.now(UTC)
    request = BorrowRequest(
        borrower=sample_user,
        library_book=sample_holding,
        status=BorrowRequestStatus.RETURNED,
        approver=other_user,
        approved_date=now - timedelta(days=10),
        returner=other_user,
        return_date=now,
    )
    db_session.add(request)
    db_session.commit()

    assert request.borrower is sample_user
    assert request.approver is other_user
    assert request.returner is other_user
    assert request.rejecter is None
    assert sample_user.borrow_requests == [request]
    assert other_user.approved_borrow_requests == [request]
    assert other_user.returned_borrow_requests == [request]
    assert other_user.borrow_requests == []
    assert request.library_book.book.title == "Test Book"


def test_library_member_inviter(db_session, sample_library, sample_user, other_user):
    member = LibraryMember(
        user=other_user, library=sample_library, role=LibraryMemberRole.STAFF,
        inviter=sample_user, permissions=["read", "borrow"],
    )
    db_session.add(member)
    db_session.commit()
    db_session.expire_all()

    member = db_session.get(LibraryMember, member.id)
    assert member.permissions == ["read", "borrow"]
    assert member.is_active is True
    assert member.inviter.username == "test.user"
    assert sample_user.sent_library_invitations == [member]
    assert other_user.library_memberships == [member]


def test_timestamps_round_trip_as_utc(db_session, sample_user):
    expires = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)
    session = UserSession(user=sample_user, session_token="tok", expires_at=expires)
    db_session.add(session)
    db_session.commit()
    db_session.expire_all()

    stored = db_session.query(UserSession).one()
    assert stored.expires_at == expires
    assert stored.expires_at.tzinfo is not None


def test_role_permissions_list(db_session, admin_role):
    db_session.expire_all()
    role = db_session.query(Role).filter_by(name="admin").one()
    assert role.permissions == ["system:manage"]
