"""Library holdings, memberships and borrow requests.

Users, libraries and books must already exist (seed_00_basic).
"""
from datetime import timedelta

from sqlalchemy.orm import Session

from bookshelf.sa.models import (
    Book, BorrowRequest, BorrowRequestStatus, Library, LibraryBooks, LibraryMember,
    LibraryMemberRole, User, utcnow,
)
from bookshelf.seeds import reset_tables, rng
from bookshelf.seeds import catalog_data as data

BOOKS_PER_LIBRARY = 8
MEMBERS_PER_LIBRARY = 6
BORROW_REQUESTS = 40

Status = BorrowRequestStatus


def _borrow_request(random, borrower, holding, staff, now) -> BorrowRequest:
    """A request whose dates and staff references agree with its status"""
    status = random.choice(list(Status))
    requested = now - timedelta(days=random.randint(1, 60))
    request = BorrowRequest(
        borrower=borrower, library_book=holding, status=status, request_date=requested,
        notes=random.choice([None, "Please hold at the front desk", "Second copy is fine"]),
    )
    if status in (Status.APPROVED, Status.BORROWED, Status.RETURNED, Status.OVERDUE):
        request.approver = staff
        request.approved_date = requested + timedelta(days=1)
        request.due_date = requested + timedelta(days=15)
    if status == Status.OVERDUE:
        request.due_date = now - timedelta(days=random.randint(1, 10))
    if status == Status.RETURNED:
        request.returner = staff
        request.return_date = requested + timedelta(days=random.randint(2, 14))
    if status == Status.REJECTED:
        request.rejecter = staff
        request.rejected_date = requested + timedelta(days=1)
        request.rejection_reason = "No copies available"
    return request


def run_seed(session: Session) -> None:
    random = rng(__name__)
    reset_tables(session, [LibraryBooks.__table__, LibraryMember.__table__, BorrowRequest.__table__])

    users = session.query(User).order_by(User.username).all()
    libraries = session.query(Library).order_by(Library.name).all()
    books = session.query(Book).order_by(Book.title).all()
    if not (users and libraries and books):
        raise RuntimeError("seed_02_library_system needs users, libraries and books from seed_00_basic")

    now = utcnow()
    holdings = []
    for library in libraries:
        for book in random.sample(books, min(BOOKS_PER_LIBRARY, len(books))):
            holding = LibraryBooks(
                library=library,
                book=book,
                quantity=random.randint(1, 10),
                shelf_location=random.choice(data.SHELF_LOCATIONS),
                condition=random.choice(data.CONDITIONS),
            )
            holdings.append(holding)
        session.add_all(holdings[-BOOKS_PER_LIBRARY:])

        session.add(LibraryMember(
            user=library.owner, library=library, role=LibraryMemberRole.OWNER, join_date=library.created_at,
        ))
        others = [u for u in users if u.id != library.owner_id]
        for user in random.sample(others, min(MEMBERS_PER_LIBRARY, len(others))):
            session.add(LibraryMember(
                user=user,
                library=library,
                role=random.choice([LibraryMemberRole.MANAGER, LibraryMemberRole.STAFF, LibraryMemberRole.MEMBER]),
                permissions=["read", "borrow"],
                join_date=now - timedelta(days=random.randint(0, 365)),
                is_active=random.random() > 0.1,
                inviter=library.owner,
            ))

    for _ in range(BORROW_REQUESTS):
        holding = random.choice(holdings)
        session.add(_borrow_request(random, random.choice(users), holding, holding.library.owner, now))
