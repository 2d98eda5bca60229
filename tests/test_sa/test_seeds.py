# tests/test_sa/test_seeds.py
import sys
import types
from sqlalchemy import func
from bookshelf import seeds
from bookshelf.sa.models import (
    Book, BorrowRequest, BorrowRequestStatus, Library, LibraryBooks, LibraryMember, LibraryMemberRole,
    OAuthProfile, Role, Subject, User, UserAuth, UserRole,
)
from bookshelf.seeds import FAILED, OK, SKIPPED, run_seeds, seed_modules


def test_seed_modules_are_ordered():
    assert seed_modules() == [
        "bookshelf.seeds.catalog_data",
        "bookshelf.seeds.seed_00_basic",
        "bookshelf.seeds.seed_01_auth",
        "bookshelf.seeds.seed_02_library_system",
    ]


def test_run_seeds(database, db_session):
    results = run_seeds(database)
    assert results == {
        "bookshelf.seeds.catalog_data": SKIPPED,
        "bookshelf.seeds.seed_00_basic": OK,
        "bookshelf.seeds.seed_01_auth": OK,
        "bookshelf.seeds.seed_02_library_system": OK,
    }

    assert db_session.query(User).count() == 25
    assert db_session.query(Role).count() == 6
    assert db_session.query(Book).count() == 20
    assert db_session.query(Library).count() == 5
    assert db_session.query(UserAuth).count() == 25
    assert db_session.query(UserRole).count() == 25
    assert db_session.query(OAuthProfile).count() == 15
    assert db_session.query(Subject).filter(Subject.parent_id.isnot(None)).count() > 0
    assert db_session.query(LibraryBooks).count() == 40
    assert db_session.query(BorrowRequest).count() == 40


def test_seeded_data_is_consistent(database, db_session):
    run_seeds(database)

    # Every library lists its owner as an OWNER member
    for library in db_session.query(Library).all():
        owners = [m.user_id for m in library.members if m.role == LibraryMemberRole.OWNER]
        assert owners == [library.owner_id]

    # Status-specific references are present
    for request in db_session.query(BorrowRequest).all():
        if request.status == BorrowRequestStatus.REJECTED:
            assert request.rejected_by is not None
        if request.status in (BorrowRequestStatus.APPROVED, BorrowRequestStatus.BORROWED):
            assert request.approved_by is not None and request.due_date is not None
        if request.status == BorrowRequestStatus.RETURNED:
            assert request.returned_by is not None and request.return_date is not None


def test_seeds_are_repeatable(database, db_session):
    """A second run resets the tables and produces the same rows"""
    run_seeds(database)
    first = sorted(u.username for u in db_session.query(User).all())
    run_seeds(database)
    db_session.expire_all()
    assert sorted(u.username for u in db_session.query(User).all()) == first
    assert db_session.query(func.count(LibraryMember.id)).scalar() > 0


def test_failing_seed_does_not_stop_the_run(database, monkeypatch):
    calls = []

    def explode(session):
        raise RuntimeError("boom")

    bad = types.ModuleType("fake_seeds.a_bad")
    bad.run_seed = explode
    good = types.ModuleType("fake_seeds.b_good")
    good.run_seed = lambda session: calls.append("good")

    monkeypatch.setitem(sys.modules, bad.__name__, bad)
    monkeypatch.setitem(sys.modules, good.__name__, good)
    monkeypatch.setattr(seeds, "seed_modules", lambda package=None: [bad.__name__, good.__name__])

    results = run_seeds(database)
    assert results == {"fake_seeds.a_bad": FAILED, "fake_seeds.b_good": OK}
    assert calls == ["good"]
