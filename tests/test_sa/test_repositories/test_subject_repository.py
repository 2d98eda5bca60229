# tests/test_sa/test_repositories/test_subject_repository.py
import uuid
import pytest
from bookshelf.sa.errors import NotFoundError, SubjectCycleError
from bookshelf.sa.repositories import SubjectRepository


@pytest.fixture
def subject_repo(db_session):
    """Fixture to create a SubjectRepository instance"""
    return SubjectRepository(db_session)


@pytest.fixture
def subject_chain(subject_repo):
    """Literature > Fiction > Science Fiction"""
    root = subject_repo.insert(name="Literature")
    middle = subject_repo.insert(name="Fiction", parent_id=root.id)
    leaf = subject_repo.insert(name="Science Fiction", parent_id=middle.id)
    return root, middle, leaf


def test_ancestors(subject_repo, subject_chain):
    root, middle, leaf = subject_chain
    assert [s.name for s in subject_repo.ancestors(leaf.id)] == ["Fiction", "Literature"]
    assert subject_repo.ancestors(root.id) == []


def test_children(subject_repo, subject_chain):
    root, middle, leaf = subject_chain
    subject_repo.insert(name="Crime", parent_id=middle.id)
    assert [s.name for s in subject_repo.children(middle.id)] == ["Crime", "Science Fiction"]
    assert subject_repo.children(leaf.id) == []


def test_set_parent(subject_repo, subject_chain):
    root, middle, leaf = subject_chain
    moved = subject_repo.set_parent(leaf.id, root.id)
    assert moved.parent_id == root.id
    assert subject_repo.set_parent(leaf.id, None).parent_id is None


def test_set_parent_rejects_self(subject_repo, subject_chain):
    root, _, _ = subject_chain
    with pytest.raises(SubjectCycleError):
        subject_repo.set_parent(root.id, root.id)


def test_set_parent_rejects_descendant(subject_repo, subject_chain):
    """Moving a subject under its own descendant would close a loop"""
    root, middle, leaf = subject_chain
    with pytest.raises(SubjectCycleError):
        subject_repo.set_parent(root.id, leaf.id)
    assert subject_repo.get_by_id(root.id).parent_id is None


def test_set_parent_missing_subject(subject_repo, subject_chain):
    root, _, _ = subject_chain
    with pytest.raises(NotFoundError):
        subject_repo.set_parent(root.id, uuid.uuid4())
