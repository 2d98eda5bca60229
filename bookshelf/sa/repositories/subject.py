from typing import List, Optional
import uuid

from bookshelf.sa.errors import SubjectCycleError
from bookshelf.sa.models import Subject
from .base import Repository, as_uuid


class SubjectRepository(Repository[Subject]):
    """Subject tree. Writes through set_parent never create a cycle."""

    model = Subject

    def ancestors(self, subject_id: uuid.UUID) -> List[Subject]:
        """Ancestors from the immediate parent up to the root"""
        subject = self.get_or_raise(subject_id)
        chain: List[Subject] = []
        seen = {subject.id}
        parent = subject.parent
        while parent is not None and parent.id not in seen:
            chain.append(parent)
            seen.add(parent.id)
            parent = parent.parent
        return chain

    def children(self, subject_id: uuid.UUID) -> List[Subject]:
        return (
            self.session.query(Subject)
            .filter(Subject.parent_id == as_uuid(subject_id))
            .order_by(Subject.name)
            .all()
        )

    def set_parent(self, subject_id: uuid.UUID, parent_id: Optional[uuid.UUID]) -> Subject:
        """Move a subject under another one (or to the top level when parent_id is None).

        Raises:
            NotFoundError: If either subject does not exist
            SubjectCycleError: If the new parent is the subject itself or one of its descendants
        """
        subject = self.get_or_raise(subject_id)
        if parent_id is not None:
            parent = self.get_or_raise(parent_id)
            if parent.id == subject.id or subject.id in {s.id for s in self.ancestors(parent.id)}:
                raise SubjectCycleError(
                    f"Subject '{parent.name}' cannot be the parent of '{subject.name}'"
                )
            parent_id = parent.id
        with self.writing():
            subject.parent_id = parent_id
        return subject
