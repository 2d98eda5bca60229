import logging
from datetime import datetime, timedelta
from typing import Dict, FrozenSet, List, Optional
import uuid

from sqlalchemy import update

from bookshelf.sa.errors import InvalidTransitionError
from bookshelf.sa.models import BorrowRequest, BorrowRequestStatus, utcnow
from .base import Repository, as_uuid

logger = logging.getLogger(__name__)

Status = BorrowRequestStatus

# Allowed status moves
TRANSITIONS: Dict[BorrowRequestStatus, FrozenSet[BorrowRequestStatus]] = {
    Status.PENDING: frozenset({Status.APPROVED, Status.REJECTED}),
    Status.APPROVED: frozenset({Status.BORROWED, Status.REJECTED}),
    Status.BORROWED: frozenset({Status.RETURNED, Status.OVERDUE}),
    Status.OVERDUE: frozenset({Status.RETURNED}),
    Status.REJECTED: frozenset(),
    Status.RETURNED: frozenset(),
}

DEFAULT_LOAN_PERIOD = timedelta(days=14)


class BorrowRequestRepository(Repository[BorrowRequest]):
    """Borrow request lifecycle.

    Each move checks TRANSITIONS and stamps the matching user reference and date.
    """

    model = BorrowRequest

    def _move(self, request_id: uuid.UUID, target: BorrowRequestStatus, **changes) -> BorrowRequest:
        request = self.get_or_raise(request_id)
        if target not in TRANSITIONS[request.status]:
            raise InvalidTransitionError(request.status.value, target.value)
        logger.info(f"Borrow request {request.id}: {request.status.value} -> {target.value}")
        return self.update(request.id, status=target, **changes)

    def request(self, user_id: uuid.UUID, library_book_id: uuid.UUID,
                notes: Optional[str] = None) -> BorrowRequest:
        return self.insert(user_id=user_id, library_book_id=library_book_id, notes=notes,
                           status=Status.PENDING, request_date=utcnow())

    def approve(self, request_id: uuid.UUID, approved_by: uuid.UUID,
                due_date: Optional[datetime] = None) -> BorrowRequest:
        now = utcnow()
        return self._move(request_id, Status.APPROVED, approved_by=approved_by, approved_date=now,
                          due_date=due_date or now + DEFAULT_LOAN_PERIOD)

    def reject(self, request_id: uuid.UUID, rejected_by: uuid.UUID,
               reason: Optional[str] = None) -> BorrowRequest:
        return self._move(request_id, Status.REJECTED, rejected_by=rejected_by,
                          rejected_date=utcnow(), rejection_reason=reason)

    def mark_borrowed(self, request_id: uuid.UUID) -> BorrowRequest:
        return self._move(request_id, Status.BORROWED)

    def mark_returned(self, request_id: uuid.UUID, returned_by: Optional[uuid.UUID] = None) -> BorrowRequest:
        return self._move(request_id, Status.RETURNED, returned_by=returned_by, return_date=utcnow())

    def mark_overdue(self, request_id: uuid.UUID) -> BorrowRequest:
        return self._move(request_id, Status.OVERDUE)

    def flag_overdue(self, as_of: Optional[datetime] = None) -> int:
        """Mark every borrowed request whose due date has passed as overdue.

        Returns:
            Number of requests marked overdue
        """
        as_of = as_of or utcnow()
        with self.writing():
            result = self.session.execute(
                update(BorrowRequest)
                .where(BorrowRequest.status == Status.BORROWED, BorrowRequest.due_date < as_of)
                .values(status=Status.OVERDUE, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
        if result.rowcount:
            logger.info(f"Marked {result.rowcount} borrow requests overdue")
        return result.rowcount

    def for_user(self, user_id: uuid.UUID, status: Optional[BorrowRequestStatus] = None) -> List[BorrowRequest]:
        filters = {"user_id": as_uuid(user_id)}
        if status is not None:
            filters["status"] = status
        return self.find_many(filters, order_by="-request_date", load=("library_book.book",))
