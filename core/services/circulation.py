# core/services/circulation.py
"""Borrowing state machine.

    pending --approve--> active --return--> returned
    pending --reject---> rejected
    (self-service)       active --return--> returned

``overdue`` is not stored; it is ``status == active and due_date < now``.
Status changes are compare-and-set updates and the copy count moves through the
atomic counter in the same transaction, so a failed step leaves nothing behind.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from core.errors import AlreadyBorrowed, InvalidTransition, NoCopiesAvailable, NotFound, RenewalLimitReached
from core.policy import Operation, Resource
from core.sa.models import BorrowingRecord, BorrowingStatus
from core.sa.repositories import BookRepository, BorrowingRepository
from core.services.base import BaseService

logger = logging.getLogger(__name__)

MAX_RENEWALS = 2


class CirculationService(BaseService):
    def __init__(self, session, clock=None):
        super().__init__(session, clock)
        self.books = BookRepository(session)
        self.records = BorrowingRepository(session)

    def _load(self, record_id: str) -> BorrowingRecord:
        record = self.records.get_by_id(record_id)
        if record is None:
            raise NotFound(f"Borrowing record {record_id} not found")
        return record

    def request_borrow(self, actor_id: str, book_id: str, notes: Optional[str] = None) -> BorrowingRecord:
        """Open a borrowing request for the calling actor.
        
        The record is always written as a pending request for the caller. Books that
        do not need approval are checked out in the same transaction: a copy is
        claimed and the record goes straight to active.
        
        Args:
            actor_id: The requesting user
            book_id: The book to borrow
            notes: Optional free-text note from the borrower
            
        Returns:
            The new BorrowingRecord (pending or active)
            
        Raises:
            Unauthorized: If the caller is not authenticated
            NotFound: If the book does not exist
            AlreadyBorrowed: If the caller already has a pending or active record for it
            NoCopiesAvailable: If a self-service checkout finds no copy on the shelf
        """
        with self.transaction():
            now = self.clock()
            record = BorrowingRecord(
                user_id=actor_id,
                book_id=book_id,
                status=BorrowingStatus.PENDING.value,
                request_date=now,
                renewal_count=0,
                notes=notes,
            )
            self.authorize(actor_id, Operation.CREATE, Resource.BORROWING_RECORD, record)

            book = self.books.get_by_id(book_id)
            if book is None:
                raise NotFound(f"Book {book_id} not found")
            if self.records.get_open_record(actor_id, book_id) is not None:
                raise AlreadyBorrowed(f"You already have an open borrowing for '{book.title}'")

            if not book.requires_approval:
                if not self.books.claim_copy(book.id):
                    logger.warning("No copies of %s left for self-service borrow by %s", book.id, actor_id)
                    raise NoCopiesAvailable(f"No copies of '{book.title}' are available")
                record.status = BorrowingStatus.ACTIVE.value
                record.borrow_date = now
                record.due_date = now + timedelta(days=book.max_borrow_days)

            try:
                self.records.add(record)
            except IntegrityError as e:
                raise AlreadyBorrowed(f"You already have an open borrowing for '{book.title}'") from e

        logger.info("Borrow request %s by %s for book %s -> %s", record.id, actor_id, book_id, record.status)
        return record

    def approve(self, actor_id: str, record_id: str) -> BorrowingRecord:
        """Approve a pending request and check the copy out.
        
        Raises:
            NotFound: If the record does not exist
            Unauthorized: If the caller is not a librarian or admin
            InvalidTransition: If the record is not pending
            NoCopiesAvailable: If no copy could be claimed; the record stays pending
        """
        with self.transaction():
            record = self._load(record_id)
            self.authorize(actor_id, Operation.APPROVE, Resource.BORROWING_RECORD, record)
            if record.status != BorrowingStatus.PENDING.value:
                raise InvalidTransition(f"Cannot approve a {record.status} record")

            book = self.books.get_by_id(record.book_id)
            now = self.clock()
            moved = self.records.transition(record.id, BorrowingStatus.PENDING, {
                "status": BorrowingStatus.ACTIVE.value,
                "approved_by": actor_id,
                "approval_date": now,
                "borrow_date": now,
                "due_date": now + timedelta(days=book.max_borrow_days),
            })
            if not moved:
                raise InvalidTransition("Record is no longer pending")
            if not self.books.claim_copy(book.id):
                logger.warning("Approval of %s failed: no copies of %s left", record.id, book.id)
                raise NoCopiesAvailable(f"No copies of '{book.title}' are available")

        logger.info("Record %s approved by %s", record_id, actor_id)
        return record

    def reject(self, actor_id: str, record_id: str, notes: Optional[str] = None) -> BorrowingRecord:
        """Reject a pending request. The copy count is not touched."""
        with self.transaction():
            record = self._load(record_id)
            self.authorize(actor_id, Operation.APPROVE, Resource.BORROWING_RECORD, record)
            if record.status != BorrowingStatus.PENDING.value:
                raise InvalidTransition(f"Cannot reject a {record.status} record")

            values = {
                "status": BorrowingStatus.REJECTED.value,
                "approved_by": actor_id,
                "approval_date": self.clock(),
            }
            if notes is not None:
                values["notes"] = notes
            if not self.records.transition(record.id, BorrowingStatus.PENDING, values):
                raise InvalidTransition("Record is no longer pending")

        logger.info("Record %s rejected by %s", record_id, actor_id)
        return record

    def return_book(self, actor_id: str, record_id: str) -> BorrowingRecord:
        """Mark an active loan returned and put the copy back on the shelf.
        
        Raises:
            NotFound: If the record does not exist
            Unauthorized: If the caller neither owns the record nor is staff
            InvalidTransition: If the record is not active
        """
        with self.transaction():
            record = self._load(record_id)
            self.authorize(actor_id, Operation.UPDATE, Resource.BORROWING_RECORD, record)
            if record.status != BorrowingStatus.ACTIVE.value:
                raise InvalidTransition(f"Cannot return a {record.status} record")

            moved = self.records.transition(record.id, BorrowingStatus.ACTIVE, {
                "status": BorrowingStatus.RETURNED.value,
                "return_date": self.clock(),
            })
            if not moved:
                raise InvalidTransition("Record is no longer active")
            self.books.increment_available_copies(record.book_id)

        logger.info("Record %s returned (by %s)", record_id, actor_id)
        return record

    def renew(self, actor_id: str, record_id: str) -> BorrowingRecord:
        """Extend an active loan by the book's loan period, counted from the current due date.
        
        Raises:
            NotFound: If the record does not exist
            Unauthorized: If the caller does not own the record
            InvalidTransition: If the record is not active
            RenewalLimitReached: If the loan has already been renewed MAX_RENEWALS times
        """
        with self.transaction():
            record = self._load(record_id)
            self.authorize(actor_id, Operation.RENEW, Resource.BORROWING_RECORD, record)
            if record.status != BorrowingStatus.ACTIVE.value:
                raise InvalidTransition(f"Cannot renew a {record.status} record")
            if record.renewal_count >= MAX_RENEWALS:
                raise RenewalLimitReached(f"Maximum of {MAX_RENEWALS} renewals reached")

            book = self.books.get_by_id(record.book_id)
            count = record.renewal_count
            moved = self.records.transition(
                record.id,
                BorrowingStatus.ACTIVE,
                {
                    "due_date": record.due_date + timedelta(days=book.max_borrow_days),
                    "renewal_count": count + 1,
                },
                BorrowingRecord.renewal_count == count,
            )
            if not moved:
                raise InvalidTransition("Record changed while renewing, try again")

        logger.info("Record %s renewed (%d/%d)", record_id, count + 1, MAX_RENEWALS)
        return record

    def get_details(self, actor_id: str, record_id: str) -> BorrowingRecord:
        """Get a record joined with its book and borrower profile."""
        record = self.records.get_with_details(record_id)
        if record is None:
            raise NotFound(f"Borrowing record {record_id} not found")
        self.authorize(actor_id, Operation.READ, Resource.BORROWING_RECORD, record)
        return record

    def list_for_user(self, actor_id: str, status: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[BorrowingRecord]:
        """The caller's own records, optionally filtered by status."""
        self.authorize(actor_id, Operation.READ, Resource.BORROWING_RECORD, {"user_id": actor_id})
        return self.records.list_records(user_id=actor_id, status=status, limit=limit, offset=offset)

    def list_all(self, actor_id: str, status: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[BorrowingRecord]:
        """Every borrower's records; librarians and admins only."""
        self.authorize(actor_id, Operation.READ, Resource.BORROWING_RECORD)
        return self.records.list_records(status=status, limit=limit, offset=offset)

    def list_overdue(self, actor_id: str, now: Optional[datetime] = None) -> List[BorrowingRecord]:
        """Active loans past their due date; librarians and admins only."""
        self.authorize(actor_id, Operation.READ, Resource.BORROWING_RECORD)
        return self.records.list_overdue(now or self.clock())
