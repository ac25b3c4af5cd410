# core/sa/repositories/borrowing.py
from datetime import datetime
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session, joinedload
from core.sa.models import BorrowingRecord, BorrowingStatus, OPEN_BORROWING_STATUSES


class BorrowingRepository:
    """Repository for borrowing records.

    Status changes go through ``transition``, a compare-and-set on the current
    status, so two callers can never both move a record out of the same state.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, record_id: str) -> Optional[BorrowingRecord]:
        return self.session.query(BorrowingRecord).filter(BorrowingRecord.id == record_id).first()

    def get_with_details(self, record_id: str) -> Optional[BorrowingRecord]:
        """Get a record with its book and borrower profile loaded."""
        return (
            self.session.query(BorrowingRecord)
            .options(
                joinedload(BorrowingRecord.book),
                joinedload(BorrowingRecord.profile),
            )
            .filter(BorrowingRecord.id == record_id)
            .first()
        )

    def get_open_record(self, user_id: str, book_id: str) -> Optional[BorrowingRecord]:
        """Return the user's pending or active record for a book, if any."""
        return (
            self.session.query(BorrowingRecord)
            .filter(
                BorrowingRecord.user_id == user_id,
                BorrowingRecord.book_id == book_id,
                BorrowingRecord.status.in_(OPEN_BORROWING_STATUSES),
            )
            .first()
        )

    def add(self, record: BorrowingRecord) -> BorrowingRecord:
        self.session.add(record)
        self.session.flush()
        return record

    def transition(
        self,
        record_id: str,
        from_status: BorrowingStatus,
        values: Dict[str, Any],
        *criteria
    ) -> bool:
        """Apply ``values`` only if the record is still in ``from_status``.
        
        Args:
            record_id: The record to update
            from_status: Status the record must currently have
            values: Column values to write, usually including the new status
            criteria: Extra filter expressions the row must also match
            
        Returns:
            True if the row was updated, False if its status had already moved on
        """
        updated = (
            self.session.query(BorrowingRecord)
            .filter(
                BorrowingRecord.id == record_id,
                BorrowingRecord.status == from_status.value,
                *criteria,
            )
            .update(values, synchronize_session="fetch")
        )
        return updated == 1

    def list_records(
        self,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[BorrowingRecord]:
        """List records with book and profile loaded, most recent request first.
        
        Args:
            user_id: Restrict to one borrower
            status: Restrict to one stored status
            limit: Maximum number of results to return
            offset: Number of records to skip
            
        Returns:
            List of BorrowingRecord objects
        """
        query = self.session.query(BorrowingRecord).options(
            joinedload(BorrowingRecord.book),
            joinedload(BorrowingRecord.profile),
        )
        if user_id is not None:
            query = query.filter(BorrowingRecord.user_id == user_id)
        if status:
            query = query.filter(BorrowingRecord.status == status)
        return (
            query.order_by(BorrowingRecord.request_date.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def list_overdue(self, now: datetime, user_id: Optional[str] = None) -> List[BorrowingRecord]:
        """Active records whose due date has passed, oldest due date first."""
        query = (
            self.session.query(BorrowingRecord)
            .options(
                joinedload(BorrowingRecord.book),
                joinedload(BorrowingRecord.profile),
            )
            .filter(
                BorrowingRecord.status == BorrowingStatus.ACTIVE.value,
                BorrowingRecord.due_date < now,
            )
        )
        if user_id is not None:
            query = query.filter(BorrowingRecord.user_id == user_id)
        return query.order_by(BorrowingRecord.due_date).all()
