# core/sa/models/borrowing.py
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Integer, ForeignKey, Index, text
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, UTCDateTime, new_id, utcnow


class BorrowingStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    RETURNED = "returned"


OPEN_BORROWING_STATUSES = (BorrowingStatus.PENDING.value, BorrowingStatus.ACTIVE.value)


class BorrowingRecord(Base, TimestampMixin):
    """One request-to-return lifecycle for a single (user, book) pair."""
    __tablename__ = 'borrowing_records'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    book_id: Mapped[str] = mapped_column(ForeignKey('books.id', ondelete='CASCADE'), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=BorrowingStatus.PENDING.value)
    request_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    approval_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    approved_by: Mapped[str | None] = mapped_column(ForeignKey('profiles.id'), nullable=True)
    borrow_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    return_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    renewal_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relationships
    book = relationship('Book', back_populates='borrowing_records')
    profile = relationship('Profile', back_populates='borrowing_records', foreign_keys=[user_id])
    approver = relationship('Profile', foreign_keys=[approved_by])

    __table_args__ = (
        Index('idx_borrowing_records_user_id', 'user_id'),
        Index('idx_borrowing_records_book_id', 'book_id'),
        Index('idx_borrowing_records_status', 'status'),
        # One open loan or request per user and book
        Index(
            'uix_borrowing_records_open',
            'user_id', 'book_id',
            unique=True,
            sqlite_where=text("status IN ('pending', 'active')"),
            postgresql_where=text("status IN ('pending', 'active')"),
        ),
    )

    def is_overdue(self, now: datetime | None = None) -> bool:
        if self.status != BorrowingStatus.ACTIVE.value or self.due_date is None:
            return False
        return self.due_date < (now or utcnow())
