# core/sa/models/reservation.py
from datetime import datetime
from enum import Enum
from sqlalchemy import String, ForeignKey, Index, text
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, UTCDateTime, new_id, utcnow


class ReservationStatus(str, Enum):
    ACTIVE = "active"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class Reservation(Base, TimestampMixin):
    """A standing claim on a book that currently has no copy on the shelf."""
    __tablename__ = 'reservations'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    book_id: Mapped[str] = mapped_column(ForeignKey('books.id', ondelete='CASCADE'), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ReservationStatus.ACTIVE.value)
    reservation_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    expiry_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    fulfilled_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    # Relationships
    book = relationship('Book', back_populates='reservations')
    profile = relationship('Profile', back_populates='reservations')

    __table_args__ = (
        Index('idx_reservations_user_id', 'user_id'),
        Index('idx_reservations_book_id', 'book_id'),
        Index('idx_reservations_status', 'status'),
        Index(
            'uix_reservations_active',
            'user_id', 'book_id',
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )
