# core/sa/models/__init__.py
from .base import Base, TimestampMixin, UTCDateTime, utcnow
from .user import Profile, UserRole, AppRole, DEFAULT_ROLE, STAFF_ROLES
from .book import Book, BookType, AccessType
from .borrowing import BorrowingRecord, BorrowingStatus, OPEN_BORROWING_STATUSES
from .reservation import Reservation, ReservationStatus

__all__ = [
    'Base',
    'TimestampMixin',
    'UTCDateTime',
    'utcnow',
    'Profile',
    'UserRole',
    'AppRole',
    'DEFAULT_ROLE',
    'STAFF_ROLES',
    'Book',
    'BookType',
    'AccessType',
    'BorrowingRecord',
    'BorrowingStatus',
    'OPEN_BORROWING_STATUSES',
    'Reservation',
    'ReservationStatus',
]
