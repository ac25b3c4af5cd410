# core/sa/__init__.py
from .database import Database
from .models import (
    Base, Profile, UserRole, Book,
    BorrowingRecord, Reservation
)

__all__ = [
    'Database',
    'Base',
    'Profile',
    'UserRole',
    'Book',
    'BorrowingRecord',
    'Reservation'
]
