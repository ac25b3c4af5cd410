# core/sa/repositories/__init__.py
from .book import BookRepository
from .borrowing import BorrowingRepository
from .reservation import ReservationRepository
from .user import UserRepository

__all__ = ['BookRepository', 'BorrowingRepository', 'ReservationRepository', 'UserRepository']
