# api/schemas/__init__.py
from .book import BookSchema, BookCreate, BookUpdate, BookList
from .borrowing import BorrowingSchema, BorrowingDetailSchema, BorrowRequest, RejectRequest
from .reservation import ReservationSchema, ReservationCreate
from .user import ProfileSchema, ProfileWithRoles, ProfileUpdate, UserRegister, RoleGrant, ErrorResponse

__all__ = [
    'BookSchema', 'BookCreate', 'BookUpdate', 'BookList',
    'BorrowingSchema', 'BorrowingDetailSchema', 'BorrowRequest', 'RejectRequest',
    'ReservationSchema', 'ReservationCreate',
    'ProfileSchema', 'ProfileWithRoles', 'ProfileUpdate', 'UserRegister', 'RoleGrant', 'ErrorResponse',
]
