# api/routes/__init__.py
from .books import router as books_router
from .borrowings import router as borrowings_router
from .reservations import router as reservations_router
from .users import router as users_router

__all__ = ['books_router', 'borrowings_router', 'reservations_router', 'users_router']
