# core/services/__init__.py
from .accounts import AccountService
from .catalog import CatalogService
from .circulation import CirculationService, MAX_RENEWALS
from .reservations import ReservationService, RESERVATION_HOLD_DAYS

__all__ = [
    'AccountService',
    'CatalogService',
    'CirculationService',
    'ReservationService',
    'MAX_RENEWALS',
    'RESERVATION_HOLD_DAYS',
]
