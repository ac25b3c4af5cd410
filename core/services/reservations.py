# core/services/reservations.py
import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from core.errors import BookAvailable, DuplicateReservation, InvalidTransition, NotFound
from core.policy import Operation, Resource
from core.sa.models import Reservation, ReservationStatus
from core.sa.repositories import BookRepository, ReservationRepository
from core.services.base import BaseService

logger = logging.getLogger(__name__)

RESERVATION_HOLD_DAYS = 7


class ReservationService(BaseService):
    """Reservation lifecycle: active -> cancelled | fulfilled | expired.

    Nothing here reacts to copies coming back; fulfilling or expiring a
    reservation is a librarian action.
    """

    def __init__(self, session, clock=None):
        super().__init__(session, clock)
        self.books = BookRepository(session)
        self.reservations = ReservationRepository(session)

    def _load(self, reservation_id: str) -> Reservation:
        reservation = self.reservations.get_by_id(reservation_id)
        if reservation is None:
            raise NotFound(f"Reservation {reservation_id} not found")
        return reservation

    def create(self, actor_id: str, book_id: str) -> Reservation:
        """Reserve an out-of-stock book for the calling actor, held for RESERVATION_HOLD_DAYS.
        
        Raises:
            Unauthorized: If the caller is not authenticated
            NotFound: If the book does not exist
            BookAvailable: If a copy is still on the shelf
            DuplicateReservation: If the caller already holds an active reservation for it
        """
        with self.transaction():
            now = self.clock()
            reservation = Reservation(
                user_id=actor_id,
                book_id=book_id,
                status=ReservationStatus.ACTIVE.value,
                reservation_date=now,
                expiry_date=now + timedelta(days=RESERVATION_HOLD_DAYS),
            )
            self.authorize(actor_id, Operation.CREATE, Resource.RESERVATION, reservation)

            book = self.books.get_by_id(book_id)
            if book is None:
                raise NotFound(f"Book {book_id} not found")
            if book.available_copies > 0:
                raise BookAvailable(f"'{book.title}' has copies on the shelf, borrow it instead")
            if self.reservations.get_active(actor_id, book_id) is not None:
                raise DuplicateReservation(f"You already have an active reservation for '{book.title}'")
            try:
                self.reservations.add(reservation)
            except IntegrityError as e:
                raise DuplicateReservation(f"You already have an active reservation for '{book.title}'") from e

        logger.info("Reservation %s created by %s for book %s", reservation.id, actor_id, book_id)
        return reservation

    def _move(self, actor_id: str, reservation_id: str, operation: Operation, to_status: ReservationStatus) -> Reservation:
        with self.transaction():
            reservation = self._load(reservation_id)
            self.authorize(actor_id, operation, Resource.RESERVATION, reservation)
            if reservation.status != ReservationStatus.ACTIVE.value:
                raise InvalidTransition(f"Cannot mark a {reservation.status} reservation {to_status.value}")

            values = {"status": to_status.value}
            if to_status is ReservationStatus.FULFILLED:
                values["fulfilled_date"] = self.clock()
            if not self.reservations.transition(reservation.id, ReservationStatus.ACTIVE, values):
                raise InvalidTransition("Reservation is no longer active")

        logger.info("Reservation %s -> %s (by %s)", reservation_id, to_status.value, actor_id)
        return reservation

    def cancel(self, actor_id: str, reservation_id: str) -> Reservation:
        """Cancel an active reservation; the owner or staff may do this."""
        return self._move(actor_id, reservation_id, Operation.UPDATE, ReservationStatus.CANCELLED)

    def fulfill(self, actor_id: str, reservation_id: str) -> Reservation:
        """Librarian marks the reservation as satisfied."""
        return self._move(actor_id, reservation_id, Operation.FULFILL, ReservationStatus.FULFILLED)

    def expire(self, actor_id: str, reservation_id: str) -> Reservation:
        """Librarian marks the hold as lapsed."""
        return self._move(actor_id, reservation_id, Operation.FULFILL, ReservationStatus.EXPIRED)

    def list_for_user(self, actor_id: str, status: Optional[str] = None) -> List[Reservation]:
        self.authorize(actor_id, Operation.READ, Resource.RESERVATION, {"user_id": actor_id})
        return self.reservations.list_reservations(user_id=actor_id, status=status)

    def list_all(self, actor_id: str, status: Optional[str] = None) -> List[Reservation]:
        self.authorize(actor_id, Operation.READ, Resource.RESERVATION)
        return self.reservations.list_reservations(status=status)
