# core/sa/repositories/reservation.py
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session, joinedload
from core.sa.models import Reservation, ReservationStatus


class ReservationRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, reservation_id: str) -> Optional[Reservation]:
        return self.session.query(Reservation).filter(Reservation.id == reservation_id).first()

    def get_active(self, user_id: str, book_id: str) -> Optional[Reservation]:
        """Get the user's active reservation for a book, if one exists."""
        return (
            self.session.query(Reservation)
            .filter(
                Reservation.user_id == user_id,
                Reservation.book_id == book_id,
                Reservation.status == ReservationStatus.ACTIVE.value,
            )
            .first()
        )

    def add(self, reservation: Reservation) -> Reservation:
        self.session.add(reservation)
        self.session.flush()
        return reservation

    def transition(self, reservation_id: str, from_status: ReservationStatus, values: Dict[str, Any]) -> bool:
        """Compare-and-set update on the reservation status; False if it had already changed."""
        updated = (
            self.session.query(Reservation)
            .filter(
                Reservation.id == reservation_id,
                Reservation.status == from_status.value,
            )
            .update(values, synchronize_session="fetch")
        )
        return updated == 1

    def list_reservations(
        self,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Reservation]:
        query = self.session.query(Reservation).options(joinedload(Reservation.book))
        if user_id is not None:
            query = query.filter(Reservation.user_id == user_id)
        if status:
            query = query.filter(Reservation.status == status)
        return (
            query.order_by(Reservation.reservation_date.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
