# api/routes/reservations.py

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from api.deps import ERROR_RESPONSES, get_current_user_id, get_reservation_service
from api.schemas.reservation import ReservationSchema, ReservationCreate
from core.sa.models import ReservationStatus
from core.services import ReservationService

router = APIRouter(prefix="/reservations", tags=["reservations"], responses=ERROR_RESPONSES)

@router.post("", response_model=ReservationSchema, status_code=status.HTTP_201_CREATED)
def create_reservation(
    payload: ReservationCreate,
    user_id: str = Depends(get_current_user_id),
    service: ReservationService = Depends(get_reservation_service)
):
    return service.create(user_id, payload.book_id)

@router.get("", response_model=List[ReservationSchema])
def my_reservations(
    status: Optional[ReservationStatus] = Query(None, description="Only reservations in this status"),
    user_id: str = Depends(get_current_user_id),
    service: ReservationService = Depends(get_reservation_service)
):
    return service.list_for_user(user_id, status=status.value if status else None)

@router.get("/all", response_model=List[ReservationSchema])
def all_reservations(
    status: Optional[ReservationStatus] = Query(None, description="Only reservations in this status"),
    user_id: str = Depends(get_current_user_id),
    service: ReservationService = Depends(get_reservation_service)
):
    return service.list_all(user_id, status=status.value if status else None)

@router.post("/{reservation_id}/cancel", response_model=ReservationSchema)
def cancel_reservation(
    reservation_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ReservationService = Depends(get_reservation_service)
):
    return service.cancel(user_id, reservation_id)

@router.post("/{reservation_id}/fulfill", response_model=ReservationSchema)
def fulfill_reservation(
    reservation_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ReservationService = Depends(get_reservation_service)
):
    return service.fulfill(user_id, reservation_id)

@router.post("/{reservation_id}/expire", response_model=ReservationSchema)
def expire_reservation(
    reservation_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ReservationService = Depends(get_reservation_service)
):
    return service.expire(user_id, reservation_id)
