# api/routes/borrowings.py

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from api.deps import ERROR_RESPONSES, get_circulation_service, get_current_user_id
from api.schemas.borrowing import BorrowingSchema, BorrowingDetailSchema, BorrowRequest, RejectRequest
from core.sa.models import BorrowingStatus
from core.services import CirculationService

router = APIRouter(prefix="/borrowings", tags=["borrowings"], responses=ERROR_RESPONSES)

@router.post("", response_model=BorrowingSchema, status_code=status.HTTP_201_CREATED)
def request_borrow(
    payload: BorrowRequest,
    user_id: str = Depends(get_current_user_id),
    service: CirculationService = Depends(get_circulation_service)
):
    """
    Borrow a book. Books that need approval create a pending request; all others
    are checked out immediately.
    """
    return service.request_borrow(user_id, payload.book_id, notes=payload.notes)

@router.get("", response_model=List[BorrowingDetailSchema])
def my_borrowings(
    status: Optional[BorrowingStatus] = Query(None, description="Only records in this status"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(50, ge=1, le=100, description="Items per page"),
    user_id: str = Depends(get_current_user_id),
    service: CirculationService = Depends(get_circulation_service)
):
    """The caller's own borrowing history."""
    return service.list_for_user(
        user_id, status=status.value if status else None, limit=size, offset=(page - 1) * size
    )

@router.get("/all", response_model=List[BorrowingDetailSchema])
def all_borrowings(
    status: Optional[BorrowingStatus] = Query(None, description="Only records in this status"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(50, ge=1, le=100, description="Items per page"),
    user_id: str = Depends(get_current_user_id),
    service: CirculationService = Depends(get_circulation_service)
):
    """Every borrower's records, for the librarian management screen."""
    return service.list_all(
        user_id, status=status.value if status else None, limit=size, offset=(page - 1) * size
    )

@router.get("/overdue", response_model=List[BorrowingDetailSchema])
def overdue_borrowings(
    user_id: str = Depends(get_current_user_id),
    service: CirculationService = Depends(get_circulation_service)
):
    return service.list_overdue(user_id)

@router.get("/{record_id}", response_model=BorrowingDetailSchema)
def get_borrowing(
    record_id: str,
    user_id: str = Depends(get_current_user_id),
    service: CirculationService = Depends(get_circulation_service)
):
    return service.get_details(user_id, record_id)

@router.post("/{record_id}/approve", response_model=BorrowingSchema)
def approve_borrowing(
    record_id: str,
    user_id: str = Depends(get_current_user_id),
    service: CirculationService = Depends(get_circulation_service)
):
    return service.approve(user_id, record_id)

@router.post("/{record_id}/reject", response_model=BorrowingSchema)
def reject_borrowing(
    record_id: str,
    payload: Optional[RejectRequest] = None,
    user_id: str = Depends(get_current_user_id),
    service: CirculationService = Depends(get_circulation_service)
):
    return service.reject(user_id, record_id, notes=payload.notes if payload else None)

@router.post("/{record_id}/return", response_model=BorrowingSchema)
def return_borrowing(
    record_id: str,
    user_id: str = Depends(get_current_user_id),
    service: CirculationService = Depends(get_circulation_service)
):
    return service.return_book(user_id, record_id)

@router.post("/{record_id}/renew", response_model=BorrowingSchema)
def renew_borrowing(
    record_id: str,
    user_id: str = Depends(get_current_user_id),
    service: CirculationService = Depends(get_circulation_service)
):
    return service.renew(user_id, record_id)
