# api/deps.py
from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from api.schemas.user import ErrorResponse
from core.sa.database import get_db
from core.services import AccountService, CatalogService, CirculationService, ReservationService


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Identity asserted by the identity-provider gateway in front of the API."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return x_user_id


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_circulation_service(db: Session = Depends(get_db)) -> CirculationService:
    return CirculationService(db)


def get_reservation_service(db: Session = Depends(get_db)) -> ReservationService:
    return ReservationService(db)


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)


# Documented error bodies shared by every router
ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse, "description": "Invalid input"},
    status.HTTP_401_UNAUTHORIZED: {"description": "Missing X-User-Id header"},
    status.HTTP_403_FORBIDDEN: {"model": ErrorResponse, "description": "Denied by the access policy"},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "Row not found"},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse, "description": "State conflict"},
}
