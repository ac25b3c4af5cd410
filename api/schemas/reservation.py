# api/schemas/reservation.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class ReservationCreate(BaseModel):
    book_id: str


class ReservationSchema(BaseModel):
    id: str
    user_id: str
    book_id: str
    status: str
    reservation_date: datetime
    expiry_date: datetime
    fulfilled_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
