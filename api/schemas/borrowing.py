# api/schemas/borrowing.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, computed_field

from core.sa.models import BorrowingStatus, utcnow
from .book import BookSchema
from .user import ProfileSchema


class BorrowRequest(BaseModel):
    book_id: str
    notes: Optional[str] = None


class RejectRequest(BaseModel):
    notes: Optional[str] = None


class BorrowingSchema(BaseModel):
    id: str
    user_id: str
    book_id: str
    status: str
    request_date: datetime
    approval_date: Optional[datetime] = None
    approved_by: Optional[str] = None
    borrow_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    return_date: Optional[datetime] = None
    renewal_count: int
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def is_overdue(self) -> bool:
        return (
            self.status == BorrowingStatus.ACTIVE.value
            and self.due_date is not None
            and self.due_date < utcnow()
        )


class BorrowingDetailSchema(BorrowingSchema):
    """A record joined with its book and the borrower's profile."""
    book: Optional[BookSchema] = None
    profile: Optional[ProfileSchema] = None
