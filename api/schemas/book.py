# api/schemas/book.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.sa.models import AccessType, BookType
from core.sa.repositories.book import REQUIRED_BOOK_FIELDS


class BookBase(BaseModel):
    title: str
    author: str
    publisher: str
    isbn: Optional[str] = None
    publication_year: Optional[int] = None
    edition: Optional[str] = None
    pages: Optional[int] = None
    language: Optional[str] = "English"
    type: BookType = BookType.BOOK
    access_type: AccessType = AccessType.PHYSICAL_ONLY
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    pdf_url: Optional[str] = None
    tags: List[str] = []
    topics: List[str] = []
    requires_approval: bool = False
    max_borrow_days: int = Field(default=14, gt=0)


class BookCreate(BookBase):
    total_copies: int = Field(default=1, ge=0)
    available_copies: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_copies(self):
        if self.available_copies is not None and self.available_copies > self.total_copies:
            raise ValueError("available_copies cannot exceed total_copies")
        return self


class BookUpdate(BaseModel):
    """Catalog edit. Only the fields that are sent are changed."""
    title: Optional[str] = None
    author: Optional[str] = None
    publisher: Optional[str] = None
    isbn: Optional[str] = None
    publication_year: Optional[int] = None
    edition: Optional[str] = None
    pages: Optional[int] = None
    language: Optional[str] = None
    type: Optional[BookType] = None
    access_type: Optional[AccessType] = None
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    pdf_url: Optional[str] = None
    tags: Optional[List[str]] = None
    topics: Optional[List[str]] = None
    requires_approval: Optional[bool] = None
    max_borrow_days: Optional[int] = Field(default=None, gt=0)
    total_copies: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_required_not_null(self):
        cleared = sorted(
            name for name in self.model_fields_set
            if getattr(self, name) is None and name in REQUIRED_BOOK_FIELDS
        )
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self


class BookSchema(BookBase):
    id: str
    type: str
    access_type: str
    total_copies: int
    available_copies: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookList(BaseModel):
    items: List[BookSchema]
    total: int
    page: int
    size: int
