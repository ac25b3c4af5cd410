# core/sa/models/book.py
from enum import Enum
from sqlalchemy import String, Integer, Boolean, CheckConstraint, Index, JSON
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, new_id


class BookType(str, Enum):
    BOOK = "book"
    MAGAZINE = "magazine"
    JOURNAL = "journal"
    RESEARCH_PAPER = "research_paper"
    THESIS = "thesis"


class AccessType(str, Enum):
    PHYSICAL_ONLY = "physical_only"
    ONLINE_ONLY = "online_only"
    BOTH = "both"


class Book(Base, TimestampMixin):
    __tablename__ = 'books'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(500), nullable=False)
    publisher: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[str | None] = mapped_column(String(32), unique=True, nullable=True)
    publication_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    edition: Mapped[str | None] = mapped_column(String(64), nullable=True)
    pages: Mapped[int | None] = mapped_column(Integer, nullable=True)
    language: Mapped[str | None] = mapped_column(String(64), default="English")
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=BookType.BOOK.value)
    access_type: Mapped[str] = mapped_column(String(20), nullable=False, default=AccessType.PHYSICAL_ONLY.value)
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(String, nullable=True)
    pdf_url: Mapped[str | None] = mapped_column(String, nullable=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    topics: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    total_copies: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    available_copies: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    requires_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_borrow_days: Mapped[int] = mapped_column(Integer, nullable=False, default=14)

    # Relationships
    borrowing_records = relationship('BorrowingRecord', back_populates='book', cascade='all', passive_deletes=True)
    reservations = relationship('Reservation', back_populates='book', cascade='all', passive_deletes=True)

    __table_args__ = (
        CheckConstraint('available_copies >= 0', name='ck_books_available_non_negative'),
        CheckConstraint('available_copies <= total_copies', name='ck_books_available_le_total'),
        CheckConstraint('max_borrow_days > 0', name='ck_books_max_borrow_days_positive'),
        Index('idx_books_title', 'title'),
        Index('idx_books_author', 'author'),
        Index('idx_books_publisher', 'publisher'),
    )
