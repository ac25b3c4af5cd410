# core/sa/repositories/book.py
from typing import Optional, List, Dict, Any
from sqlalchemy import case, or_
from sqlalchemy.orm import Session
from ..models import Book, BorrowingRecord, Reservation, OPEN_BORROWING_STATUSES, ReservationStatus

# Fields a catalog edit may touch. Copy counts go through the counter methods below.
CATALOG_FIELDS = frozenset({
    "title", "author", "publisher", "isbn", "publication_year", "edition", "pages",
    "language", "type", "access_type", "description", "cover_image_url", "pdf_url",
    "tags", "topics", "requires_approval", "max_borrow_days",
})

# Columns a catalog edit may change but never clear
REQUIRED_BOOK_FIELDS = frozenset({
    "title", "author", "publisher", "type", "access_type", "tags", "topics",
    "requires_approval", "max_borrow_days", "total_copies",
})


class BookRepository:
    """Persistence for catalog entries and the availability counter.

    Methods flush but never commit; the calling service owns the transaction.
    """

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, book_id: str) -> Optional[Book]:
        """Get a book by its ID"""
        return self.session.query(Book).filter(Book.id == book_id).first()

    def get_by_isbn(self, isbn: str) -> Optional[Book]:
        return self.session.query(Book).filter(Book.isbn == isbn).first()

    def search_books(
        self,
        query: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List[Book]:
        """Search books by title or author.
        
        Args:
            query: Case-insensitive substring matched against title and author
            limit: Maximum number of results to return
            offset: Number of records to skip
            
        Returns:
            List of Book objects ordered by title
        """
        base_query = self._filtered(query)
        return base_query.order_by(Book.title).offset(offset).limit(limit).all()

    def count_books(self, query: Optional[str] = None) -> int:
        """Count total books matching the search criteria."""
        return self._filtered(query).count()

    def _filtered(self, query: Optional[str]):
        base_query = self.session.query(Book)
        if query and query.strip():
            pattern = f"%{query.strip()}%"
            base_query = base_query.filter(or_(Book.title.ilike(pattern), Book.author.ilike(pattern)))
        return base_query

    def create_book(self, **fields: Any) -> Book:
        """Add a new book to the catalog.
        
        Args:
            fields: Column values; available_copies defaults to total_copies
            
        Returns:
            The new, flushed Book
            
        Raises:
            ValueError: If the copy counts or loan period are out of range
        """
        total = fields.setdefault("total_copies", 1)
        available = fields.setdefault("available_copies", total)
        if total < 0:
            raise ValueError("total_copies must not be negative")
        if not 0 <= available <= total:
            raise ValueError("available_copies must be between 0 and total_copies")
        if fields.get("max_borrow_days", 14) <= 0:
            raise ValueError("max_borrow_days must be positive")

        book = Book(**fields)
        self.session.add(book)
        self.session.flush()
        return book

    def update_book(self, book: Book, changes: Dict[str, Any]) -> Book:
        """Apply a catalog edit.
        
        A change to total_copies moves available_copies by the same amount, so the
        number of copies out on loan is preserved.
        
        Args:
            book: The book to edit
            changes: Field values to set; unknown and counter fields are rejected
            
        Returns:
            The updated Book
            
        Raises:
            ValueError: For unknown fields, nulls in required columns, or values that would
                break the copy invariant
        """
        changes = dict(changes)
        cleared = sorted(k for k in REQUIRED_BOOK_FIELDS if k in changes and changes[k] is None)
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        new_total = changes.pop("total_copies", None)
        unknown = set(changes) - CATALOG_FIELDS
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        if "max_borrow_days" in changes and changes["max_borrow_days"] <= 0:
            raise ValueError("max_borrow_days must be positive")

        for key, value in changes.items():
            setattr(book, key, value)

        if new_total is not None and new_total != book.total_copies:
            delta = new_total - book.total_copies
            updated = (
                self.session.query(Book)
                .filter(
                    Book.id == book.id,
                    Book.available_copies + delta >= 0,
                )
                .update(
                    {
                        Book.total_copies: Book.total_copies + delta,
                        Book.available_copies: Book.available_copies + delta,
                    },
                    synchronize_session="fetch",
                )
            )
            if not updated:
                raise ValueError("total_copies cannot drop below the number of copies on loan")

        self.session.flush()
        return book

    def has_open_references(self, book_id: str) -> bool:
        """Whether pending/active loans or active reservations still point at the book."""
        open_loan = (
            self.session.query(BorrowingRecord.id)
            .filter(
                BorrowingRecord.book_id == book_id,
                BorrowingRecord.status.in_(OPEN_BORROWING_STATUSES),
            )
            .first()
        )
        if open_loan is not None:
            return True
        open_hold = (
            self.session.query(Reservation.id)
            .filter(
                Reservation.book_id == book_id,
                Reservation.status == ReservationStatus.ACTIVE.value,
            )
            .first()
        )
        return open_hold is not None

    def delete_book(self, book: Book) -> None:
        self.session.delete(book)
        self.session.flush()

    # Availability counter. Each method is one UPDATE so concurrent callers
    # never lose each other's writes.

    def decrement_available_copies(self, book_id: str) -> int:
        """Take one copy off the shelf, saturating at zero.
        
        Returns:
            Number of rows touched (0 when the book does not exist)
        """
        return (
            self.session.query(Book)
            .filter(Book.id == book_id)
            .update(
                {Book.available_copies: case(
                    (Book.available_copies > 0, Book.available_copies - 1),
                    else_=0,
                )},
                synchronize_session="fetch",
            )
        )

    def increment_available_copies(self, book_id: str) -> int:
        """Put one copy back on the shelf, saturating at total_copies.
        
        Returns:
            Number of rows touched (0 when the book does not exist)
        """
        return (
            self.session.query(Book)
            .filter(Book.id == book_id)
            .update(
                {Book.available_copies: case(
                    (Book.available_copies < Book.total_copies, Book.available_copies + 1),
                    else_=Book.total_copies,
                )},
                synchronize_session="fetch",
            )
        )

    def claim_copy(self, book_id: str) -> bool:
        """Take one copy only if one is available.
        
        Returns:
            True if a copy was claimed, False if the shelf was empty
        """
        claimed = (
            self.session.query(Book)
            .filter(Book.id == book_id, Book.available_copies > 0)
            .update(
                {Book.available_copies: Book.available_copies - 1},
                synchronize_session="fetch",
            )
        )
        return claimed == 1
