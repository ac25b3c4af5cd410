# core/services/catalog.py
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from core.errors import BookInUse, NotFound
from core.policy import Operation, Resource
from core.sa.models import Book
from core.sa.repositories import BookRepository
from core.services.base import BaseService

logger = logging.getLogger(__name__)


class CatalogService(BaseService):
    def __init__(self, session, clock=None):
        super().__init__(session, clock)
        self.books = BookRepository(session)

    def get_book(self, book_id: str) -> Book:
        book = self.books.get_by_id(book_id)
        if book is None:
            raise NotFound(f"Book {book_id} not found")
        return book

    def list_books(self, query: Optional[str] = None, limit: int = 20, offset: int = 0) -> tuple[List[Book], int]:
        """Return one page of matching books and the total match count."""
        return self.books.search_books(query, limit=limit, offset=offset), self.books.count_books(query)

    def create_book(self, actor_id: str, fields: Dict[str, Any]) -> Book:
        """Add a book to the catalog; librarians and admins only.
        
        Raises:
            Unauthorized: If the caller may not edit the catalog
            ValueError: If the fields are invalid or the ISBN is already catalogued
        """
        with self.transaction():
            self.authorize(actor_id, Operation.CREATE, Resource.BOOK)
            if fields.get("isbn") and self.books.get_by_isbn(fields["isbn"]):
                raise ValueError(f"A book with ISBN {fields['isbn']} already exists")
            try:
                book = self.books.create_book(**fields)
            except IntegrityError as e:
                raise ValueError(f"Could not create book: {e.orig}") from e

        logger.info("Book %s (%s) created by %s", book.id, book.title, actor_id)
        return book

    def update_book(self, actor_id: str, book_id: str, changes: Dict[str, Any]) -> Book:
        """Edit catalog fields; librarians and admins only."""
        with self.transaction():
            self.authorize(actor_id, Operation.UPDATE, Resource.BOOK)
            book = self.get_book(book_id)
            try:
                self.books.update_book(book, changes)
            except IntegrityError as e:
                raise ValueError(f"Could not update book: {e.orig}") from e

        logger.info("Book %s updated by %s: %s", book_id, actor_id, sorted(changes))
        return book

    def delete_book(self, actor_id: str, book_id: str) -> None:
        """Remove a book; admins only.
        
        Raises:
            BookInUse: While pending/active loans or active reservations reference it
        """
        with self.transaction():
            self.authorize(actor_id, Operation.DELETE, Resource.BOOK)
            book = self.get_book(book_id)
            if self.books.has_open_references(book.id):
                raise BookInUse(f"'{book.title}' has open loans or reservations")
            self.books.delete_book(book)

        logger.info("Book %s deleted by %s", book_id, actor_id)
