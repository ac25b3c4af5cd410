# api/routes/books.py

from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from api.deps import ERROR_RESPONSES, get_catalog_service, get_current_user_id
from api.schemas.book import BookSchema, BookCreate, BookUpdate, BookList
from core.services import CatalogService

router = APIRouter(prefix="/books", tags=["books"], responses=ERROR_RESPONSES)

@router.get("", response_model=BookList)
def list_books(
    query: Optional[str] = Query(None, description="Match against title or author"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Get a paginated list of catalog entries. Open to everyone.
    """
    books, total = service.list_books(query, limit=size, offset=(page - 1) * size)
    return BookList(
        items=[BookSchema.model_validate(b) for b in books],
        total=total,
        page=page,
        size=size,
    )

@router.get("/{book_id}", response_model=BookSchema)
def get_book(book_id: str, service: CatalogService = Depends(get_catalog_service)):
    return service.get_book(book_id)

@router.post("", response_model=BookSchema, status_code=status.HTTP_201_CREATED)
def create_book(
    payload: BookCreate,
    user_id: str = Depends(get_current_user_id),
    service: CatalogService = Depends(get_catalog_service)
):
    fields = payload.model_dump(mode="json", exclude_none=True)
    return service.create_book(user_id, fields)

@router.patch("/{book_id}", response_model=BookSchema)
def update_book(
    book_id: str,
    payload: BookUpdate,
    user_id: str = Depends(get_current_user_id),
    service: CatalogService = Depends(get_catalog_service)
):
    changes = payload.model_dump(mode="json", exclude_unset=True)
    return service.update_book(user_id, book_id, changes)

@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(
    book_id: str,
    user_id: str = Depends(get_current_user_id),
    service: CatalogService = Depends(get_catalog_service)
):
    service.delete_book(user_id, book_id)
