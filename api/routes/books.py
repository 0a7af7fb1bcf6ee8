# api/routes/books.py

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.context import CurrentUser, RequestContext
from core.errors import unwrap
from core.sa.database import get_db
from core.services.book_service import BookService
from core.services.wishlist_service import WishlistService
from api.deps import get_context, require_admin, require_user
from api.schemas.book import AvailabilityUpdate, Book, BookCreate, BookDetail, BookList, WishlistToggle

router = APIRouter(tags=["books"])

@router.get("/books", response_model=BookList)
def get_books(
    search: Optional[str] = Query(None, description="Case-insensitive match on title or author"),
    condition: Optional[str] = Query(None, description="Filter by condition (NEW, LIKE_NEW, GOOD, FAIR, POOR)"),
    location: Optional[str] = Query(None, description="Case-insensitive match on location"),
    available_only: bool = Query(False, description="Only books that can be requested"),
    owner_id: Optional[str] = Query(None, description="Only books listed by this user"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Items per page"),
    db: Session = Depends(get_db)
):
    """
    Get a paginated list of listed books, newest first.

    Deleted books never appear here.
    """
    return unwrap(BookService(db).list_books(
        search=search,
        condition=condition,
        location=location,
        available_only=available_only,
        owner_id=owner_id,
        page=page,
        size=size
    ))

@router.post("/books", response_model=Book, status_code=201)
def add_book(
    payload: BookCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user)
):
    return unwrap(BookService(db).add_book(user, **payload.model_dump()))

@router.get("/books/mine", response_model=List[Book])
def get_my_books(
    include_deleted: bool = Query(False, description="Include soft-deleted listings"),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user)
):
    return unwrap(BookService(db).list_own_books(user, include_deleted=include_deleted))

@router.get("/book/{book_id}", response_model=BookDetail)
def get_book(
    book_id: str,
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_context)
):
    """
    Get a single book with its wishlist count.

    Raises:
        NotFound: If the book does not exist, or is deleted and the caller
            is neither its owner nor an admin
    """
    book = unwrap(BookService(db).get_book(book_id, context.user))
    wishlist = WishlistService(db)
    detail = BookDetail.model_validate(book)
    detail.wishlist_count = wishlist.count(book_id)
    if context.user:
        detail.is_wishlisted = wishlist.is_wishlisted(context.user.id, book_id)
    return detail

@router.post("/book/{book_id}/availability", response_model=Book)
def set_availability(
    book_id: str,
    payload: AvailabilityUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user)
):
    return unwrap(BookService(db).set_availability(book_id, user, payload.is_available))

@router.post("/book/{book_id}/delete", response_model=Book)
def soft_delete_book(book_id: str, db: Session = Depends(get_db), user: CurrentUser = Depends(require_user)):
    return unwrap(BookService(db).soft_delete(book_id, user))

@router.post("/book/{book_id}/restore", response_model=Book)
def restore_book(book_id: str, db: Session = Depends(get_db), user: CurrentUser = Depends(require_user)):
    return unwrap(BookService(db).restore(book_id, user))

@router.delete("/book/{book_id}")
def purge_book(book_id: str, db: Session = Depends(get_db), admin: CurrentUser = Depends(require_admin)):
    """Permanently remove a listing that was never part of an exchange"""
    return {"id": unwrap(BookService(db).purge_book(book_id, admin)), "deleted": True}

@router.post("/book/{book_id}/wishlist", response_model=WishlistToggle)
def toggle_wishlist(book_id: str, db: Session = Depends(get_db), user: CurrentUser = Depends(require_user)):
    return unwrap(WishlistService(db).toggle(user, book_id))

@router.get("/wishlist", response_model=List[Book])
def get_wishlist(db: Session = Depends(get_db), user: CurrentUser = Depends(require_user)):
    return unwrap(WishlistService(db).list_books(user))
