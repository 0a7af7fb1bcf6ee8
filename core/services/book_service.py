# core/services/book_service.py
import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from core.context import CurrentUser
from core.errors import ErrorKind, ReadloomError, returns_result
from core.sa.models import Book, BookCondition
from core.sa.repositories import BookRepository, ExchangeRepository
from core.services.base import TransactionalService, require_admin, require_positive_int
from core.services.valuation import calculate_book_points

logger = logging.getLogger(__name__)

def _clean(value: Optional[str]) -> str:
    return (value or "").strip()

def _parse_condition(condition: Optional[str]) -> str:
    if condition is None:
        return BookCondition.GOOD.value
    try:
        return BookCondition(condition.upper()).value
    except ValueError:
        allowed = ", ".join(c.value for c in BookCondition)
        raise ReadloomError(ErrorKind.VALIDATION, f"Invalid condition. Must be one of: {allowed}")

class BookService(TransactionalService):
    def __init__(self, session: Session):
        super().__init__(session)
        self.books = BookRepository(session)
        self.exchanges = ExchangeRepository(session)

    def _get_or_404(self, book_id: str) -> Book:
        book = self.books.get_by_id(book_id)
        if book is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Book not found")
        return book

    def _get_managed(self, book_id: str, actor: CurrentUser) -> Book:
        book = self._get_or_404(book_id)
        if not actor.can_manage(book.current_owner_id):
            raise ReadloomError(ErrorKind.FORBIDDEN, "Only the book owner can modify this book")
        return book

    def compute_points(self, book: Book) -> int:
        return calculate_book_points(
            book.condition,
            self.books.wishlist_count(book.id) if book.id else 0,
            max(self.books.count_copies(book.title, book.author), 1)
        )

    @returns_result
    def add_book(
        self,
        owner: CurrentUser,
        title: str,
        author: str,
        location: str,
        description: Optional[str] = None,
        condition: Optional[str] = None,
        images: Optional[List[str]] = None,
        chapters: Optional[List[str]] = None,
        points_cost: Optional[int] = None
    ) -> Book:
        """List a physical book owned by the caller.

        Raises (as Err):
            ValidationError: title, author or location missing, bad condition or cost
        """
        title, author, location = _clean(title), _clean(author), _clean(location)
        if not title or not author or not location:
            raise ReadloomError(ErrorKind.VALIDATION, "Title, author, and location are required")
        if points_cost is not None:
            require_positive_int(points_cost, ErrorKind.VALIDATION, "Points cost")

        book = Book(
            title=title,
            author=author,
            location=location,
            description=_clean(description) or None,
            condition=_parse_condition(condition),
            images=[uri.strip() for uri in (images or []) if uri and uri.strip()],
            chapters=[c.strip() for c in (chapters or []) if c and c.strip()],
            current_owner_id=owner.id,
            is_available=True,
            is_deleted=False
        )
        with self.transaction():
            if points_cost is None:
                # The new listing counts towards its own rarity
                book.points_cost = calculate_book_points(
                    book.condition, 0, self.books.count_copies(title, author) + 1
                )
                book.points_computed = True
            else:
                book.points_cost = points_cost
                book.points_computed = False
            self.books.create(book)

        logger.info(f"User {owner.id} listed book {book.id} ({book.points_cost} points)")
        return book

    @returns_result
    def list_books(
        self,
        search: Optional[str] = None,
        condition: Optional[str] = None,
        location: Optional[str] = None,
        available_only: bool = False,
        owner_id: Optional[str] = None,
        page: int = 1,
        size: int = 20
    ) -> dict:
        if condition:
            condition = _parse_condition(condition)
        filters = dict(
            search=search,
            condition=condition,
            location=location,
            available_only=available_only,
            owner_id=owner_id
        )
        offset = (page - 1) * size
        return {
            "items": self.books.search_books(limit=size, offset=offset, **filters),
            "total": self.books.count_books(**filters),
            "page": page,
            "size": size,
        }

    @returns_result
    def get_book(self, book_id: str, actor: Optional[CurrentUser] = None) -> Book:
        """Deleted books are only visible to their owner and admins"""
        book = self._get_or_404(book_id)
        if book.is_deleted and (actor is None or not actor.can_manage(book.current_owner_id)):
            raise ReadloomError(ErrorKind.NOT_FOUND, "Book not found")
        return book

    @returns_result
    def list_own_books(self, owner: CurrentUser, include_deleted: bool = False) -> List[Book]:
        return self.books.list_by_owner(owner.id, include_deleted=include_deleted)

    @returns_result
    def set_availability(self, book_id: str, actor: CurrentUser, is_available: bool) -> Book:
        with self.transaction():
            book = self._get_managed(book_id, actor)
            book.is_available = bool(is_available)
        logger.info(f"Book {book_id} availability set to {book.is_available} by {actor.id}")
        return book

    def _set_deleted(self, book_id: str, actor: CurrentUser, is_deleted: bool) -> Book:
        with self.transaction():
            book = self._get_managed(book_id, actor)
            book.is_deleted = is_deleted
        logger.info(f"Book {book_id} {'deleted' if is_deleted else 'restored'} by {actor.id}")
        return book

    @returns_result
    def soft_delete(self, book_id: str, actor: CurrentUser) -> Book:
        return self._set_deleted(book_id, actor, True)

    @returns_result
    def restore(self, book_id: str, actor: CurrentUser) -> Book:
        return self._set_deleted(book_id, actor, False)

    @returns_result
    def purge_book(self, book_id: str, actor: CurrentUser) -> str:
        """Administrative, irreversible removal of a listing without exchange history"""
        require_admin(actor)
        with self.transaction():
            book = self._get_or_404(book_id)
            if self.books.has_exchange_history(book_id):
                raise ReadloomError(
                    ErrorKind.INVALID_TRANSITION,
                    "Books with exchange history can only be soft-deleted"
                )
            self.books.delete(book)
        logger.warning(f"Book {book_id} purged by admin {actor.id}")
        return book_id

    @returns_result
    def revalue_book(self, book_id: str) -> Book:
        """Recompute a heuristic points cost unless an exchange is in flight"""
        with self.transaction():
            book = self._get_or_404(book_id)
            if book.points_computed and self.exchanges.get_active_for_book(book_id) is None:
                book.points_cost = self.compute_points(book)
        return book

    def revalue_all(self) -> int:
        """Recompute every heuristic points cost; returns how many changed"""
        changed = 0
        with self.transaction():
            for book in self.books.list_computed():
                if self.exchanges.get_active_for_book(book.id) is not None:
                    continue
                points = self.compute_points(book)
                if points != book.points_cost:
                    book.points_cost = points
                    changed += 1
        return changed
