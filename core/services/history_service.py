# core/services/history_service.py
import logging
from typing import Optional
from sqlalchemy.orm import Session
from core.config import get_settings
from core.context import CurrentUser
from core.errors import ErrorKind, ReadloomError, returns_result
from core.sa.models import Book, BookHistoryEntry
from core.sa.repositories import BookHistoryRepository, BookRepository, ExchangeRepository
from core.services.base import TransactionalService
from core.utils.qr import book_history_url, render_qr_png

logger = logging.getLogger(__name__)

MAX_NOTES_LENGTH = 2000

class BookHistoryService(TransactionalService):
    """The public journey of a physical book.

    Past owners come from completed exchanges; readers add their own
    entries (city, how long they read it, notes) while they own the book.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self.books = BookRepository(session)
        self.exchanges = ExchangeRepository(session)
        self.history = BookHistoryRepository(session)

    def _get_listed(self, book_id: str) -> Book:
        book = self.books.get_by_id(book_id)
        if book is None or book.is_deleted:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Book not found")
        return book

    @returns_result
    def get_history(self, book_id: str) -> dict:
        book = self._get_listed(book_id)
        completed = self.exchanges.list_completed_for_book(book.id)

        previous_owners = []
        for exchange in completed:
            previous_owners.append({
                "id": exchange.from_user_id,
                "display_name": exchange.from_user.display_name,
                "handed_over_at": exchange.completed_at,
            })

        return {
            "book": book,
            "current_owner": book.current_owner,
            "previous_owners": previous_owners,
            "exchanges": completed,
            "entries": self.history.list_for_book(book.id),
        }

    @returns_result
    def add_entry(
        self,
        user: CurrentUser,
        book_id: str,
        city: str,
        reading_duration: Optional[str] = None,
        notes: Optional[str] = None
    ) -> BookHistoryEntry:
        """Record a stop on the book's journey.

        Raises (as Err):
            NotFound: missing or deleted book
            Forbidden: caller is not the current owner
            ValidationError: blank city or notes too long
        """
        book = self._get_listed(book_id)
        if book.current_owner_id != user.id:
            raise ReadloomError(ErrorKind.FORBIDDEN, "Only the current owner can add to this book's history")

        city = (city or "").strip()
        if not city:
            raise ReadloomError(ErrorKind.VALIDATION, "City is required")
        notes = (notes or "").strip() or None
        if notes and len(notes) > MAX_NOTES_LENGTH:
            raise ReadloomError(ErrorKind.VALIDATION, f"Notes must be at most {MAX_NOTES_LENGTH} characters")

        with self.transaction():
            entry = self.history.add_entry(BookHistoryEntry(
                book_id=book.id,
                user_id=user.id,
                display_name=user.display_name,
                city=city,
                reading_duration=(reading_duration or "").strip() or None,
                notes=notes
            ))
        logger.info(f"History entry {entry.id} added to book {book.id} by {user.id}")
        return entry

    @returns_result
    def qr_code(self, book_id: str) -> bytes:
        """PNG QR code pointing at the book's permanent history page"""
        book = self._get_listed(book_id)
        return render_qr_png(book_history_url(get_settings().app_base_url, book.id))
