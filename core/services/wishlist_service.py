# core/services/wishlist_service.py
from typing import List
from sqlalchemy.orm import Session
from core.context import CurrentUser
from core.errors import ErrorKind, ReadloomError, returns_result
from core.sa.models import Book
from core.sa.repositories import BookRepository, WishlistRepository
from core.services.base import TransactionalService

class WishlistService(TransactionalService):
    def __init__(self, session: Session):
        super().__init__(session)
        self.books = BookRepository(session)
        self.wishlist = WishlistRepository(session)

    @returns_result
    def toggle(self, user: CurrentUser, book_id: str) -> dict:
        """Add the book to the user's wishlist, or remove it if already there.

        Returns:
            {"wishlisted": new membership, "wishlist_count": count after the flip}
        """
        book = self.books.get_by_id(book_id)
        if book is None or book.is_deleted:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Book not found")

        with self.transaction():
            entry = self.wishlist.get(user.id, book_id)
            if entry is None:
                self.wishlist.add(user.id, book_id)
                wishlisted = True
            else:
                self.wishlist.remove(entry)
                wishlisted = False

        return {
            "book_id": book_id,
            "wishlisted": wishlisted,
            "wishlist_count": self.books.wishlist_count(book_id),
        }

    def count(self, book_id: str) -> int:
        return self.books.wishlist_count(book_id)

    def is_wishlisted(self, user_id: str, book_id: str) -> bool:
        return self.wishlist.get(user_id, book_id) is not None

    @returns_result
    def list_books(self, user: CurrentUser) -> List[Book]:
        return self.wishlist.list_books_for_user(user.id)
