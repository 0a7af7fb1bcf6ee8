from typing import List, Optional
from sqlalchemy import desc
from sqlalchemy.orm import Session
from core.sa.models import Book, WishlistEntry

class WishlistRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: str, book_id: str) -> Optional[WishlistEntry]:
        return (
            self.session.query(WishlistEntry)
            .filter(WishlistEntry.user_id == user_id, WishlistEntry.book_id == book_id)
            .one_or_none()
        )

    def add(self, user_id: str, book_id: str) -> WishlistEntry:
        entry = WishlistEntry(user_id=user_id, book_id=book_id)
        self.session.add(entry)
        self.session.flush()
        return entry

    def remove(self, entry: WishlistEntry) -> None:
        self.session.delete(entry)
        self.session.flush()

    def list_books_for_user(self, user_id: str) -> List[Book]:
        """Wishlisted books that are still listed, most recently wishlisted first"""
        return (
            self.session.query(Book)
            .join(WishlistEntry, WishlistEntry.book_id == Book.id)
            .filter(WishlistEntry.user_id == user_id, Book.is_deleted.is_(False))
            .order_by(desc(WishlistEntry.created_at))
            .all()
        )
