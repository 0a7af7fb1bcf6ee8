# core/sa/repositories/book.py
from typing import Optional, List
from sqlalchemy import desc, func, or_
from sqlalchemy.orm import Session, joinedload
from ..models import Book, WishlistEntry, Exchange

class BookRepository:
    def __init__(self, session: Session):
        self.session = session

    def create(self, book: Book) -> Book:
        self.session.add(book)
        self.session.flush()
        return book

    def get_by_id(self, book_id: str) -> Optional[Book]:
        """Get a book by its ID, including soft-deleted books"""
        return (
            self.session.query(Book)
            .filter(Book.id == book_id)
            .options(joinedload(Book.current_owner))
            .one_or_none()
        )

    def _filtered(
        self,
        search: Optional[str] = None,
        condition: Optional[str] = None,
        location: Optional[str] = None,
        available_only: bool = False,
        owner_id: Optional[str] = None
    ):
        query = self.session.query(Book).filter(Book.is_deleted.is_(False))

        if available_only:
            query = query.filter(Book.is_available.is_(True))

        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Book.title.ilike(pattern), Book.author.ilike(pattern)))

        if condition:
            query = query.filter(Book.condition == condition)

        if location and location.strip():
            query = query.filter(Book.location.ilike(f"%{location.strip()}%"))

        if owner_id:
            query = query.filter(Book.current_owner_id == owner_id)

        return query

    def search_books(
        self,
        search: Optional[str] = None,
        condition: Optional[str] = None,
        location: Optional[str] = None,
        available_only: bool = False,
        owner_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> List[Book]:
        """Search public listings.
        
        Args:
            search: Case-insensitive substring matched against title and author
            condition: Exact condition value
            location: Case-insensitive substring matched against location
            available_only: Only include books that can be requested
            owner_id: Only include books owned by this user
            limit: Maximum number of results to return
            offset: Number of records to skip
            
        Returns:
            Non-deleted books, most recently created first
        """
        query = self._filtered(search, condition, location, available_only, owner_id)
        return (
            query.options(joinedload(Book.current_owner))
            .order_by(desc(Book.created_at), desc(Book.id))
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count_books(
        self,
        search: Optional[str] = None,
        condition: Optional[str] = None,
        location: Optional[str] = None,
        available_only: bool = False,
        owner_id: Optional[str] = None
    ) -> int:
        """Count listings matching the same criteria as search_books"""
        return self._filtered(search, condition, location, available_only, owner_id).count()

    def list_by_owner(self, owner_id: str, include_deleted: bool = False) -> List[Book]:
        query = self.session.query(Book).filter(Book.current_owner_id == owner_id)
        if not include_deleted:
            query = query.filter(Book.is_deleted.is_(False))
        return query.order_by(desc(Book.created_at)).all()

    def count_copies(self, title: str, author: str) -> int:
        """Count non-deleted listings with the same title and author (rarity signal)"""
        return (
            self.session.query(func.count(Book.id))
            .filter(
                func.lower(Book.title) == title.strip().lower(),
                func.lower(Book.author) == author.strip().lower(),
                Book.is_deleted.is_(False)
            )
            .scalar() or 0
        )

    def wishlist_count(self, book_id: str) -> int:
        return (
            self.session.query(func.count(WishlistEntry.user_id))
            .filter(WishlistEntry.book_id == book_id)
            .scalar() or 0
        )

    def has_exchange_history(self, book_id: str) -> bool:
        return self.session.query(Exchange.id).filter(Exchange.book_id == book_id).first() is not None

    def list_computed(self) -> List[Book]:
        """Books whose points cost comes from the valuation heuristic"""
        return (
            self.session.query(Book)
            .filter(Book.points_computed.is_(True), Book.is_deleted.is_(False))
            .all()
        )

    def delete(self, book: Book) -> None:
        self.session.delete(book)
        self.session.flush()
