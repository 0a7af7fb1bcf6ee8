# core/sa/models/book.py
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Integer, Boolean, Text, DateTime, ForeignKey, JSON, Index, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, new_id, utcnow

class BookCondition(str, Enum):
    NEW = "NEW"
    LIKE_NEW = "LIKE_NEW"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"

class Book(Base, TimestampMixin):
    __tablename__ = 'books'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    condition: Mapped[str] = mapped_column(String(20), nullable=False, default=BookCondition.GOOD.value)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    chapters: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    current_owner_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    points_cost: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    # True when points_cost came from the valuation heuristic rather than the owner
    points_computed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    current_owner = relationship('User', back_populates='books')
    wishlist_entries = relationship('WishlistEntry', back_populates='book', passive_deletes=True)
    exchanges = relationship('Exchange', back_populates='book')
    history_entries = relationship('BookHistoryEntry', back_populates='book', passive_deletes=True)

    __table_args__ = (
        CheckConstraint('points_cost > 0', name='ck_books_points_cost_positive'),
        Index('idx_books_title', 'title'),
        Index('idx_books_author', 'author'),
        Index('idx_books_owner', 'current_owner_id'),
        Index('idx_books_listing', 'is_deleted', 'is_available', 'created_at'),
    )

class WishlistEntry(Base):
    """A user's interest in a book."""
    __tablename__ = 'wishlist_entries'

    user_id: Mapped[str] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), primary_key=True)
    book_id: Mapped[str] = mapped_column(ForeignKey('books.id', ondelete='CASCADE'), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    user = relationship('User', back_populates='wishlist_entries')
    book = relationship('Book', back_populates='wishlist_entries')

    __table_args__ = (
        UniqueConstraint('user_id', 'book_id', name='uix_wishlist_user_book'),
        Index('idx_wishlist_book', 'book_id'),
    )
