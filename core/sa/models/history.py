# core/sa/models/history.py
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Text, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, new_id, utcnow

class DifficultyLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

class BookHistoryEntry(Base, TimestampMixin):
    """A reader's note on one stop of a book's journey."""
    __tablename__ = 'book_history_entries'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    book_id: Mapped[str] = mapped_column(ForeignKey('books.id', ondelete='CASCADE'), nullable=False)
    user_id: Mapped[str | None] = mapped_column(ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    reading_duration: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    book = relationship('Book', back_populates='history_entries')

    __table_args__ = (
        Index('idx_book_history_book', 'book_id', 'created_at'),
    )

class ReadingGuide(Base):
    """Generated reading guide, one per book."""
    __tablename__ = 'reading_guides'

    book_id: Mapped[str] = mapped_column(ForeignKey('books.id', ondelete='CASCADE'), primary_key=True)
    difficulty_level: Mapped[str] = mapped_column(String(20), nullable=False)
    recommended_reader_type: Mapped[str] = mapped_column(Text, nullable=False)
    suggested_reading_pace: Mapped[str] = mapped_column(Text, nullable=False)
    tips: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    generated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
