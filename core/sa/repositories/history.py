# core/sa/repositories/history.py
from typing import List, Optional
from sqlalchemy import desc
from sqlalchemy.orm import Session
from core.sa.models import BookHistoryEntry, ReadingGuide

class BookHistoryRepository:
    def __init__(self, session: Session):
        self.session = session

    def add_entry(self, entry: BookHistoryEntry) -> BookHistoryEntry:
        self.session.add(entry)
        self.session.flush()
        return entry

    def list_for_book(self, book_id: str) -> List[BookHistoryEntry]:
        return (
            self.session.query(BookHistoryEntry)
            .filter(BookHistoryEntry.book_id == book_id)
            .order_by(desc(BookHistoryEntry.created_at))
            .all()
        )

    def recent_notes(self, book_id: str, limit: int = 10) -> List[str]:
        """Non-empty reader notes, newest first"""
        rows = (
            self.session.query(BookHistoryEntry.notes)
            .filter(
                BookHistoryEntry.book_id == book_id,
                BookHistoryEntry.notes.is_not(None),
                BookHistoryEntry.notes != ""
            )
            .order_by(desc(BookHistoryEntry.created_at))
            .limit(limit)
            .all()
        )
        return [notes for (notes,) in rows]

class ReadingGuideRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, book_id: str) -> Optional[ReadingGuide]:
        return self.session.get(ReadingGuide, book_id)

    def save(self, guide: ReadingGuide) -> ReadingGuide:
        """Insert or replace the guide for its book"""
        guide = self.session.merge(guide)
        self.session.flush()
        return guide
