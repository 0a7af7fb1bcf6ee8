# api/schemas/history.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from api.schemas.book import Book
from api.schemas.exchange import Exchange
from api.schemas.user import UserSummary

class HistoryEntryCreate(BaseModel):
    city: str
    reading_duration: Optional[str] = None
    notes: Optional[str] = None

class HistoryEntry(BaseModel):
    id: str
    book_id: str
    user_id: Optional[str] = None
    display_name: str
    city: str
    reading_duration: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class PreviousOwner(BaseModel):
    id: str
    display_name: str
    handed_over_at: Optional[datetime] = None

class BookHistory(BaseModel):
    book: Book
    current_owner: Optional[UserSummary] = None
    previous_owners: List[PreviousOwner]
    exchanges: List[Exchange]
    entries: List[HistoryEntry]

    model_config = ConfigDict(from_attributes=True)

class ReadingGuide(BaseModel):
    book_id: str
    difficulty_level: str
    recommended_reader_type: str
    suggested_reading_pace: str
    tips: List[str]
    generated_at: datetime

    model_config = ConfigDict(from_attributes=True)
