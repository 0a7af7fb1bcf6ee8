# core/services/reading_guide_service.py
import json
import logging
import re
from typing import List, Optional
from sqlalchemy.orm import Session
from core.clients import GeminiClient
from core.context import CurrentUser
from core.errors import ErrorKind, ExternalServiceError, ReadloomError, returns_result
from core.sa.models import Book, DifficultyLevel, ReadingGuide, utcnow
from core.sa.repositories import BookHistoryRepository, BookRepository, ReadingGuideRepository
from core.services.base import TransactionalService

logger = logging.getLogger(__name__)

MAX_TIPS = 5
DEFAULT_READER_TYPE = "Readers interested in this book"
DEFAULT_READING_PACE = "Take your time, 1-2 chapters per day"
DEFAULT_TIPS = [
    "Take notes as you read to better understand the content",
    "Read in a quiet environment for better comprehension",
    "Review key concepts after each chapter",
]

READING_GUIDE_PROMPT = """You are an AI assistant helping readers understand if a book suits their reading level and how to approach it.

Book Information:
Title: {title}
Author: {author}
Description: {description}
Chapters: {chapters}

Community Notes from Previous Readers:
{notes}

IMPORTANT RULES:
1. Do NOT include any spoilers
2. Do NOT quote text from the book
3. Keep output concise and structured
4. Focus on reading approach, not plot details
5. Be helpful and encouraging

Return ONLY a JSON object with this structure, no markdown and no explanations:

{{
  "difficultyLevel": "Beginner",
  "recommendedReaderType": "A brief description of who would enjoy this book",
  "suggestedReadingPace": "A practical suggestion like '15-20 pages per day'",
  "tips": ["A helpful tip", "Another helpful tip", "One more tip"]
}}

difficultyLevel must be exactly one of "Beginner", "Intermediate" or "Advanced".
tips must contain 3-5 short strings with no spoilers."""

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)

def build_prompt(book: Book, notes: List[str]) -> str:
    return READING_GUIDE_PROMPT.format(
        title=book.title,
        author=book.author,
        description=book.description or "No description available.",
        chapters=", ".join(book.chapters) if book.chapters else "Not listed.",
        notes=" ".join(notes) if notes else "No community notes available yet."
    )

def _difficulty(value) -> str:
    text = str(value or "").strip().lower()
    for level in DifficultyLevel:
        if level.value.lower() == text:
            return level.value
    return DifficultyLevel.INTERMEDIATE.value

def _text(value, default: str) -> str:
    text = str(value).strip() if value is not None else ""
    return text or default

def parse_guide(reply: str) -> dict:
    """Decode the model's reply into guide fields.

    Code fences and any text around the first JSON object are ignored.

    Raises:
        ValueError: when no JSON object can be decoded
    """
    cleaned = _FENCE.sub("", reply or "").strip()
    start = cleaned.find("{")
    if start == -1:
        raise ValueError("no JSON object in reply")
    data, _ = json.JSONDecoder().raw_decode(cleaned[start:])
    if not isinstance(data, dict):
        raise ValueError("reply is not a JSON object")

    tips = data.get("tips")
    if not isinstance(tips, list):
        tips = []
    tips = [tip.strip() for tip in tips if isinstance(tip, str) and tip.strip()][:MAX_TIPS]

    return {
        "difficulty_level": _difficulty(data.get("difficultyLevel")),
        "recommended_reader_type": _text(data.get("recommendedReaderType"), DEFAULT_READER_TYPE),
        "suggested_reading_pace": _text(data.get("suggestedReadingPace"), DEFAULT_READING_PACE),
        "tips": tips or list(DEFAULT_TIPS),
    }

class ReadingGuideService(TransactionalService):
    """AI reading guides, generated once per book and kept in the database."""

    def __init__(self, session: Session, client: Optional[GeminiClient] = None):
        super().__init__(session)
        self.client = client or GeminiClient()
        self.books = BookRepository(session)
        self.history = BookHistoryRepository(session)
        self.guides = ReadingGuideRepository(session)

    @returns_result
    def get_guide(self, book_id: str, refresh: bool = False, actor: Optional[CurrentUser] = None) -> ReadingGuide:
        """Cached guide for a book, generating it on first use or on refresh.

        Raises (as Err):
            NotFound: missing or deleted book
            Forbidden: refresh requested by someone other than the owner or an admin
            ExternalServiceError: generation failed or the reply was unusable
        """
        book = self.books.get_by_id(book_id)
        if book is None or book.is_deleted:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Book not found")

        if refresh:
            if actor is None or not actor.can_manage(book.current_owner_id):
                raise ReadloomError(ErrorKind.FORBIDDEN, "Only the book owner can refresh its reading guide")
        else:
            cached = self.guides.get(book.id)
            if cached is not None:
                return cached

        reply = self.client.generate(build_prompt(book, self.history.recent_notes(book.id)))
        try:
            fields = parse_guide(reply)
        except ValueError as e:
            logger.error(f"Could not parse reading guide for book {book.id}: {e}; reply: {reply[:500]}")
            raise ExternalServiceError(self.client.service_name, "Reading guide could not be generated")

        with self.transaction():
            guide = self.guides.save(ReadingGuide(book_id=book.id, generated_at=utcnow(), **fields))
        logger.info(f"Generated reading guide for book {book.id}")
        return guide
