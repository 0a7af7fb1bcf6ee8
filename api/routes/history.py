# api/routes/history.py
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from core.clients import GeminiClient
from core.context import CurrentUser, RequestContext
from core.errors import unwrap
from core.sa.database import get_db
from core.services.history_service import BookHistoryService
from core.services.reading_guide_service import ReadingGuideService
from api.deps import get_context, get_gemini_client, require_user
from api.schemas.history import BookHistory, HistoryEntry, HistoryEntryCreate, ReadingGuide

router = APIRouter(tags=["history"])

# The QR code only encodes the book's permanent URL
QR_CACHE_CONTROL = "public, max-age=31536000, immutable"

@router.get("/book/{book_id}/history", response_model=BookHistory)
def get_book_history(book_id: str, db: Session = Depends(get_db)):
    """Public journey of a book: past owners, completed exchanges and reader entries"""
    return unwrap(BookHistoryService(db).get_history(book_id))

@router.post("/book/{book_id}/history", response_model=HistoryEntry, status_code=201)
def add_history_entry(
    book_id: str,
    payload: HistoryEntryCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user)
):
    return unwrap(BookHistoryService(db).add_entry(user, book_id, **payload.model_dump()))

@router.get("/book/{book_id}/qr-code", response_class=Response)
def get_book_qr_code(book_id: str, db: Session = Depends(get_db)):
    png = unwrap(BookHistoryService(db).qr_code(book_id))
    return Response(content=png, media_type="image/png", headers={"Cache-Control": QR_CACHE_CONTROL})

@router.get("/book/{book_id}/reading-guide", response_model=ReadingGuide)
def get_reading_guide(
    book_id: str,
    refresh: bool = Query(False, description="Regenerate instead of using the stored guide (owner or admin)"),
    db: Session = Depends(get_db),
    context: RequestContext = Depends(get_context),
    client: GeminiClient = Depends(get_gemini_client)
):
    return unwrap(ReadingGuideService(db, client=client).get_guide(book_id, refresh=refresh, actor=context.user))
