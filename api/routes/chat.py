# api/routes/chat.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.context import CurrentUser
from core.errors import unwrap
from core.sa.database import get_db
from core.services.discussion_service import ChatService
from api.deps import require_user
from api.schemas.discussion import ChatMessage, ChatMessageCreate

router = APIRouter(prefix="/chat", tags=["chat"])

@router.get("/messages", response_model=List[ChatMessage])
def list_messages(
    book_id: str = Query(..., alias="bookId", description="Book whose room to read"),
    after_id: Optional[int] = Query(None, alias="afterId", description="Only messages newer than this id"),
    db: Session = Depends(get_db)
):
    """Messages in ascending id order"""
    return unwrap(ChatService(db).list_messages(book_id, after_id=after_id))

@router.post("/messages", response_model=ChatMessage, status_code=201)
def post_message(
    payload: ChatMessageCreate,
    book_id: str = Query(..., alias="bookId", description="Book whose room to post to"),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user)
):
    return unwrap(ChatService(db).post_message(user, book_id, payload.message))
