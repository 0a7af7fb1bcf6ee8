# api/routes/forum.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.clients import ModerationClient
from core.context import CurrentUser
from core.errors import unwrap
from core.sa.database import get_db
from core.services.discussion_service import ForumService
from api.deps import get_moderation_client, require_admin, require_user
from api.schemas.discussion import (
    FlaggedContent, FlagUpdate, ForumPost, ForumPostCreate, ForumReply, ForumReplyCreate
)

router = APIRouter(prefix="/forum", tags=["forum"])

def _author(item) -> dict:
    """Anonymous content never exposes who wrote it"""
    if item.is_anonymous or item.author is None:
        return {"author_id": None, "author_name": None}
    return {"author_id": item.author_id, "author_name": item.author.display_name}

def serialize_reply(reply) -> ForumReply:
    return ForumReply(
        id=reply.id,
        post_id=reply.post_id,
        content=reply.content,
        is_anonymous=reply.is_anonymous,
        is_flagged=reply.is_flagged,
        created_at=reply.created_at,
        **_author(reply)
    )

def serialize_post(post, include_replies: bool = True) -> ForumPost:
    replies = [serialize_reply(r) for r in post.replies if not r.is_flagged] if include_replies else []
    return ForumPost(
        id=post.id,
        book_id=post.book_id,
        content=post.content,
        is_anonymous=post.is_anonymous,
        is_flagged=post.is_flagged,
        created_at=post.created_at,
        replies=replies,
        **_author(post)
    )

def _service(db: Session, moderation: ModerationClient) -> ForumService:
    return ForumService(db, moderation=moderation)

@router.get("/posts", response_model=List[ForumPost])
def list_posts(
    book_id: Optional[str] = Query(None, description="Only posts about this book"),
    db: Session = Depends(get_db),
    moderation: ModerationClient = Depends(get_moderation_client)
):
    """Visible posts and replies; flagged content is left out"""
    return [serialize_post(p) for p in unwrap(_service(db, moderation).list_posts(book_id))]

@router.post("/posts", response_model=ForumPost, status_code=201)
def create_post(
    payload: ForumPostCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user),
    moderation: ModerationClient = Depends(get_moderation_client)
):
    post = unwrap(_service(db, moderation).create_post(user, payload.content, payload.is_anonymous, payload.book_id))
    return serialize_post(post, include_replies=False)

@router.post("/replies", response_model=ForumReply, status_code=201)
def create_reply(
    payload: ForumReplyCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user),
    moderation: ModerationClient = Depends(get_moderation_client)
):
    reply = unwrap(_service(db, moderation).create_reply(user, payload.post_id, payload.content, payload.is_anonymous))
    return serialize_reply(reply)

@router.get("/flagged", response_model=FlaggedContent)
def list_flagged(
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
    moderation: ModerationClient = Depends(get_moderation_client)
):
    flagged = unwrap(_service(db, moderation).list_flagged(admin))
    return FlaggedContent(
        posts=[serialize_post(p, include_replies=False) for p in flagged["posts"]],
        replies=[serialize_reply(r) for r in flagged["replies"]]
    )

@router.post("/{kind}/{item_id}/flag")
def set_flag(
    kind: str,
    item_id: str,
    payload: FlagUpdate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
    moderation: ModerationClient = Depends(get_moderation_client)
):
    item = unwrap(_service(db, moderation).set_flag(admin, kind, item_id, payload.flagged))
    return {"id": item.id, "kind": kind, "is_flagged": item.is_flagged}
