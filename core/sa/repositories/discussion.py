from typing import List, Optional
from sqlalchemy import desc
from sqlalchemy.orm import Session, selectinload
from core.sa.models import ChatMessage, ForumPost, ForumReply

class ForumRepository:
    def __init__(self, session: Session):
        self.session = session

    def add(self, item):
        self.session.add(item)
        self.session.flush()
        return item

    def get_post(self, post_id: str) -> Optional[ForumPost]:
        return self.session.query(ForumPost).filter(ForumPost.id == post_id).one_or_none()

    def get_reply(self, reply_id: str) -> Optional[ForumReply]:
        return self.session.query(ForumReply).filter(ForumReply.id == reply_id).one_or_none()

    def list_visible_posts(self, book_id: Optional[str] = None) -> List[ForumPost]:
        """Unflagged posts, newest first; all posts when book_id is None"""
        query = (
            self.session.query(ForumPost)
            .filter(ForumPost.is_flagged.is_(False))
            .options(
                selectinload(ForumPost.author),
                selectinload(ForumPost.replies).selectinload(ForumReply.author)
            )
        )
        if book_id is not None:
            query = query.filter(ForumPost.book_id == book_id)
        return query.order_by(desc(ForumPost.created_at)).all()

    def list_flagged_posts(self) -> List[ForumPost]:
        return (
            self.session.query(ForumPost)
            .filter(ForumPost.is_flagged.is_(True))
            .order_by(desc(ForumPost.created_at))
            .all()
        )

    def list_flagged_replies(self) -> List[ForumReply]:
        return (
            self.session.query(ForumReply)
            .filter(ForumReply.is_flagged.is_(True))
            .order_by(desc(ForumReply.created_at))
            .all()
        )

class ChatRepository:
    def __init__(self, session: Session):
        self.session = session

    def append(self, message: ChatMessage) -> ChatMessage:
        self.session.add(message)
        self.session.flush()
        return message

    def list_for_book(self, book_id: str, after_id: Optional[int] = None, limit: int = 200) -> List[ChatMessage]:
        """Messages for a book in ascending id order.

        Without after_id this is the newest ``limit`` messages; with it, the
        first ``limit`` messages after that id.
        """
        query = self.session.query(ChatMessage).filter(ChatMessage.book_id == book_id)
        if after_id is not None:
            return query.filter(ChatMessage.id > after_id).order_by(ChatMessage.id.asc()).limit(limit).all()
        newest = query.order_by(ChatMessage.id.desc()).limit(limit).all()
        return list(reversed(newest))
