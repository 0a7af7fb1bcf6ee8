# core/services/discussion_service.py
import logging
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from core.clients import ModerationClient
from core.context import CurrentUser
from core.errors import ErrorKind, ReadloomError, returns_result
from core.sa.models import ChatMessage, ForumPost, ForumReply
from core.sa.repositories import BookRepository, ChatRepository, ForumRepository
from core.services.base import TransactionalService, require_admin

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 3
MAX_CONTENT_LENGTH = 10000
MAX_CHAT_LENGTH = 2000

def _validate_content(content: str) -> str:
    content = (content or "").strip()
    if len(content) < MIN_CONTENT_LENGTH:
        raise ReadloomError(ErrorKind.VALIDATION, f"Content must be at least {MIN_CONTENT_LENGTH} characters")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ReadloomError(ErrorKind.VALIDATION, f"Content must be at most {MAX_CONTENT_LENGTH} characters")
    return content

def merge_messages(existing: Iterable, incoming: Iterable) -> list:
    """Merge chat messages a consumer already holds with newly received ones.

    Messages may arrive twice (a poll racing a push); duplicates are dropped
    by id and the result is in ascending id order. Works with ChatMessage
    rows or dicts carrying an "id" key.
    """
    def _id(message):
        return message["id"] if isinstance(message, dict) else message.id

    merged = {}
    for message in list(existing) + list(incoming):
        merged.setdefault(_id(message), message)
    return [merged[key] for key in sorted(merged)]

class ForumService(TransactionalService):
    def __init__(self, session: Session, moderation: Optional[ModerationClient] = None):
        super().__init__(session)
        self.forum = ForumRepository(session)
        self.books = BookRepository(session)
        self.moderation = moderation or ModerationClient()

    @returns_result
    def create_post(
        self,
        author: CurrentUser,
        content: str,
        is_anonymous: bool = False,
        book_id: Optional[str] = None
    ) -> ForumPost:
        content = _validate_content(content)
        if book_id and self.books.get_by_id(book_id) is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Book not found")

        flagged = self.moderation.is_flagged(content)
        with self.transaction():
            post = self.forum.add(ForumPost(
                author_id=author.id,
                book_id=book_id or None,
                content=content,
                is_anonymous=bool(is_anonymous),
                is_flagged=flagged
            ))
        if flagged:
            logger.warning(f"Forum post {post.id} by {author.id} flagged by moderation")
        return post

    @returns_result
    def create_reply(
        self,
        author: CurrentUser,
        post_id: str,
        content: str,
        is_anonymous: bool = False
    ) -> ForumReply:
        content = _validate_content(content)
        if self.forum.get_post(post_id) is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Post not found")

        flagged = self.moderation.is_flagged(content)
        with self.transaction():
            reply = self.forum.add(ForumReply(
                post_id=post_id,
                author_id=author.id,
                content=content,
                is_anonymous=bool(is_anonymous),
                is_flagged=flagged
            ))
        if flagged:
            logger.warning(f"Forum reply {reply.id} by {author.id} flagged by moderation")
        return reply

    @returns_result
    def list_posts(self, book_id: Optional[str] = None) -> List[ForumPost]:
        """Unflagged posts; callers hide flagged replies and anonymous authors"""
        return self.forum.list_visible_posts(book_id)

    @returns_result
    def list_flagged(self, actor: CurrentUser) -> dict:
        require_admin(actor)
        return {
            "posts": self.forum.list_flagged_posts(),
            "replies": self.forum.list_flagged_replies(),
        }

    @returns_result
    def set_flag(self, actor: CurrentUser, kind: str, item_id: str, flagged: bool):
        require_admin(actor)
        if kind == "post":
            item = self.forum.get_post(item_id)
        elif kind == "reply":
            item = self.forum.get_reply(item_id)
        else:
            raise ReadloomError(ErrorKind.VALIDATION, "Kind must be 'post' or 'reply'")
        if item is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, f"{kind.capitalize()} not found")

        with self.transaction():
            item.is_flagged = bool(flagged)
        logger.info(f"Forum {kind} {item_id} flag set to {item.is_flagged} by {actor.id}")
        return item

class ChatService(TransactionalService):
    def __init__(self, session: Session):
        super().__init__(session)
        self.chat = ChatRepository(session)
        self.books = BookRepository(session)

    @returns_result
    def post_message(self, user: CurrentUser, book_id: str, text: str) -> ChatMessage:
        text = (text or "").strip()
        if not text:
            raise ReadloomError(ErrorKind.VALIDATION, "Message cannot be empty")
        if len(text) > MAX_CHAT_LENGTH:
            raise ReadloomError(ErrorKind.VALIDATION, f"Message must be at most {MAX_CHAT_LENGTH} characters")
        if self.books.get_by_id(book_id) is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Book not found")

        with self.transaction():
            message = self.chat.append(ChatMessage(
                book_id=book_id,
                user_id=user.id,
                display_name=user.display_name,
                message=text
            ))
        return message

    @returns_result
    def list_messages(self, book_id: str, after_id: Optional[int] = None) -> List[ChatMessage]:
        if self.books.get_by_id(book_id) is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Book not found")
        return self.chat.list_for_book(book_id, after_id=after_id)
