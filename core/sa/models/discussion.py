# core/sa/models/discussion.py
from sqlalchemy import Integer, String, Boolean, Text, ForeignKey, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, new_id

class ForumPost(Base, TimestampMixin):
    __tablename__ = 'forum_posts'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # Always stored for moderation, hidden from output when anonymous
    author_id: Mapped[str | None] = mapped_column(ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    book_id: Mapped[str | None] = mapped_column(ForeignKey('books.id', ondelete='SET NULL'), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_flagged: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    author = relationship('User')
    book = relationship('Book')
    replies = relationship('ForumReply', back_populates='post', order_by='ForumReply.created_at')

    __table_args__ = (
        Index('idx_forum_posts_book', 'book_id'),
        Index('idx_forum_posts_flagged', 'is_flagged'),
    )

class ForumReply(Base, TimestampMixin):
    __tablename__ = 'forum_replies'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(ForeignKey('forum_posts.id', ondelete='CASCADE'), nullable=False)
    author_id: Mapped[str | None] = mapped_column(ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_flagged: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    post = relationship('ForumPost', back_populates='replies')
    author = relationship('User')

    __table_args__ = (
        Index('idx_forum_replies_post', 'post_id'),
    )

class ChatMessage(Base, TimestampMixin):
    """Append-only per-book message; id order is the delivery order."""
    __tablename__ = 'chat_messages'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[str] = mapped_column(ForeignKey('books.id', ondelete='CASCADE'), nullable=False)
    user_id: Mapped[str | None] = mapped_column(ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index('idx_chat_messages_book_id', 'book_id', 'id'),
    )
