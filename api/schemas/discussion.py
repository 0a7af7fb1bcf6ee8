# api/schemas/discussion.py
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict

class ForumPostCreate(BaseModel):
    content: str
    is_anonymous: bool = False
    book_id: Optional[str] = None

class ForumReplyCreate(BaseModel):
    post_id: str
    content: str
    is_anonymous: bool = False

class ForumReply(BaseModel):
    id: str
    post_id: str
    author_id: Optional[str] = None
    author_name: Optional[str] = None
    content: str
    is_anonymous: bool
    is_flagged: bool = False
    created_at: datetime

class ForumPost(BaseModel):
    id: str
    book_id: Optional[str] = None
    author_id: Optional[str] = None
    author_name: Optional[str] = None
    content: str
    is_anonymous: bool
    is_flagged: bool = False
    created_at: datetime
    replies: List[ForumReply] = []

class FlaggedContent(BaseModel):
    posts: List[ForumPost]
    replies: List[ForumReply]

class FlagUpdate(BaseModel):
    flagged: bool

class ChatMessageCreate(BaseModel):
    message: str

class ChatMessage(BaseModel):
    id: int
    book_id: str
    user_id: Optional[str] = None
    display_name: str
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
