# core/sa/__init__.py
from .database import Database
from .models import (
    Base, User, Book, WishlistEntry, Exchange, ExchangePoint,
    PointsCredit, ForumPost, ForumReply, ChatMessage, Report
)

__all__ = [
    'Database',
    'Base',
    'User',
    'Book',
    'WishlistEntry',
    'Exchange',
    'ExchangePoint',
    'PointsCredit',
    'ForumPost',
    'ForumReply',
    'ChatMessage',
    'Report'
]
