# core/sa/models/__init__.py
from .base import Base, TimestampMixin, utcnow
from .user import User, SIGNUP_BONUS_POINTS
from .book import Book, BookCondition, WishlistEntry
from .exchange import Exchange, ExchangePoint, ExchangeStatus, TERMINAL_STATUSES, ACTIVE_STATUSES
from .points import PointsCredit
from .discussion import ForumPost, ForumReply, ChatMessage
from .report import Report, ReportReason, ReportStatus
from .history import BookHistoryEntry, DifficultyLevel, ReadingGuide

__all__ = [
    'Base',
    'TimestampMixin',
    'utcnow',
    'User',
    'SIGNUP_BONUS_POINTS',
    'Book',
    'BookCondition',
    'WishlistEntry',
    'Exchange',
    'ExchangePoint',
    'ExchangeStatus',
    'TERMINAL_STATUSES',
    'ACTIVE_STATUSES',
    'PointsCredit',
    'ForumPost',
    'ForumReply',
    'ChatMessage',
    'Report',
    'ReportReason',
    'ReportStatus',
    'BookHistoryEntry',
    'DifficultyLevel',
    'ReadingGuide'
]
