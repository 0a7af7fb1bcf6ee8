# core/sa/repositories/__init__.py
from .user import UserRepository
from .book import BookRepository
from .wishlist import WishlistRepository
from .points import PointsRepository
from .exchange import ExchangeRepository
from .exchange_point import ExchangePointRepository
from .discussion import ForumRepository, ChatRepository
from .report import ReportRepository
from .history import BookHistoryRepository, ReadingGuideRepository

__all__ = [
    'UserRepository',
    'BookRepository',
    'WishlistRepository',
    'PointsRepository',
    'ExchangeRepository',
    'ExchangePointRepository',
    'ForumRepository',
    'ChatRepository',
    'ReportRepository',
    'BookHistoryRepository',
    'ReadingGuideRepository'
]
