# core/services/valuation.py
from core.sa.models import BookCondition

MIN_POINTS = 5
MAX_POINTS = 20
BASE_POINTS = 10

CONDITION_MULTIPLIERS = {
    BookCondition.NEW: 1.5,
    BookCondition.LIKE_NEW: 1.3,
    BookCondition.GOOD: 1.0,
    BookCondition.FAIR: 0.7,
    BookCondition.POOR: 0.5,
}

def calculate_book_points(condition: str, wishlist_count: int, copies: int) -> int:
    """Deterministic points value for a listing, always within [MIN_POINTS, MAX_POINTS].

    Args:
        condition: BookCondition value
        wishlist_count: Number of users who wishlisted the book (demand)
        copies: Number of listings with the same title and author (rarity)
    """
    points = BASE_POINTS * CONDITION_MULTIPLIERS.get(BookCondition(condition), 1.0)

    # +1 per 3 wishlist entries, capped at +3
    points += min(wishlist_count // 3, 3)

    if copies == 1:
        points += 1
    elif 2 <= copies <= 3:
        points += 0.5

    return max(MIN_POINTS, min(MAX_POINTS, round(points)))
