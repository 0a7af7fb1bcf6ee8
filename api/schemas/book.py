# api/schemas/book.py
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict
from api.schemas.user import UserSummary

class BookBase(BaseModel):
    title: str
    author: str
    location: str
    description: Optional[str] = None
    condition: Optional[str] = None
    images: List[str] = []
    chapters: List[str] = []

class BookCreate(BookBase):
    points_cost: Optional[int] = None

class Book(BookBase):
    id: str
    condition: str
    current_owner_id: str
    current_owner: Optional[UserSummary] = None
    is_available: bool
    is_deleted: bool
    points_cost: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class BookDetail(Book):
    wishlist_count: int = 0
    is_wishlisted: bool = False

class BookList(BaseModel):
    items: List[Book]
    total: int
    page: int
    size: int

    model_config = ConfigDict(from_attributes=True)

class BookSummary(BaseModel):
    id: str
    title: str
    author: str
    points_cost: int

    model_config = ConfigDict(from_attributes=True)

class AvailabilityUpdate(BaseModel):
    is_available: bool

class WishlistToggle(BaseModel):
    book_id: str
    wishlisted: bool
    wishlist_count: int
