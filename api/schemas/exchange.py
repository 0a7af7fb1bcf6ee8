# api/schemas/exchange.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict
from api.schemas.book import BookSummary
from api.schemas.user import UserSummary

class ExchangeCreate(BaseModel):
    book_id: str
    exchange_point_id: Optional[str] = None

class Exchange(BaseModel):
    id: str
    book_id: str
    from_user_id: str
    to_user_id: str
    exchange_point_id: Optional[str] = None
    status: str
    points_cost: int
    points_escrowed: int
    video_room_id: Optional[str] = None
    verified_at: Optional[datetime] = None
    created_at: datetime
    approved_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    book: Optional[BookSummary] = None
    from_user: Optional[UserSummary] = None
    to_user: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)

class VideoRoom(BaseModel):
    room_id: str
    room_code: str

class ExchangePointBase(BaseModel):
    name: str
    address: str
    city: str
    latitude: float
    longitude: float
    country: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True

class ExchangePointCreate(ExchangePointBase):
    pass

class ExchangePointUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    country: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

class ExchangePoint(ExchangePointBase):
    id: str
    country: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class ExchangePointDeleted(BaseModel):
    id: str
    deleted: bool
    deactivated: bool
