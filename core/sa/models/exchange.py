# core/sa/models/exchange.py
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Integer, Boolean, Float, Text, DateTime, ForeignKey, Index, CheckConstraint, text
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, new_id

class ExchangeStatus(str, Enum):
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

TERMINAL_STATUSES = frozenset({ExchangeStatus.COMPLETED, ExchangeStatus.REJECTED, ExchangeStatus.CANCELLED})
ACTIVE_STATUSES = frozenset({ExchangeStatus.REQUESTED, ExchangeStatus.APPROVED})
ACTIVE_STATUS_CLAUSE = "status IN ('REQUESTED', 'APPROVED')"

class ExchangePoint(Base, TimestampMixin):
    """A physical location where exchanges are fulfilled."""
    __tablename__ = 'exchange_points'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    country: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Relationships
    exchanges = relationship('Exchange', back_populates='exchange_point')

    __table_args__ = (
        CheckConstraint('latitude >= -90 AND latitude <= 90', name='ck_exchange_points_latitude'),
        CheckConstraint('longitude >= -180 AND longitude <= 180', name='ck_exchange_points_longitude'),
        Index('idx_exchange_points_active', 'is_active'),
        Index('idx_exchange_points_city', 'city'),
    )

class Exchange(Base, TimestampMixin):
    __tablename__ = 'exchanges'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    book_id: Mapped[str] = mapped_column(ForeignKey('books.id'), nullable=False)
    from_user_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False)
    to_user_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False)
    exchange_point_id: Mapped[str | None] = mapped_column(ForeignKey('exchange_points.id'), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ExchangeStatus.REQUESTED.value)
    points_cost: Mapped[int] = mapped_column(Integer, nullable=False)
    points_escrowed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    video_room_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    book = relationship('Book', back_populates='exchanges')
    from_user = relationship('User', foreign_keys=[from_user_id])
    to_user = relationship('User', foreign_keys=[to_user_id])
    exchange_point = relationship('ExchangePoint', back_populates='exchanges')
    reports = relationship('Report', back_populates='exchange')

    __table_args__ = (
        CheckConstraint('points_cost > 0', name='ck_exchanges_points_cost_positive'),
        CheckConstraint('points_escrowed >= 0', name='ck_exchanges_escrow_non_negative'),
        Index('idx_exchanges_book_status', 'book_id', 'status'),
        Index('idx_exchanges_from_user', 'from_user_id'),
        Index('idx_exchanges_to_user', 'to_user_id'),
        Index('idx_exchanges_completed_at', 'completed_at'),
        # At most one REQUESTED/APPROVED exchange per book
        Index(
            'uq_exchanges_active_book', 'book_id',
            unique=True,
            sqlite_where=text(ACTIVE_STATUS_CLAUSE),
            postgresql_where=text(ACTIVE_STATUS_CLAUSE)
        ),
    )
