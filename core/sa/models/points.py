# core/sa/models/points.py
from sqlalchemy import Integer, String, ForeignKey, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin

class PointsCredit(Base, TimestampMixin):
    """One applied credit; source_ref is unique so a payment session credits once."""
    __tablename__ = 'points_credits'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    source_ref: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # Relationships
    user = relationship('User', back_populates='credits')

    __table_args__ = (
        Index('idx_points_credits_user', 'user_id'),
    )
