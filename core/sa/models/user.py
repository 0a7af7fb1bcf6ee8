# core/sa/models/user.py
from sqlalchemy import Integer, String, Boolean, CheckConstraint, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, new_id

# New accounts start with this balance
SIGNUP_BONUS_POINTS = 20

class User(Base, TimestampMixin):
    __tablename__ = 'users'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=SIGNUP_BONUS_POINTS)
    escrow_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    books = relationship('Book', back_populates='current_owner')
    wishlist_entries = relationship('WishlistEntry', back_populates='user', passive_deletes=True)
    credits = relationship('PointsCredit', back_populates='user')

    __table_args__ = (
        CheckConstraint('points >= 0', name='ck_users_points_non_negative'),
        CheckConstraint('escrow_points >= 0', name='ck_users_escrow_non_negative'),
        Index('idx_users_email', 'email'),
    )

    @property
    def display_name(self) -> str:
        return self.name or self.email
