# core/sa/models/report.py
from enum import Enum
from sqlalchemy import String, Text, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, new_id

class ReportReason(str, Enum):
    CONDITION_MISMATCH = "CONDITION_MISMATCH"
    DAMAGED_BOOK = "DAMAGED_BOOK"
    WRONG_BOOK = "WRONG_BOOK"
    MISSING_PAGES = "MISSING_PAGES"
    FAKE_LISTING = "FAKE_LISTING"
    OTHER = "OTHER"

class ReportStatus(str, Enum):
    OPEN = "OPEN"
    UNDER_REVIEW = "UNDER_REVIEW"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"

class Report(Base, TimestampMixin):
    __tablename__ = 'reports'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    exchange_id: Mapped[str] = mapped_column(ForeignKey('exchanges.id'), nullable=False)
    book_id: Mapped[str] = mapped_column(ForeignKey('books.id'), nullable=False)
    reporter_id: Mapped[str] = mapped_column(ForeignKey('users.id'), nullable=False)
    reason: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ReportStatus.OPEN.value)

    # Relationships
    exchange = relationship('Exchange', back_populates='reports')
    reporter = relationship('User')

    __table_args__ = (
        UniqueConstraint('exchange_id', 'reporter_id', 'reason', name='uix_reports_exchange_reporter_reason'),
        Index('idx_reports_status', 'status'),
        Index('idx_reports_reporter', 'reporter_id'),
    )
