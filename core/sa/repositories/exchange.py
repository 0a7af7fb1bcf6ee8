# core/sa/repositories/exchange.py
from datetime import datetime
from typing import List, Optional
from sqlalchemy import and_, desc, or_, update
from sqlalchemy.orm import Session, joinedload
from core.sa.models import Book, Exchange, ExchangeStatus, ACTIVE_STATUSES

class ExchangeRepository:
    """Repository for Exchange rows.

    Status changes go through ``transition`` which only updates a row still
    in the expected status, so two concurrent transitions of the same
    exchange cannot both succeed.
    """

    def __init__(self, session: Session):
        self.session = session

    def create(self, exchange: Exchange) -> Exchange:
        self.session.add(exchange)
        self.session.flush()
        return exchange

    def get_by_id(self, exchange_id: str) -> Optional[Exchange]:
        return (
            self.session.query(Exchange)
            .filter(Exchange.id == exchange_id)
            .options(
                joinedload(Exchange.book),
                joinedload(Exchange.from_user),
                joinedload(Exchange.to_user)
            )
            .one_or_none()
        )

    def get_active_for_book(self, book_id: str) -> Optional[Exchange]:
        return (
            self.session.query(Exchange)
            .filter(
                Exchange.book_id == book_id,
                Exchange.status.in_([s.value for s in ACTIVE_STATUSES])
            )
            .first()
        )

    def transition(
        self,
        exchange_id: str,
        expected: ExchangeStatus,
        new: ExchangeStatus,
        **values
    ) -> bool:
        """Move an exchange from expected to new status.

        Returns:
            True if the row was updated, False if it was no longer in expected
        """
        result = self.session.execute(
            update(Exchange)
            .where(Exchange.id == exchange_id, Exchange.status == expected.value)
            .values(status=new.value, **values)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def set_fields(self, exchange_id: str, **values) -> None:
        self.session.execute(
            update(Exchange)
            .where(Exchange.id == exchange_id)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )

    def transfer_book(self, book_id: str, from_user_id: str, to_user_id: str) -> bool:
        """Move ownership only if from_user_id still owns the book"""
        result = self.session.execute(
            update(Book)
            .where(Book.id == book_id, Book.current_owner_id == from_user_id)
            .values(current_owner_id=to_user_id, is_available=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1

    def completed_between_since(self, user_a: str, user_b: str, since: datetime) -> bool:
        """Whether the two users completed an exchange, in either direction, since a point in time"""
        return (
            self.session.query(Exchange.id)
            .filter(
                Exchange.status == ExchangeStatus.COMPLETED.value,
                Exchange.completed_at >= since,
                or_(
                    and_(Exchange.from_user_id == user_a, Exchange.to_user_id == user_b),
                    and_(Exchange.from_user_id == user_b, Exchange.to_user_id == user_a)
                )
            )
            .first()
        ) is not None

    def list_for_user(self, user_id: str) -> List[Exchange]:
        """Exchanges where the user is the owner or the requester, newest first"""
        return (
            self.session.query(Exchange)
            .filter(or_(Exchange.from_user_id == user_id, Exchange.to_user_id == user_id))
            .options(
                joinedload(Exchange.book),
                joinedload(Exchange.from_user),
                joinedload(Exchange.to_user)
            )
            .order_by(desc(Exchange.created_at))
            .all()
        )

    def list_pending_for_owner(self, owner_id: str) -> List[Exchange]:
        return (
            self.session.query(Exchange)
            .filter(
                Exchange.from_user_id == owner_id,
                Exchange.status == ExchangeStatus.REQUESTED.value
            )
            .options(joinedload(Exchange.book), joinedload(Exchange.to_user))
            .order_by(desc(Exchange.created_at))
            .all()
        )

    def list_completed_for_book(self, book_id: str) -> List[Exchange]:
        """Completed hand-overs of a book, oldest first"""
        return (
            self.session.query(Exchange)
            .filter(
                Exchange.book_id == book_id,
                Exchange.status == ExchangeStatus.COMPLETED.value
            )
            .options(
                joinedload(Exchange.from_user),
                joinedload(Exchange.to_user),
                joinedload(Exchange.exchange_point)
            )
            .order_by(Exchange.completed_at.asc(), Exchange.created_at.asc())
            .all()
        )
