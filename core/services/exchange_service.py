# core/services/exchange_service.py
import logging
from datetime import timedelta
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from core.context import CurrentUser
from core.errors import ErrorKind, ExternalServiceError, ReadloomError, returns_result
from core.sa.models import Exchange, ExchangeStatus, utcnow
from core.sa.repositories import (
    BookRepository,
    ExchangePointRepository,
    ExchangeRepository,
    PointsRepository
)
from core.services.base import TransactionalService

logger = logging.getLogger(__name__)

# Two users may not complete another exchange with each other within this window
REPEAT_EXCHANGE_WINDOW = timedelta(days=7)

class ExchangeService(TransactionalService):
    """State machine for moving a book from its owner to a requester.

    REQUESTED -> APPROVED -> COMPLETED, with REJECTED and CANCELLED reachable
    from either active state. Points are escrowed on approval, released on
    rejection or cancellation and settled on completion.
    """

    def __init__(self, session: Session, mailer=None):
        super().__init__(session)
        self.books = BookRepository(session)
        self.exchanges = ExchangeRepository(session)
        self.points = PointsRepository(session)
        self.exchange_points = ExchangePointRepository(session)
        self.mailer = mailer

    def _get_or_404(self, exchange_id: str) -> Exchange:
        exchange = self.exchanges.get_by_id(exchange_id)
        if exchange is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Exchange not found")
        return exchange

    @staticmethod
    def _require_status(exchange: Exchange, *allowed: ExchangeStatus) -> ExchangeStatus:
        status = ExchangeStatus(exchange.status)
        if status not in allowed:
            raise ReadloomError(
                ErrorKind.INVALID_TRANSITION,
                f"Exchange is {status.value} and cannot be changed"
            )
        return status

    def _transition(self, exchange: Exchange, expected: ExchangeStatus, new: ExchangeStatus, **values) -> None:
        if not self.exchanges.transition(exchange.id, expected, new, **values):
            # Another request moved the exchange first
            raise ReadloomError(ErrorKind.INVALID_TRANSITION, "Exchange status changed concurrently")

    @returns_result
    def request_exchange(
        self,
        requester: CurrentUser,
        book_id: str,
        exchange_point_id: Optional[str] = None
    ) -> Exchange:
        """Ask the owner of a book to hand it over. No points move yet.

        Raises (as Err):
            NotFound: missing book, or unknown/inactive exchange point
            NotAvailable: book unavailable, deleted, or already in an active exchange
            SelfExchange: the requester owns the book
            InsufficientBalance: requester cannot cover the points cost
            Forbidden: the pair completed an exchange within the last 7 days
        """
        book = self.books.get_by_id(book_id)
        if book is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Book not found")
        if book.current_owner_id == requester.id:
            raise ReadloomError(ErrorKind.SELF_EXCHANGE, "You cannot request your own book")
        if not book.is_available or book.is_deleted:
            raise ReadloomError(ErrorKind.NOT_AVAILABLE, "Book is not available for exchange")
        if self.exchanges.get_active_for_book(book_id) is not None:
            raise ReadloomError(ErrorKind.NOT_AVAILABLE, "Book already has a pending exchange")

        balance = self.points.get_balance(requester.id)
        if balance is None:
            raise ReadloomError(ErrorKind.UNAUTHENTICATED, "Authentication required")
        if balance < book.points_cost:
            raise ReadloomError(
                ErrorKind.INSUFFICIENT_BALANCE,
                f"Insufficient points. You need {book.points_cost} points but have {balance}"
            )

        if self.exchanges.completed_between_since(
            requester.id, book.current_owner_id, utcnow() - REPEAT_EXCHANGE_WINDOW
        ):
            raise ReadloomError(
                ErrorKind.FORBIDDEN,
                "You recently completed an exchange with this user; try again later"
            )

        if exchange_point_id:
            point = self.exchange_points.get_by_id(exchange_point_id)
            if point is None or not point.is_active:
                raise ReadloomError(ErrorKind.NOT_FOUND, "Exchange point not found")

        try:
            with self.transaction():
                exchange = self.exchanges.create(Exchange(
                    book_id=book.id,
                    from_user_id=book.current_owner_id,
                    to_user_id=requester.id,
                    exchange_point_id=exchange_point_id or None,
                    status=ExchangeStatus.REQUESTED.value,
                    points_cost=book.points_cost,
                    points_escrowed=0
                ))
        except IntegrityError:
            # A concurrent request took the book between the check above and the insert
            raise ReadloomError(ErrorKind.NOT_AVAILABLE, "Book already has a pending exchange")

        logger.info(f"Exchange {exchange.id} requested by {requester.id} for book {book.id}")
        return exchange

    @returns_result
    def approve_exchange(self, exchange_id: str, actor: CurrentUser) -> Exchange:
        """Owner accepts; the requester's points move into escrow in the same transaction"""
        exchange = self._get_or_404(exchange_id)
        if not actor.can_manage(exchange.from_user_id):
            raise ReadloomError(ErrorKind.FORBIDDEN, "Only the book owner can approve this exchange")
        self._require_status(exchange, ExchangeStatus.REQUESTED)

        book = exchange.book
        if not book.is_available or book.is_deleted or book.current_owner_id != exchange.from_user_id:
            raise ReadloomError(ErrorKind.NOT_AVAILABLE, "Book is no longer available")

        with self.transaction():
            self._transition(
                exchange,
                ExchangeStatus.REQUESTED,
                ExchangeStatus.APPROVED,
                approved_at=utcnow(),
                points_escrowed=exchange.points_cost
            )
            self.points.escrow(exchange.to_user_id, exchange.points_cost)

        logger.info(f"Exchange {exchange_id} approved by {actor.id}")
        return self._get_or_404(exchange_id)

    def _close(self, exchange: Exchange, new: ExchangeStatus) -> Exchange:
        current = self._require_status(exchange, ExchangeStatus.REQUESTED, ExchangeStatus.APPROVED)
        escrowed = exchange.points_escrowed
        with self.transaction():
            self._transition(exchange, current, new, points_escrowed=0)
            if escrowed:
                self.points.release(exchange.to_user_id, escrowed)
        return self._get_or_404(exchange.id)

    @returns_result
    def reject_exchange(self, exchange_id: str, actor: CurrentUser) -> Exchange:
        exchange = self._get_or_404(exchange_id)
        if not actor.can_manage(exchange.from_user_id):
            raise ReadloomError(ErrorKind.FORBIDDEN, "Only the book owner can reject this exchange")
        exchange = self._close(exchange, ExchangeStatus.REJECTED)
        logger.info(f"Exchange {exchange_id} rejected by {actor.id}")
        return exchange

    @returns_result
    def cancel_exchange(self, exchange_id: str, actor: CurrentUser) -> Exchange:
        exchange = self._get_or_404(exchange_id)
        if not actor.can_manage(exchange.to_user_id):
            raise ReadloomError(ErrorKind.FORBIDDEN, "Only the requester can cancel this exchange")
        exchange = self._close(exchange, ExchangeStatus.CANCELLED)
        logger.info(f"Exchange {exchange_id} cancelled by {actor.id}")
        return exchange

    def _notify_completed(self, exchange: Exchange) -> None:
        """Email both parties; the exchange is already committed so failures are only logged"""
        if self.mailer is None:
            return
        book = exchange.book
        point_name = exchange.exchange_point.name if exchange.exchange_point else None
        try:
            self.mailer.send_exchange_completed_to_recipient(
                exchange.to_user.email,
                exchange.to_user.name,
                book.title,
                book.author,
                exchange.points_cost,
                exchange_point_name=point_name
            )
        except ExternalServiceError as e:
            logger.error(f"Failed to send completion email for exchange {exchange.id} to {exchange.to_user_id}: {e}")
        try:
            self.mailer.send_exchange_completed_to_owner(
                exchange.from_user.email,
                exchange.from_user.name,
                book.title,
                book.author,
                exchange.points_cost
            )
        except ExternalServiceError as e:
            logger.error(f"Failed to send completion email for exchange {exchange.id} to {exchange.from_user_id}: {e}")

    @returns_result
    def complete_exchange(self, exchange_id: str, actor: CurrentUser) -> Exchange:
        """Hand the book over.

        One transaction: status becomes COMPLETED, ownership moves to the
        requester, the requester's escrow is settled and the owner is credited.
        Any failure rolls every effect back.
        """
        exchange = self._get_or_404(exchange_id)
        if not (actor.is_admin or actor.id in (exchange.from_user_id, exchange.to_user_id)):
            raise ReadloomError(ErrorKind.FORBIDDEN, "Only the exchange parties can complete it")
        self._require_status(exchange, ExchangeStatus.APPROVED)

        escrowed = exchange.points_escrowed
        with self.transaction():
            self._transition(
                exchange,
                ExchangeStatus.APPROVED,
                ExchangeStatus.COMPLETED,
                completed_at=utcnow(),
                points_escrowed=0
            )
            if not self.exchanges.transfer_book(exchange.book_id, exchange.from_user_id, exchange.to_user_id):
                raise ReadloomError(ErrorKind.INVALID_TRANSITION, "Book owner changed before completion")
            if escrowed:
                self.points.settle(exchange.to_user_id, escrowed)
            self.points.credit(exchange.from_user_id, exchange.points_cost, source_ref=f"exchange:{exchange.id}")

        logger.info(
            f"Exchange {exchange_id} completed: book {exchange.book_id} moved to "
            f"{exchange.to_user_id}, {exchange.points_cost} points to {exchange.from_user_id}"
        )
        exchange = self._get_or_404(exchange_id)
        self._notify_completed(exchange)
        return exchange

    @returns_result
    def list_user_exchanges(self, user: CurrentUser) -> List[Exchange]:
        return self.exchanges.list_for_user(user.id)

    @returns_result
    def list_pending_requests(self, owner: CurrentUser) -> List[Exchange]:
        return self.exchanges.list_pending_for_owner(owner.id)
