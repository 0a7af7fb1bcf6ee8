# core/services/points_service.py
import logging
from sqlalchemy.orm import Session
from core.errors import ErrorKind, ReadloomError, returns_result
from core.sa.repositories import PointsRepository, UserRepository
from core.services.base import TransactionalService, require_positive_int

logger = logging.getLogger(__name__)

class PointsService(TransactionalService):
    """The points ledger: balances only move through atomic conditional updates."""

    def __init__(self, session: Session):
        super().__init__(session)
        self.points = PointsRepository(session)
        self.users = UserRepository(session)

    def _balance_or_404(self, user_id: str) -> int:
        balance = self.points.get_balance(user_id)
        if balance is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "User not found")
        return balance

    def apply_credit(self, user_id: str, amount: int, source_ref: str) -> int:
        """Credit once per source_ref and return the new balance.

        Raises:
            ReadloomError: InvalidAmount, NotFound or DuplicateCredit
        """
        require_positive_int(amount)
        self._balance_or_404(user_id)
        with self.transaction():
            self.points.credit(user_id, amount, source_ref)
        logger.info(f"Credited {amount} points to user {user_id} ({source_ref})")
        return self._balance_or_404(user_id)

    @returns_result
    def credit_points(self, user_id: str, amount: int, source_ref: str) -> int:
        return self.apply_credit(user_id, amount, source_ref)

    @returns_result
    def debit_points(self, user_id: str, amount: int) -> int:
        require_positive_int(amount)
        self._balance_or_404(user_id)
        with self.transaction():
            self.points.debit(user_id, amount)
        logger.info(f"Debited {amount} points from user {user_id}")
        return self._balance_or_404(user_id)

    @returns_result
    def get_balance(self, user_id: str) -> dict:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "User not found")
        return {"points": user.points, "escrow_points": user.escrow_points}
