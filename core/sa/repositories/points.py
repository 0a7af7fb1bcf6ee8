from typing import Optional
from sqlalchemy import update
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from core.errors import ErrorKind, ReadloomError
from core.sa.models import User, PointsCredit

class PointsRepository:
    """Atomic balance mutations.

    Every change is a single conditional UPDATE so concurrent requests for
    the same user cannot lose updates or drive a balance below zero.
    Nothing here commits; the calling service owns the transaction.
    """

    def __init__(self, session: Session):
        self.session = session

    def _apply(self, statement) -> int:
        return self.session.execute(
            statement.execution_options(synchronize_session="fetch")
        ).rowcount

    def get_balance(self, user_id: str) -> Optional[int]:
        return self.session.query(User.points).filter(User.id == user_id).scalar()

    def credit(self, user_id: str, amount: int, source_ref: Optional[str] = None) -> None:
        """Increment a balance, recording source_ref at most once.

        Raises:
            ReadloomError: DuplicateCredit if source_ref was already applied,
                NotFound if the user does not exist
        """
        if source_ref is not None:
            if self.was_credited(source_ref):
                raise ReadloomError(ErrorKind.DUPLICATE_CREDIT, f"Credit {source_ref} was already applied")
            self.session.add(PointsCredit(user_id=user_id, amount=amount, source_ref=source_ref))
            try:
                self.session.flush()
            except IntegrityError:
                # Lost a race on the unique source_ref; the caller rolls back
                raise ReadloomError(ErrorKind.DUPLICATE_CREDIT, f"Credit {source_ref} was already applied")

        updated = self._apply(
            update(User).where(User.id == user_id).values(points=User.points + amount)
        )
        if not updated:
            raise ReadloomError(ErrorKind.NOT_FOUND, "User not found")

    def debit(self, user_id: str, amount: int) -> None:
        updated = self._apply(
            update(User)
            .where(User.id == user_id, User.points >= amount)
            .values(points=User.points - amount)
        )
        if not updated:
            raise ReadloomError(ErrorKind.INSUFFICIENT_BALANCE, "Insufficient points")

    def escrow(self, user_id: str, amount: int) -> None:
        """Move points from the available balance into escrow."""
        updated = self._apply(
            update(User)
            .where(User.id == user_id, User.points >= amount)
            .values(points=User.points - amount, escrow_points=User.escrow_points + amount)
        )
        if not updated:
            raise ReadloomError(ErrorKind.INSUFFICIENT_BALANCE, "Insufficient points")

    def release(self, user_id: str, amount: int) -> None:
        """Return escrowed points to the available balance."""
        updated = self._apply(
            update(User)
            .where(User.id == user_id, User.escrow_points >= amount)
            .values(points=User.points + amount, escrow_points=User.escrow_points - amount)
        )
        if not updated:
            raise ReadloomError(ErrorKind.INVALID_TRANSITION, "Escrow does not cover the release")

    def settle(self, user_id: str, amount: int) -> None:
        """Consume escrowed points."""
        updated = self._apply(
            update(User)
            .where(User.id == user_id, User.escrow_points >= amount)
            .values(escrow_points=User.escrow_points - amount)
        )
        if not updated:
            raise ReadloomError(ErrorKind.INVALID_TRANSITION, "Escrow does not cover the settlement")

    def was_credited(self, source_ref: str) -> bool:
        return self.session.query(PointsCredit.id).filter(PointsCredit.source_ref == source_ref).first() is not None
