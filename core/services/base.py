# core/services/base.py
from contextlib import contextmanager
from typing import Iterator
from sqlalchemy.orm import Session
from core.context import CurrentUser
from core.errors import ErrorKind, ReadloomError

class TransactionalService:
    """Services own the transaction; repositories only flush."""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        try:
            yield self.session
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

def require_admin(actor: CurrentUser) -> None:
    if not actor.is_admin:
        raise ReadloomError(ErrorKind.FORBIDDEN, "Admin access required")

def require_positive_int(value, kind: ErrorKind = ErrorKind.INVALID_AMOUNT, label: str = "Amount") -> int:
    # bool is an int subclass and never a valid amount
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ReadloomError(kind, f"{label} must be a positive integer")
    return value
