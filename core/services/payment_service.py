# core/services/payment_service.py
import logging
from typing import Optional
from sqlalchemy.orm import Session
from core.clients import PaymentClient
from core.config import get_settings
from core.context import CurrentUser
from core.errors import ErrorKind, ReadloomError, returns_result
from core.sa.repositories import PointsRepository
from core.services.base import TransactionalService, require_positive_int

logger = logging.getLogger(__name__)

POINTS_PER_DOLLAR = 10
MIN_POINTS = 10
PURCHASE_TYPE = "points_purchase"

def points_to_cents(points: int) -> int:
    return points * 100 // POINTS_PER_DOLLAR

def credit_ref(session_id: str) -> str:
    return f"stripe:{session_id}"

class PaymentService(TransactionalService):
    """Points purchases through hosted checkout.

    Points are only credited from the provider's own view of a session,
    either fetched server-side or delivered by a signed webhook, and at
    most once per session id.
    """

    def __init__(self, session: Session, client: Optional[PaymentClient] = None):
        super().__init__(session)
        self.client = client or PaymentClient()
        self.points = PointsRepository(session)

    @returns_result
    def create_checkout(self, user: CurrentUser, points: int) -> dict:
        require_positive_int(points, label="Points")
        if points < MIN_POINTS:
            raise ReadloomError(ErrorKind.INVALID_AMOUNT, f"Minimum purchase is {MIN_POINTS} points")

        base_url = get_settings().app_base_url.rstrip("/")
        session = self.client.create_checkout_session(
            user_id=user.id,
            email=user.email,
            points=points,
            amount_cents=points_to_cents(points),
            success_url=f"{base_url}/payments/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base_url}/points?canceled=true"
        )
        return {"session_id": session.get("id"), "url": session.get("url")}

    def _credit_session(self, session: dict) -> bool:
        """Credit a paid points purchase once.

        Returns:
            True if points were credited, False if the session was already applied
        """
        metadata = session.get("metadata") or {}
        if session.get("payment_status") != "paid":
            raise ReadloomError(ErrorKind.VALIDATION, "Payment not completed")
        if metadata.get("type") != PURCHASE_TYPE:
            raise ReadloomError(ErrorKind.VALIDATION, "Invalid payment type")
        try:
            points = int(metadata.get("points", ""))
        except ValueError:
            raise ReadloomError(ErrorKind.VALIDATION, "Invalid payment metadata")
        require_positive_int(points)
        if self.points.get_balance(metadata.get("userId")) is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "User not found")

        source_ref = credit_ref(session["id"])
        try:
            with self.transaction():
                self.points.credit(metadata.get("userId"), points, source_ref=source_ref)
        except ReadloomError as e:
            if e.kind is ErrorKind.DUPLICATE_CREDIT:
                logger.info(f"Checkout session {session['id']} was already credited")
                return False
            raise
        logger.info(f"Credited {points} points to user {metadata.get('userId')} from session {session['id']}")
        return True

    @returns_result
    def confirm_checkout(self, user: CurrentUser, session_id: str) -> dict:
        """Confirm a checkout the caller was redirected back from"""
        if not session_id:
            raise ReadloomError(ErrorKind.VALIDATION, "Missing session_id")
        session = self.client.retrieve_checkout_session(session_id)
        if (session.get("metadata") or {}).get("userId") != user.id:
            raise ReadloomError(ErrorKind.FORBIDDEN, "Payment session belongs to another user")

        credited = self._credit_session(session)
        return {
            "credited": credited,
            "points_added": int(session["metadata"]["points"]) if credited else 0,
            "balance": self.points.get_balance(user.id),
        }

    @returns_result
    def handle_webhook(self, payload: bytes, signature_header: str) -> dict:
        event = self.client.construct_event(payload, signature_header)
        event_type = event.get("type")
        if event_type != "checkout.session.completed":
            logger.debug(f"Ignoring webhook event {event_type}")
            return {"received": True, "credited": False}

        session = (event.get("data") or {}).get("object") or {}
        if not session.get("id"):
            raise ReadloomError(ErrorKind.VALIDATION, "Webhook event has no session")
        return {"received": True, "credited": self._credit_session(session)}
