# core/clients/payments.py
import json
import logging
from typing import Optional
import requests
import stripe
from core.config import get_settings
from core.errors import ErrorKind, ExternalServiceError, ReadloomError

logger = logging.getLogger(__name__)

# Seconds a webhook signature stays valid
WEBHOOK_TOLERANCE = 300

class PaymentClient:
    """Stripe hosted checkout through the official SDK.

    SDK errors are logged with full detail and re-raised as
    ExternalServiceError carrying a generic message.
    """
    service_name = "Payment provider"

    def __init__(
        self,
        secret_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        stripe_client: Optional[stripe.StripeClient] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None
    ):
        settings = get_settings()
        self.secret_key = secret_key if secret_key is not None else settings.stripe_secret_key
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.stripe_webhook_secret
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self.http = session
        self._stripe = stripe_client

    @property
    def stripe(self) -> stripe.StripeClient:
        if self._stripe is None:
            self._stripe = stripe.StripeClient(
                self.secret_key,
                http_client=stripe.RequestsClient(timeout=self.timeout, session=self.http)
            )
        return self._stripe

    def _call(self, action: str, func, *args, **kwargs) -> dict:
        try:
            result = func(*args, **kwargs)
        except stripe.StripeError as e:
            logger.error(f"{self.service_name} {action} failed: {e}")
            raise ExternalServiceError(self.service_name, f"{self.service_name} request failed")
        return result.to_dict()

    def create_checkout_session(
        self,
        user_id: str,
        email: str,
        points: int,
        amount_cents: int,
        success_url: str,
        cancel_url: str
    ) -> dict:
        """Create a one-off card payment session for a points purchase.

        Returns:
            The session as a plain dict; ``id`` and ``url`` are the fields callers use
        """
        params = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [{
                "quantity": 1,
                "price_data": {
                    "currency": "usd",
                    "unit_amount": amount_cents,
                    "product_data": {
                        "name": f"{points} Points",
                        "description": f"Purchase {points} points for book exchanges",
                    },
                },
            }],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "customer_email": email,
            "metadata": {
                "userId": user_id,
                "userEmail": email,
                "points": str(points),
                "type": "points_purchase",
            },
        }
        session = self._call("checkout create", self.stripe.v1.checkout.sessions.create, params=params)
        logger.info(f"Created checkout session {session.get('id')} for user {user_id} ({points} points)")
        return session

    def retrieve_checkout_session(self, session_id: str) -> dict:
        return self._call(
            f"checkout retrieve {session_id}",
            self.stripe.v1.checkout.sessions.retrieve,
            session_id
        )

    def construct_event(self, payload: bytes, signature_header: str) -> dict:
        """Verify a webhook signature and decode the event.

        Raises:
            ReadloomError: ValidationError when the signature is missing,
                stale or does not match
        """
        if not self.webhook_secret:
            raise ReadloomError(ErrorKind.VALIDATION, "Webhook secret is not configured")
        try:
            stripe.WebhookSignature.verify_header(
                payload, signature_header, self.webhook_secret, tolerance=WEBHOOK_TOLERANCE
            )
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Rejected webhook: {e}")
            raise ReadloomError(ErrorKind.VALIDATION, "Invalid webhook signature")

        try:
            return json.loads(payload)
        except ValueError:
            raise ReadloomError(ErrorKind.VALIDATION, "Webhook payload is not JSON")
