# core/clients/mailer.py
import logging
from html import escape
from typing import Optional
from core.config import get_settings
from core.sa.models import SIGNUP_BONUS_POINTS
from core.utils.http import ServiceClient

logger = logging.getLogger(__name__)

WELCOME_HTML = """<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif;">
    <h1>Welcome to Readloom!</h1>
    <p>Hi {name},</p>
    <p>Welcome to Readloom! We're thrilled to have you join our community of book lovers.</p>
    <p><strong>Your starting balance: {points} points.</strong>
       Use them to request books from other members.</p>
  </body>
</html>"""

EXCHANGE_RECIPIENT_HTML = """<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif;">
    <h1>Exchange completed</h1>
    <p>Hi {name},</p>
    <p>Your exchange is complete. Enjoy your new book!</p>
    <p><strong>{title}</strong> by {author}</p>
    <p>Points Used: {points}</p>
    {location}
  </body>
</html>"""

EXCHANGE_OWNER_HTML = """<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif;">
    <h1>Exchange completed</h1>
    <p>Hi {name},</p>
    <p>Your book <strong>{title}</strong> by {author} has found its next reader.</p>
    <p><strong>+{points} points</strong> have been added to your balance.</p>
  </body>
</html>"""

class EmailClient(ServiceClient):
    """Transactional email through the Resend API."""
    service_name = "Email service"
    base_url = "https://api.resend.com"

    def __init__(self, api_key: Optional[str] = None, from_email: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.from_email = from_email or settings.resend_from_email

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_key}"}

    def send(self, to: str, subject: str, html: str) -> None:
        if not self.api_key:
            logger.info(f"RESEND_API_KEY is not set, not sending '{subject}' to {to}")
            return
        self.request_json(
            "POST",
            "/emails",
            json={"from": self.from_email, "to": [to], "subject": subject, "html": html}
        )

    def send_welcome_email(self, email: str, name: Optional[str] = None) -> None:
        self.send(
            email,
            "Welcome to Readloom!",
            WELCOME_HTML.format(name=name or "there", points=SIGNUP_BONUS_POINTS)
        )

    def send_exchange_completed_to_recipient(
        self,
        email: str,
        name: Optional[str],
        title: str,
        author: str,
        points: int,
        exchange_point_name: Optional[str] = None
    ) -> None:
        location = f"<p>Exchange point: {escape(exchange_point_name)}</p>" if exchange_point_name else ""
        self.send(
            email,
            f"Exchange completed: {title}",
            EXCHANGE_RECIPIENT_HTML.format(
                name=escape(name or "there"),
                title=escape(title),
                author=escape(author),
                points=points,
                location=location
            )
        )

    def send_exchange_completed_to_owner(
        self,
        email: str,
        name: Optional[str],
        title: str,
        author: str,
        points: int
    ) -> None:
        self.send(
            email,
            f"Your book was exchanged: {title}",
            EXCHANGE_OWNER_HTML.format(
                name=escape(name or "there"),
                title=escape(title),
                author=escape(author),
                points=points
            )
        )
