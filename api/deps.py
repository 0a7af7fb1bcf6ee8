# api/deps.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from core.clients import EmailClient, GeminiClient, ModerationClient, PaymentClient, VideoRoomClient
from core.context import CurrentUser, RequestContext
from core.sa.database import get_db
from core.services.auth_service import AuthService

SESSION_USER_KEY = "user_id"

def get_context(request: Request, db: Session = Depends(get_db)) -> RequestContext:
    """Resolve the session cookie to a fresh identity for this request"""
    user = AuthService(db).resolve(request.session.get(SESSION_USER_KEY))
    if user is None and SESSION_USER_KEY in request.session:
        # The account behind the cookie is gone
        request.session.clear()
    return RequestContext(user=user)

def require_user(context: RequestContext = Depends(get_context)) -> CurrentUser:
    return context.require_user()

def require_admin(context: RequestContext = Depends(get_context)) -> CurrentUser:
    return context.require_admin()

# External clients; tests replace these through app.dependency_overrides
def get_email_client() -> EmailClient:
    return EmailClient()

def get_moderation_client() -> ModerationClient:
    return ModerationClient()

def get_payment_client() -> PaymentClient:
    return PaymentClient()

def get_video_client() -> VideoRoomClient:
    return VideoRoomClient()

def get_gemini_client() -> GeminiClient:
    return GeminiClient()
