# api/routes/auth.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from core.clients import EmailClient
from core.context import CurrentUser
from core.errors import unwrap
from core.sa.database import get_db
from core.services.auth_service import AuthService
from api.deps import SESSION_USER_KEY, get_email_client, require_user
from api.schemas.user import LoginRequest, SignupRequest, User

router = APIRouter(tags=["auth"])

@router.post("/signup", response_model=User, status_code=201)
def signup(
    payload: SignupRequest,
    request: Request,
    db: Session = Depends(get_db),
    mailer: EmailClient = Depends(get_email_client)
):
    """Create an account and start a session for it"""
    user = unwrap(AuthService(db, mailer=mailer).signup(payload.email, payload.password, payload.name))
    request.session[SESSION_USER_KEY] = user.id
    return user

@router.post("/login", response_model=User)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    user = unwrap(AuthService(db).authenticate(payload.email, payload.password))
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    return user

@router.post("/logout")
def logout(request: Request):
    request.session.clear()
    return {"message": "Logged out"}

@router.get("/auth/me", response_model=User)
def me(user: CurrentUser = Depends(require_user)):
    return user
