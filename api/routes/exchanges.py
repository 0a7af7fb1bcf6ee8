# api/routes/exchanges.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.clients import EmailClient, VideoRoomClient
from core.context import CurrentUser
from core.errors import unwrap
from core.sa.database import get_db
from core.services.exchange_service import ExchangeService
from core.services.video_service import VideoService
from api.deps import get_email_client, get_video_client, require_user
from api.schemas.exchange import Exchange, ExchangeCreate, VideoRoom

router = APIRouter(tags=["exchanges"])

@router.post("/exchange", response_model=Exchange, status_code=201)
def request_exchange(
    payload: ExchangeCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user)
):
    return unwrap(ExchangeService(db).request_exchange(user, payload.book_id, payload.exchange_point_id))

@router.get("/exchanges", response_model=List[Exchange])
def list_exchanges(db: Session = Depends(get_db), user: CurrentUser = Depends(require_user)):
    """Exchanges the caller takes part in, as owner or requester"""
    return unwrap(ExchangeService(db).list_user_exchanges(user))

@router.get("/exchanges/pending", response_model=List[Exchange])
def list_pending(db: Session = Depends(get_db), user: CurrentUser = Depends(require_user)):
    """Requests waiting for the caller's approval"""
    return unwrap(ExchangeService(db).list_pending_requests(user))

@router.post("/exchange/{exchange_id}/approve", response_model=Exchange)
def approve_exchange(exchange_id: str, db: Session = Depends(get_db), user: CurrentUser = Depends(require_user)):
    return unwrap(ExchangeService(db).approve_exchange(exchange_id, user))

@router.post("/exchange/{exchange_id}/reject", response_model=Exchange)
def reject_exchange(exchange_id: str, db: Session = Depends(get_db), user: CurrentUser = Depends(require_user)):
    return unwrap(ExchangeService(db).reject_exchange(exchange_id, user))

@router.post("/exchange/{exchange_id}/cancel", response_model=Exchange)
def cancel_exchange(exchange_id: str, db: Session = Depends(get_db), user: CurrentUser = Depends(require_user)):
    return unwrap(ExchangeService(db).cancel_exchange(exchange_id, user))

@router.post("/exchange/{exchange_id}/complete", response_model=Exchange)
def complete_exchange(
    exchange_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user),
    mailer: EmailClient = Depends(get_email_client)
):
    return unwrap(ExchangeService(db, mailer=mailer).complete_exchange(exchange_id, user))

@router.post("/exchange/{exchange_id}/video-room", response_model=VideoRoom)
def create_video_room(
    exchange_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user),
    client: VideoRoomClient = Depends(get_video_client)
):
    return unwrap(VideoService(db, client=client).create_video_room(exchange_id, user))

@router.post("/exchange/{exchange_id}/verify", response_model=Exchange)
def confirm_verification(
    exchange_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user),
    client: VideoRoomClient = Depends(get_video_client)
):
    return unwrap(VideoService(db, client=client).confirm_verification(exchange_id, user))
