# core/services/video_service.py
import logging
from typing import Optional
from sqlalchemy.orm import Session
from core.clients import VideoRoomClient
from core.context import CurrentUser
from core.errors import ErrorKind, ReadloomError, returns_result
from core.sa.models import Exchange, ExchangeStatus, utcnow
from core.sa.repositories import ExchangeRepository
from core.services.base import TransactionalService

logger = logging.getLogger(__name__)

VIDEO_STATUSES = (ExchangeStatus.APPROVED.value, ExchangeStatus.COMPLETED.value)

class VideoService(TransactionalService):
    def __init__(self, session: Session, client: Optional[VideoRoomClient] = None):
        super().__init__(session)
        self.client = client or VideoRoomClient()
        self.exchanges = ExchangeRepository(session)

    def _get_for_party(self, exchange_id: str, actor: CurrentUser, allow_admin: bool) -> Exchange:
        exchange = self.exchanges.get_by_id(exchange_id)
        if exchange is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Exchange not found")
        is_party = actor.id in (exchange.from_user_id, exchange.to_user_id)
        if not (is_party or (allow_admin and actor.is_admin)):
            raise ReadloomError(ErrorKind.FORBIDDEN, "Only exchange parties can join verification")
        return exchange

    @returns_result
    def create_video_room(self, exchange_id: str, actor: CurrentUser) -> dict:
        exchange = self._get_for_party(exchange_id, actor, allow_admin=True)
        if exchange.status not in VIDEO_STATUSES:
            raise ReadloomError(
                ErrorKind.INVALID_TRANSITION,
                "Video verification is only available for approved or completed exchanges"
            )

        room_id, room_code = self.client.create_room(exchange.id, exchange.book.title)
        with self.transaction():
            self.exchanges.set_fields(exchange.id, video_room_id=room_id)
        logger.info(f"Video room {room_id} created for exchange {exchange_id}")
        return {"room_id": room_id, "room_code": room_code}

    @returns_result
    def confirm_verification(self, exchange_id: str, actor: CurrentUser) -> Exchange:
        exchange = self._get_for_party(exchange_id, actor, allow_admin=False)
        if not exchange.video_room_id:
            raise ReadloomError(ErrorKind.INVALID_TRANSITION, "No video room exists for this exchange")
        if exchange.verified_at is None:
            with self.transaction():
                self.exchanges.set_fields(exchange.id, verified_at=utcnow())
            logger.info(f"Exchange {exchange_id} verified by {actor.id}")
        return self.exchanges.get_by_id(exchange_id)
