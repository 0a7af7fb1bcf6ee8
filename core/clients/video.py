# core/clients/video.py
import logging
import time
from typing import Optional, Tuple
from core.config import get_settings
from core.errors import ExternalServiceError
from core.utils.http import ServiceClient

logger = logging.getLogger(__name__)

class VideoRoomClient(ServiceClient):
    """100ms management API: one verification room per exchange."""
    service_name = "Video service"
    base_url = "https://api.100ms.live/v2"

    def __init__(self, management_token: Optional[str] = None, template_id: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        settings = get_settings()
        self.management_token = management_token if management_token is not None else settings.hms_management_token
        self.template_id = template_id if template_id is not None else settings.hms_template_id

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.management_token}"}

    def _create_room(self, name: str, description: str):
        return self.request(
            "POST",
            "/rooms",
            expected=(200, 201, 409),
            json={"name": name, "template_id": self.template_id, "description": description}
        )

    def create_room(self, exchange_id: str, book_title: str) -> Tuple[str, str]:
        """Create a room and a join code.

        Returns:
            (room_id, room_code)
        """
        if not self.management_token or not self.template_id:
            logger.error("Video service credentials are not configured")
            raise ExternalServiceError(self.service_name, "Video verification is not configured")

        name = f"exchange-{exchange_id}"
        description = f"Book verification call for: {book_title}"
        response = self._create_room(name, description)
        if response.status_code == 409:
            logger.info(f"Room name {name} already taken, retrying with a unique suffix")
            response = self._create_room(f"{name}-{int(time.time() * 1000)}", description)
            if response.status_code == 409:
                raise ExternalServiceError(self.service_name, "Video service request failed")

        try:
            room_id = response.json()["id"]
        except (ValueError, KeyError, TypeError):
            logger.error(f"Room creation returned no id: {response.text[:500]}")
            raise ExternalServiceError(self.service_name, "Room creation failed")

        codes = self.request_json("POST", f"/room-codes/room/{room_id}")
        try:
            code = codes["data"][0]["code"]
        except (KeyError, IndexError, TypeError):
            logger.error(f"Room code generation returned no code for room {room_id}")
            raise ExternalServiceError(self.service_name, "Failed to get room code")

        logger.info(f"Created verification room {room_id} for exchange {exchange_id}")
        return room_id, code
