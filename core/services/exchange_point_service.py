# core/services/exchange_point_service.py
import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from core.config import get_settings
from core.context import CurrentUser
from core.errors import ErrorKind, ReadloomError, returns_result
from core.sa.models import ExchangePoint
from core.sa.repositories import ExchangePointRepository
from core.services.base import TransactionalService, require_admin

logger = logging.getLogger(__name__)

def _validate_coordinates(latitude, longitude) -> None:
    try:
        latitude, longitude = float(latitude), float(longitude)
    except (TypeError, ValueError):
        raise ReadloomError(ErrorKind.VALIDATION, "Latitude and longitude must be numbers")
    if not -90 <= latitude <= 90:
        raise ReadloomError(ErrorKind.VALIDATION, "Latitude must be between -90 and 90")
    if not -180 <= longitude <= 180:
        raise ReadloomError(ErrorKind.VALIDATION, "Longitude must be between -180 and 180")

class ExchangePointService(TransactionalService):
    EDITABLE_FIELDS = ("name", "description", "address", "city", "country", "latitude", "longitude", "is_active")

    def __init__(self, session: Session):
        super().__init__(session)
        self.points = ExchangePointRepository(session)

    @returns_result
    def list_active(self) -> List[ExchangePoint]:
        return self.points.list_active()

    @returns_result
    def list_all(self, actor: CurrentUser) -> List[ExchangePoint]:
        require_admin(actor)
        return self.points.list_all()

    @returns_result
    def create(
        self,
        actor: CurrentUser,
        name: str,
        address: str,
        city: str,
        latitude: float,
        longitude: float,
        country: Optional[str] = None,
        description: Optional[str] = None,
        is_active: bool = True
    ) -> ExchangePoint:
        require_admin(actor)
        name, address, city = (name or "").strip(), (address or "").strip(), (city or "").strip()
        if not name or not address or not city:
            raise ReadloomError(ErrorKind.VALIDATION, "Name, address, and city are required")
        _validate_coordinates(latitude, longitude)

        with self.transaction():
            point = self.points.create(ExchangePoint(
                name=name,
                description=(description or "").strip() or None,
                address=address,
                city=city,
                country=(country or "").strip() or get_settings().default_country,
                latitude=float(latitude),
                longitude=float(longitude),
                is_active=bool(is_active)
            ))
        logger.info(f"Exchange point {point.id} ({point.name}) created by {actor.id}")
        return point

    @returns_result
    def update(self, actor: CurrentUser, point_id: str, **changes) -> ExchangePoint:
        """Apply a partial update; unknown fields are ignored"""
        require_admin(actor)
        point = self.points.get_by_id(point_id)
        if point is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Exchange point not found")

        changes = {k: v for k, v in changes.items() if k in self.EDITABLE_FIELDS and v is not None}
        for key in ("name", "address", "city", "country"):
            if key in changes:
                changes[key] = changes[key].strip()
                if not changes[key]:
                    raise ReadloomError(ErrorKind.VALIDATION, f"{key.capitalize()} cannot be blank")
        _validate_coordinates(
            changes.get("latitude", point.latitude),
            changes.get("longitude", point.longitude)
        )

        with self.transaction():
            for key, value in changes.items():
                setattr(point, key, value)
        logger.info(f"Exchange point {point_id} updated by {actor.id}")
        return point

    @returns_result
    def delete(self, actor: CurrentUser, point_id: str) -> dict:
        """Deactivate a point that exchanges reference, delete it otherwise"""
        require_admin(actor)
        point = self.points.get_by_id(point_id)
        if point is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Exchange point not found")

        with self.transaction():
            if self.points.count_exchanges(point_id):
                point.is_active = False
                deleted = False
            else:
                self.points.delete(point)
                deleted = True
        logger.info(f"Exchange point {point_id} {'deleted' if deleted else 'deactivated'} by {actor.id}")
        return {"id": point_id, "deleted": deleted, "deactivated": not deleted}
