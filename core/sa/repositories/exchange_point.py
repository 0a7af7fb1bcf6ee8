from typing import List, Optional
from sqlalchemy import desc, func
from sqlalchemy.orm import Session
from core.sa.models import Exchange, ExchangePoint

class ExchangePointRepository:
    def __init__(self, session: Session):
        self.session = session

    def list_active(self) -> List[ExchangePoint]:
        return (
            self.session.query(ExchangePoint)
            .filter(ExchangePoint.is_active.is_(True))
            .order_by(ExchangePoint.name)
            .all()
        )

    def list_all(self) -> List[ExchangePoint]:
        return self.session.query(ExchangePoint).order_by(desc(ExchangePoint.created_at)).all()

    def get_by_id(self, point_id: str) -> Optional[ExchangePoint]:
        return self.session.query(ExchangePoint).filter(ExchangePoint.id == point_id).one_or_none()

    def create(self, point: ExchangePoint) -> ExchangePoint:
        self.session.add(point)
        self.session.flush()
        return point

    def count_exchanges(self, point_id: str) -> int:
        return (
            self.session.query(func.count(Exchange.id))
            .filter(Exchange.exchange_point_id == point_id)
            .scalar() or 0
        )

    def delete(self, point: ExchangePoint) -> None:
        self.session.delete(point)
        self.session.flush()
