from typing import List, Optional
from sqlalchemy import desc
from sqlalchemy.orm import Session
from core.sa.models import Report

class ReportRepository:
    def __init__(self, session: Session):
        self.session = session

    def create(self, report: Report) -> Report:
        self.session.add(report)
        self.session.flush()
        return report

    def get_by_id(self, report_id: str) -> Optional[Report]:
        return self.session.query(Report).filter(Report.id == report_id).one_or_none()

    def exists(self, exchange_id: str, reporter_id: str, reason: str) -> bool:
        return (
            self.session.query(Report.id)
            .filter(
                Report.exchange_id == exchange_id,
                Report.reporter_id == reporter_id,
                Report.reason == reason
            )
            .first()
        ) is not None

    def list(self, status: Optional[str] = None) -> List[Report]:
        query = self.session.query(Report)
        if status:
            query = query.filter(Report.status == status)
        return query.order_by(desc(Report.created_at)).all()

    def list_by_reporter(self, reporter_id: str) -> List[Report]:
        return (
            self.session.query(Report)
            .filter(Report.reporter_id == reporter_id)
            .order_by(desc(Report.created_at))
            .all()
        )
