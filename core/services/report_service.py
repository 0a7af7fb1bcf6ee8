# core/services/report_service.py
import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from core.context import CurrentUser
from core.errors import ErrorKind, ReadloomError, returns_result
from core.sa.models import ExchangeStatus, Report, ReportReason, ReportStatus
from core.sa.repositories import ExchangeRepository, ReportRepository
from core.services.base import TransactionalService, require_admin

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 2000

def _parse(enum_cls, value: str, label: str):
    try:
        return enum_cls((value or "").upper())
    except ValueError:
        allowed = ", ".join(item.value for item in enum_cls)
        raise ReadloomError(ErrorKind.VALIDATION, f"Invalid {label}. Must be one of: {allowed}")

class ReportService(TransactionalService):
    def __init__(self, session: Session):
        super().__init__(session)
        self.reports = ReportRepository(session)
        self.exchanges = ExchangeRepository(session)

    @returns_result
    def create_report(
        self,
        reporter: CurrentUser,
        exchange_id: str,
        reason: str,
        description: Optional[str] = None
    ) -> Report:
        """File an issue against a completed exchange the reporter took part in"""
        reason = _parse(ReportReason, reason, "reason")
        description = (description or "").strip() or None
        if description and len(description) > MAX_DESCRIPTION_LENGTH:
            raise ReadloomError(
                ErrorKind.VALIDATION,
                f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters"
            )

        exchange = self.exchanges.get_by_id(exchange_id)
        if exchange is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Exchange not found")
        if reporter.id not in (exchange.from_user_id, exchange.to_user_id):
            raise ReadloomError(ErrorKind.FORBIDDEN, "Only exchange parties can report issues")
        if exchange.status != ExchangeStatus.COMPLETED.value:
            raise ReadloomError(ErrorKind.VALIDATION, "Only completed exchanges can be reported")
        if self.reports.exists(exchange_id, reporter.id, reason.value):
            raise ReadloomError(ErrorKind.VALIDATION, "You already reported this issue for this exchange")

        with self.transaction():
            report = self.reports.create(Report(
                exchange_id=exchange.id,
                book_id=exchange.book_id,
                reporter_id=reporter.id,
                reason=reason.value,
                description=description,
                status=ReportStatus.OPEN.value
            ))
        logger.info(f"Report {report.id} ({reason.value}) filed by {reporter.id} on exchange {exchange_id}")
        return report

    @returns_result
    def list_reports(self, actor: CurrentUser, status: Optional[str] = None) -> List[Report]:
        require_admin(actor)
        if status:
            status = _parse(ReportStatus, status, "status").value
        return self.reports.list(status)

    @returns_result
    def list_my_reports(self, user: CurrentUser) -> List[Report]:
        return self.reports.list_by_reporter(user.id)

    @returns_result
    def update_status(self, actor: CurrentUser, report_id: str, status: str) -> Report:
        require_admin(actor)
        status = _parse(ReportStatus, status, "status")
        report = self.reports.get_by_id(report_id)
        if report is None:
            raise ReadloomError(ErrorKind.NOT_FOUND, "Report not found")
        with self.transaction():
            report.status = status.value
        logger.info(f"Report {report_id} moved to {status.value} by {actor.id}")
        return report
