# api/routes/reports.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from core.context import CurrentUser
from core.errors import unwrap
from core.sa.database import get_db
from core.services.report_service import ReportService
from api.deps import require_admin, require_user
from api.schemas.report import Report, ReportCreate, ReportStatusUpdate

router = APIRouter(prefix="/reports", tags=["reports"])

@router.post("", response_model=Report, status_code=201)
def create_report(
    payload: ReportCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_user)
):
    return unwrap(ReportService(db).create_report(user, payload.exchange_id, payload.reason, payload.description))

@router.get("", response_model=List[Report])
def list_reports(
    status: Optional[str] = Query(None, description="Filter by status (OPEN, UNDER_REVIEW, RESOLVED, REJECTED)"),
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin)
):
    return unwrap(ReportService(db).list_reports(admin, status))

@router.get("/mine", response_model=List[Report])
def list_my_reports(db: Session = Depends(get_db), user: CurrentUser = Depends(require_user)):
    return unwrap(ReportService(db).list_my_reports(user))

@router.put("/{report_id}", response_model=Report)
def update_report(
    report_id: str,
    payload: ReportStatusUpdate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin)
):
    return unwrap(ReportService(db).update_status(admin, report_id, payload.status))
