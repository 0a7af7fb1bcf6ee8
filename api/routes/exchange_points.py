# api/routes/exchange_points.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.context import CurrentUser
from core.errors import unwrap
from core.sa.database import get_db
from core.services.exchange_point_service import ExchangePointService
from api.deps import require_admin
from api.schemas.exchange import ExchangePoint, ExchangePointCreate, ExchangePointDeleted, ExchangePointUpdate

router = APIRouter(prefix="/exchange-points", tags=["exchange-points"])

@router.get("", response_model=List[ExchangePoint])
def list_active(db: Session = Depends(get_db)):
    """Active exchange points, sorted by name"""
    return unwrap(ExchangePointService(db).list_active())

@router.get("/all", response_model=List[ExchangePoint])
def list_all(db: Session = Depends(get_db), admin: CurrentUser = Depends(require_admin)):
    return unwrap(ExchangePointService(db).list_all(admin))

@router.post("", response_model=ExchangePoint, status_code=201)
def create_point(
    payload: ExchangePointCreate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin)
):
    return unwrap(ExchangePointService(db).create(admin, **payload.model_dump()))

@router.put("/{point_id}", response_model=ExchangePoint)
def update_point(
    point_id: str,
    payload: ExchangePointUpdate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin)
):
    return unwrap(ExchangePointService(db).update(admin, point_id, **payload.model_dump(exclude_unset=True)))

@router.delete("/{point_id}", response_model=ExchangePointDeleted)
def delete_point(point_id: str, db: Session = Depends(get_db), admin: CurrentUser = Depends(require_admin)):
    """Delete an exchange point, or deactivate it if exchanges reference it"""
    return unwrap(ExchangePointService(db).delete(admin, point_id))
