# api/schemas/report.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

class ReportCreate(BaseModel):
    exchange_id: str
    reason: str
    description: Optional[str] = None

class ReportStatusUpdate(BaseModel):
    status: str

class Report(BaseModel):
    id: str
    exchange_id: str
    book_id: str
    reporter_id: str
    reason: str
    description: Optional[str] = None
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
