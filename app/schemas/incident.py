# app/schemas/incident.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from app.models.enums import IncidentPriority
from app.schemas.common import PaginationOut


class IncidentReport(BaseModel):
    type: str
    description: str = Field(..., min_length=1)
    date: datetime
    priority: Optional[IncidentPriority] = None


class IncidentStatusUpdate(BaseModel):
    status: str                       # validated by incident_service (InvalidStatus)
    admin_notes: Optional[str] = None
    priority: Optional[IncidentPriority] = None


class IncidentOut(BaseModel):
    id: int
    type: str
    description: str
    date: datetime
    status: str
    priority: str
    reported_by: int
    approved_by: Optional[int]
    approved_at: Optional[datetime]
    resolved_at: Optional[datetime]
    admin_notes: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class IncidentPageOut(BaseModel):
    data: List[IncidentOut]
    pagination: PaginationOut
