# app/routers/incidents.py
"""Incident reporting (SOS operators) and review (admins)."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user, require_admin, require_sos
from app.models import User
from app.models.enums import INCIDENT_TYPES, Role
from app.schemas.incident import IncidentOut, IncidentPageOut, IncidentReport, IncidentStatusUpdate
from app.services import incident_service

router = APIRouter()


@router.get("/incidents/types", response_model=list[str], summary="Allowed incident types")
def incident_types():
    return list(INCIDENT_TYPES)


@router.post("/incidents", response_model=IncidentOut, status_code=201, summary="Report an incident")
def report_incident(body: IncidentReport, user: User = Depends(require_sos), db: Session = Depends(get_db)):
    return incident_service.report(
        db, user, body.type, body.description, body.date,
        priority=body.priority.value if body.priority else None,
    )


@router.get("/incidents/mine", response_model=IncidentPageOut, summary="Incidents reported by the caller")
def my_incidents(
    status: Optional[str] = None,
    type: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    user: User = Depends(require_sos),
    db: Session = Depends(get_db),
):
    result = incident_service.list_for_reporter(db, user, page, limit, status=status, type=type, search=search)
    return {"data": result.items, "pagination": result.meta()}


@router.get("/incidents", response_model=IncidentPageOut, summary="All incidents")
def all_incidents(
    status: Optional[str] = None,
    type: Optional[str] = None,
    priority: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = incident_service.list_all(db, page, limit, status=status, type=type, priority=priority, search=search)
    return {"data": result.items, "pagination": result.meta()}


@router.get("/incidents/stats", summary="Incident counters")
def incident_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return {"success": True, "data": incident_service.stats(db)}


@router.get("/incidents/{incident_id}", response_model=IncidentOut, summary="Get one incident")
def get_incident(incident_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """SOS operators only see their own reports."""
    reported_by = None if user.role == Role.ADMIN.value else user.id
    return incident_service.get(db, incident_id, reported_by=reported_by)


@router.put("/incidents/{incident_id}/status", response_model=IncidentOut, summary="Move an incident forward")
def update_status(
    incident_id: int,
    body: IncidentStatusUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return incident_service.transition(
        db, admin, incident_id, body.status,
        admin_notes=body.admin_notes,
        priority=body.priority.value if body.priority else None,
    )
