# app/services/incident_service.py
"""
Incident reporting (SOS operators) and review (admins).
Transitions only move forward:
  pending  -> approved | rejected | resolved
  approved -> resolved
  rejected -> resolved
approved_by/approved_at and resolved_at are set on the matching transition and never reset.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.errors import InvalidStatus, InvalidTransition, NotFoundError, ValidationError
from app.models import Incident, User
from app.models.enums import INCIDENT_TYPES, IncidentPriority, IncidentStatus, enum_values
from app.services.pagination import Page, paginate
from app.utils.logger import get_logger
from app.utils.text_utils import LIKE_ESCAPE, like_pattern
from app.utils.time_utils import to_naive_utc, utcnow

logger = get_logger(__name__)

ALLOWED_TRANSITIONS = {
    IncidentStatus.PENDING: {IncidentStatus.APPROVED, IncidentStatus.REJECTED, IncidentStatus.RESOLVED},
    IncidentStatus.APPROVED: {IncidentStatus.RESOLVED},
    IncidentStatus.REJECTED: {IncidentStatus.RESOLVED},
    IncidentStatus.RESOLVED: set(),
}


def parse_status(value) -> IncidentStatus:
    try:
        return IncidentStatus(value)
    except ValueError:
        raise InvalidStatus(f"Invalid status '{value}'. Expected one of {enum_values(IncidentStatus)}")


def parse_priority(value) -> IncidentPriority:
    try:
        return IncidentPriority(value)
    except ValueError:
        raise ValidationError(f"Invalid priority '{value}'. Expected one of {enum_values(IncidentPriority)}")


def get(db: Session, incident_id: int, reported_by: Optional[int] = None) -> Incident:
    q = db.query(Incident).filter(Incident.id == incident_id)
    if reported_by is not None:
        q = q.filter(Incident.reported_by == reported_by)
    incident = q.first()
    if incident is None:
        raise NotFoundError("Incident not found")
    return incident


def report(
    db: Session,
    reporter: User,
    type: str,
    description: str,
    date: datetime,
    priority: Optional[str] = None,
) -> Incident:
    if type not in INCIDENT_TYPES:
        raise ValidationError("Invalid incident type")
    if not description or not description.strip():
        raise ValidationError("Description is required")
    date = to_naive_utc(date)
    if date > utcnow():
        raise ValidationError("Incident date cannot be in the future")

    incident = Incident(
        type=type,
        description=description.strip(),
        date=date,
        status=IncidentStatus.PENDING.value,
        priority=parse_priority(priority or IncidentPriority.MEDIUM).value,
        reported_by=reporter.id,
    )
    db.add(incident)
    db.commit()
    db.refresh(incident)
    logger.info(f"[Incidents] #{incident.id} '{type}' reported by {reporter.email}")
    return incident


def transition(
    db: Session,
    admin: User,
    incident_id: int,
    status,
    admin_notes: Optional[str] = None,
    priority: Optional[str] = None,
) -> Incident:
    target = parse_status(status)
    incident = get(db, incident_id)
    current = IncidentStatus(incident.status)

    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(f"Cannot move incident from '{current.value}' to '{target.value}'")

    now = utcnow()
    incident.status = target.value
    if target in (IncidentStatus.APPROVED, IncidentStatus.REJECTED):
        incident.approved_by = admin.id
        incident.approved_at = now
    if target == IncidentStatus.RESOLVED:
        incident.resolved_at = now
    if admin_notes:
        incident.admin_notes = admin_notes
    if priority:
        incident.priority = parse_priority(priority).value

    db.commit()
    db.refresh(incident)
    logger.info(f"[Incidents] #{incident.id} {current.value} -> {target.value} by {admin.email}")
    return incident


def _filtered(db: Session, status=None, type=None, priority=None, search=None):
    q = db.query(Incident)
    if status:
        q = q.filter(Incident.status == parse_status(status).value)
    if type:
        q = q.filter(Incident.type == type)
    if priority:
        q = q.filter(Incident.priority == parse_priority(priority).value)
    if search:
        q = q.filter(Incident.description.ilike(like_pattern(search), escape=LIKE_ESCAPE))
    return q


def list_for_reporter(db: Session, reporter: User, page=1, limit=None, status=None, type=None, search=None) -> Page:
    q = _filtered(db, status=status, type=type, search=search).filter(Incident.reported_by == reporter.id)
    return paginate(q.order_by(Incident.created_at.desc(), Incident.id.desc()), page, limit)


def list_all(db: Session, page=1, limit=None, status=None, type=None, priority=None, search=None) -> Page:
    q = _filtered(db, status=status, type=type, priority=priority, search=search)
    return paginate(q.order_by(Incident.created_at.desc(), Incident.id.desc()), page, limit)


def stats(db: Session) -> dict:
    by_status = dict(db.query(Incident.status, func.count(Incident.id)).group_by(Incident.status).all())
    by_type = dict(db.query(Incident.type, func.count(Incident.id)).group_by(Incident.type).all())
    by_priority = dict(db.query(Incident.priority, func.count(Incident.id)).group_by(Incident.priority).all())

    overall = {status: by_status.get(status, 0) for status in enum_values(IncidentStatus)}
    overall["total"] = sum(by_status.values())
    return {"overall": overall, "by_type": by_type, "by_priority": by_priority}
