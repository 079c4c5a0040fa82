# app/services/crud_service.py
"""
Shared create/read/update/delete helpers for the plain registry tables
(workers, suppliers, Leoni personnel, vehicles, schedules).
Natural-key uniqueness is checked up front for a clear message and enforced
again by the unique constraints, whose IntegrityError becomes DuplicateKey.
"""

from typing import Iterable, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, DuplicateKey, NotFoundError
from app.models import Supplier, Vehicle
from app.models.supplier import format_vst_number
from app.services.pagination import Page, paginate
from app.utils.logger import get_logger
from app.utils.text_utils import LIKE_ESCAPE, like_pattern

logger = get_logger(__name__)


def get_or_404(db: Session, model, record_id: int, label: Optional[str] = None):
    record = db.get(model, record_id)
    if record is None:
        raise NotFoundError(f"{label or model.__name__} not found")
    return record


def ensure_unique(db: Session, model, values: dict, unique_fields: Iterable[str], exclude_id: Optional[int] = None):
    for field in unique_fields:
        value = values.get(field)
        if value is None:
            continue
        q = db.query(model.id).filter(getattr(model, field) == value)
        if exclude_id is not None:
            q = q.filter(model.id != exclude_id)
        if q.first():
            raise DuplicateKey(f"{model.__name__} with this {field} already exists")


def _commit(db: Session, record):
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[CRUD] Integrity error on {type(record).__name__}: {e.orig}")
        raise DuplicateKey(f"{type(record).__name__} violates a unique constraint")
    db.refresh(record)
    return record


def create(db: Session, model, values: dict, unique_fields: Iterable[str] = ()):
    ensure_unique(db, model, values, unique_fields)
    record = model(**values)
    db.add(record)
    return _commit(db, record)


def update(db: Session, record, values: dict, unique_fields: Iterable[str] = ()):
    ensure_unique(db, type(record), values, unique_fields, exclude_id=record.id)
    for key, value in values.items():
        setattr(record, key, value)
    return _commit(db, record)


def delete(db: Session, record):
    db.delete(record)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"[CRUD] Cannot delete {type(record).__name__}#{record.id}: {e.orig}")
        raise ConflictError(f"{type(record).__name__} is still referenced by other records")


def search_page(
    db: Session,
    model,
    search: Optional[str],
    columns: Iterable[str],
    order_by,
    page=1,
    limit=None,
    filters: Optional[dict] = None,
) -> Page:
    q = db.query(model)
    if filters:
        q = q.filter_by(**filters)
    if search:
        pattern = like_pattern(search)
        q = q.filter(or_(*[getattr(model, c).ilike(pattern, escape=LIKE_ESCAPE) for c in columns]))
    return paginate(q.order_by(order_by), page, limit)


# ── Owners ───────────────────────────────────────────────────────────────────
def ensure_owner_has_no_vehicles(db: Session, owner):
    owned = (
        db.query(func.count(Vehicle.id))
        .filter(Vehicle.owner_id == owner.id, Vehicle.owner_type == owner.person_type.value)
        .scalar()
    )
    if owned:
        raise ConflictError(f"Cannot delete: {owned} vehicle(s) still registered to this {owner.person_type.value}")


def next_vst_number(db: Session) -> str:
    """Next sequential supplier visitor number (VST000001, VST000002, ...)."""
    last = db.query(func.max(Supplier.num_vst)).scalar()
    number = int(last[3:]) + 1 if last else 1
    return format_vst_number(number)
