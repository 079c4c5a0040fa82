# app/services/monthly_visit_service.py
"""
Monthly supplier visit counter.
Incremented once per supplier check-in. The increment is a single
INSERT ... ON CONFLICT (supplier_id, month) DO UPDATE statement, so concurrent
check-ins in the same month never lose an update.
"""

from datetime import date, datetime
from typing import List, Optional, Union

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import DependencyFailure
from app.models import MonthlyVisit
from app.utils.logger import get_logger
from app.utils.time_utils import to_naive_utc, utcnow

logger = get_logger(__name__)

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def month_key(value: Union[date, datetime]) -> str:
    """'YYYY-MM' for a date or datetime (aware datetimes are converted to UTC first)."""
    if isinstance(value, datetime):
        value = to_naive_utc(value)
    return value.strftime("%Y-%m")


def _dialect_insert(db: Session):
    dialect = db.get_bind().dialect.name
    insert = _UPSERT_INSERTS.get(dialect)
    if insert is None:
        raise DependencyFailure(f"No atomic upsert available for dialect '{dialect}'")
    return insert


def increment(db: Session, supplier_id: int, visit_date: Optional[datetime] = None) -> MonthlyVisit:
    """Add one visit for (supplier, month of visit_date). Creates the counter on first visit."""
    visit_date = to_naive_utc(visit_date) or utcnow()
    key = month_key(visit_date)
    now = utcnow()

    insert = _dialect_insert(db)
    stmt = insert(MonthlyVisit).values(
        supplier_id=supplier_id,
        month=key,
        year=visit_date.year,
        visit_count=1,
        last_visit_at=visit_date,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["supplier_id", "month"],
        set_={
            "visit_count": MonthlyVisit.visit_count + 1,
            "last_visit_at": stmt.excluded.last_visit_at,
            "updated_at": stmt.excluded.updated_at,
        },
    )
    db.execute(stmt)
    db.commit()

    record = (
        db.query(MonthlyVisit)
        .filter(MonthlyVisit.supplier_id == supplier_id, MonthlyVisit.month == key)
        .one()
    )
    logger.info(f"[Visits] Supplier#{supplier_id} {key}: {record.visit_count} visit(s)")
    return record


def get_count(db: Session, supplier_id: int, month: str) -> int:
    record = (
        db.query(MonthlyVisit)
        .filter(MonthlyVisit.supplier_id == supplier_id, MonthlyVisit.month == month)
        .first()
    )
    return record.visit_count if record else 0


def history(db: Session, supplier_id: int, limit: Optional[int] = None) -> List[MonthlyVisit]:
    """Counters for one supplier, newest month first."""
    limit = limit or settings.MONTHLY_HISTORY_LIMIT
    return (
        db.query(MonthlyVisit)
        .filter(MonthlyVisit.supplier_id == supplier_id)
        .order_by(MonthlyVisit.month.desc())
        .limit(limit)
        .all()
    )


def month_stats(db: Session, month: Optional[str] = None) -> List[MonthlyVisit]:
    """All supplier counters for a month (default: current), busiest first."""
    month = month or month_key(utcnow())
    return (
        db.query(MonthlyVisit)
        .filter(MonthlyVisit.month == month)
        .order_by(MonthlyVisit.visit_count.desc())
        .all()
    )
