# app/routers/logs.py
"""
Presence log endpoints: check-in, check-out, manual entries, queries and
supplier monthly visit counters.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user, require_admin
from app.models import User
from app.schemas.monthly_visit import MonthlyStatsOut, MonthlyVisitOut
from app.schemas.presence import (
    CheckInOut,
    CheckInRequest,
    CheckOutOut,
    CheckOutRequest,
    ManualEntryRequest,
    PresenceListOut,
    PresencePageOut,
    VehiclePresenceOut,
    VehiclePresencePageOut,
)
from app.services import monthly_visit_service, vehicle_presence_service
from app.services.presence_service import PresenceLedger, PresenceQuery
from app.utils.time_utils import utcnow

router = APIRouter()


def _vehicle_log_out(vehicle_presence):
    if vehicle_presence is None:
        return None
    out = VehiclePresenceOut.model_validate(vehicle_presence)
    out.duration = vehicle_presence_service.vehicle_duration(vehicle_presence)
    return out


def _check_in_response(ledger: PresenceLedger, result, message: str):
    return {
        "message": message,
        "data": {
            "log": ledger.enrich([result.entry])[0],
            "vehicle_log": _vehicle_log_out(result.vehicle_presence),
            "monthly_visit_count": result.monthly_visit_count,
        },
    }


@router.post("/logs/checkin", response_model=CheckInOut, status_code=201, summary="Check a person in")
def check_in(body: CheckInRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Opens a presence entry; links the vehicle and counts supplier visits when applicable."""
    ledger = PresenceLedger(db)
    result = ledger.check_in(
        body.person_id,
        body.person_type,
        recorded_by=user.id,
        vehicle_id=body.vehicle_id,
        entry_time=body.entry_time,
        notes=body.notes,
        parking_location=body.parking_location,
    )
    return _check_in_response(ledger, result, "Check-in successful")


@router.post("/logs/checkout", response_model=CheckOutOut, summary="Check a person out")
def check_out(body: CheckOutRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ledger = PresenceLedger(db)
    result = ledger.check_out(body.person_id, body.person_type, exit_time=body.exit_time, notes=body.notes)
    return {
        "message": "Check-out successful",
        "data": ledger.enrich([result.entry])[0],
        "vehicle_log": _vehicle_log_out(result.vehicle_presence),
    }


@router.post("/logs/manual", response_model=CheckInOut, status_code=201, summary="Record a back-dated entry")
def manual_entry(body: ManualEntryRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ledger = PresenceLedger(db)
    result = ledger.record_manual(
        body.person_id,
        body.person_type,
        recorded_by=user.id,
        entry_time=body.entry_time,
        exit_time=body.exit_time,
        status=body.status.value if body.status else None,
        notes=body.notes,
        vehicle_id=body.vehicle_id,
        parking_location=body.parking_location,
        log_date=body.log_date,
    )
    return _check_in_response(ledger, result, "Manual log entry created")


@router.get("/logs", response_model=PresencePageOut, summary="Query presence logs")
def list_logs(
    person_type: Optional[str] = None,
    status: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    sort_by: str = "log_date",
    sort_order: str = "desc",
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ledger = PresenceLedger(db)
    result = ledger.query(PresenceQuery(
        person_type=person_type,
        status=status,
        date_from=date_from,
        date_to=date_to,
        search=search,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    ))
    return {"data": ledger.enrich(result.items), "pagination": result.meta()}


@router.get("/logs/active", response_model=PresenceListOut, summary="Everyone currently on site")
def active_logs(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ledger = PresenceLedger(db)
    entries = ledger.enrich(ledger.list_active())
    return {"data": entries, "count": len(entries)}


@router.get("/logs/stats", summary="Daily presence and parking counters")
def daily_stats(day: Optional[date] = None, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "data": PresenceLedger(db).daily_stats(day)}


@router.get("/logs/vehicles", response_model=VehiclePresencePageOut, summary="Vehicle presence logs")
def vehicle_logs(
    vehicle_id: Optional[int] = None,
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = vehicle_presence_service.list_logs(db, vehicle_id, page, limit)
    return {"data": [_vehicle_log_out(v) for v in result.items], "pagination": result.meta()}


@router.get("/logs/person/{person_type}/{person_id}", response_model=PresencePageOut, summary="History of one person")
def person_history(
    person_type: str,
    person_id: int,
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ledger = PresenceLedger(db)
    result = ledger.person_history(person_id, person_type, page, limit)
    return {"data": ledger.enrich(result.items), "pagination": result.meta()}


@router.post("/logs/{entry_id}/resync-vehicle", summary="Re-apply an entry's times to its vehicle log")
def resync_vehicle(entry_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    vehicle_presence = PresenceLedger(db).resync_vehicle(entry_id)
    return {"success": True, "vehicle_log": _vehicle_log_out(vehicle_presence)}


@router.get("/logs/monthly-visits/{supplier_id}", response_model=list[MonthlyVisitOut], summary="Supplier visit history")
def monthly_visits(
    supplier_id: int,
    limit: Optional[int] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return monthly_visit_service.history(db, supplier_id, limit)


@router.get("/logs/monthly-stats", response_model=MonthlyStatsOut, summary="Supplier visits for one month")
def monthly_stats(month: Optional[str] = None, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    month = month or monthly_visit_service.month_key(utcnow())
    return {"month": month, "supplier_stats": monthly_visit_service.month_stats(db, month)}
