# app/services/vehicle_presence_service.py
"""
Vehicle presence linker.
A VehiclePresence row is opened when a check-in names a vehicle and is only ever
re-synchronised from its parent PresenceEntry afterwards, so its entry/exit times
always equal the parent's.
"""

from typing import Optional

from sqlalchemy.orm import Session

from app.models import PresenceEntry, VehiclePresence
from app.services.pagination import Page, paginate
from app.utils.logger import get_logger

logger = get_logger(__name__)


def open_for(
    db: Session,
    entry: PresenceEntry,
    vehicle_id: int,
    recorded_by: int,
    parking_location: Optional[str] = None,
    notes: Optional[str] = None,
) -> VehiclePresence:
    """Create the vehicle log linked to a freshly committed presence entry."""
    vehicle_presence = VehiclePresence(
        vehicle_id=vehicle_id,
        presence_entry_id=entry.id,
        vlog_date=entry.log_date,
        entry_time=entry.entry_time,
        exit_time=entry.exit_time,
        parking_location=parking_location or "",
        notes=(notes or "")[:300],
        recorded_by=recorded_by,
    )
    db.add(vehicle_presence)
    db.commit()
    db.refresh(vehicle_presence)
    logger.info(f"[Vehicles] Vehicle#{vehicle_id} linked to {entry.log_code}")
    return vehicle_presence


def for_entry(db: Session, entry_id: int) -> Optional[VehiclePresence]:
    return db.query(VehiclePresence).filter(VehiclePresence.presence_entry_id == entry_id).first()


def sync_from_entry(db: Session, entry: PresenceEntry, notes: Optional[str] = None) -> Optional[VehiclePresence]:
    """
    Copy the parent's entry/exit times onto its vehicle log. Idempotent, so it can
    be re-run after a failed checkout mirror. Returns None when no vehicle is linked.
    """
    vehicle_presence = for_entry(db, entry.id)
    if vehicle_presence is None:
        return None

    vehicle_presence.entry_time = entry.entry_time
    vehicle_presence.exit_time = entry.exit_time
    if notes:
        vehicle_presence.notes = notes[:300]
    db.commit()
    db.refresh(vehicle_presence)
    return vehicle_presence


def vehicle_duration(vehicle_presence: VehiclePresence) -> Optional[int]:
    """Minutes parked, None while the vehicle is still inside."""
    if vehicle_presence.exit_time is None:
        return None
    minutes = (vehicle_presence.exit_time - vehicle_presence.entry_time).total_seconds() // 60
    return max(0, int(minutes))


def list_logs(db: Session, vehicle_id: Optional[int] = None, page: int = 1, limit: int = None) -> Page:
    q = db.query(VehiclePresence)
    if vehicle_id:
        q = q.filter(VehiclePresence.vehicle_id == vehicle_id)
    return paginate(q.order_by(VehiclePresence.vlog_date.desc(), VehiclePresence.id.desc()), page, limit)
