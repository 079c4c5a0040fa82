# app/services/presence_service.py
"""
Presence ledger: check-in / check-out of Workers, Suppliers and Leoni personnel.

How it works:
  - check_in creates a PresenceEntry (status=entry) and commits it first.
    A vehicle log and the supplier's monthly visit counter are then updated as
    best-effort side effects: a failure there is logged, never raised.
  - check_out closes the single open entry of the person, computes the duration
    in whole minutes (clamped at 0, with a warning when exit < entry) and mirrors
    the exit time onto the linked vehicle log.
  - At most one open entry per person is guaranteed by the partial unique index
    on presence_entries, the pre-check below only gives a friendlier error.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import AlreadyCheckedIn, InvalidStatus, NoActiveEntry, NotFoundError, ValidationError
from app.models import PresenceEntry, Vehicle, VehiclePresence
from app.models.enums import OPEN_STATUSES, EntryStatus, PersonType, enum_values
from app.services import monthly_visit_service, owner_resolver, vehicle_presence_service
from app.services.owner_resolver import PersonRef, parse_person_type
from app.services.pagination import Page, paginate
from app.utils.logger import get_logger
from app.utils.text_utils import LIKE_ESCAPE, like_pattern
from app.utils.time_utils import end_of_day, start_of_day, to_naive_utc, utcnow

logger = get_logger(__name__)

NOTES_MAX_LENGTH = 500
NOTES_SEPARATOR = " | "
MANUAL_TAG = "[MANUAL ENTRY]"

SORT_FIELDS = {
    "log_date": PresenceEntry.log_date,
    "entry_time": PresenceEntry.entry_time,
    "exit_time": PresenceEntry.exit_time,
    "duration": PresenceEntry.duration,
    "created_at": PresenceEntry.created_at,
}


# ── Pure helpers ─────────────────────────────────────────────────────────────
def compute_duration(entry_time: Optional[datetime], exit_time: Optional[datetime]) -> int:
    """Whole minutes between entry and exit, floored, never negative. 0 if a time is missing."""
    if entry_time is None or exit_time is None:
        return 0
    return max(0, (exit_time - entry_time) // timedelta(minutes=1))


def format_duration(minutes: Optional[int]) -> str:
    if not minutes:
        return "N/A"
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m" if hours else f"{rest}m"


def append_notes(existing: Optional[str], extra: Optional[str]) -> Optional[str]:
    if not extra:
        return existing
    combined = f"{existing}{NOTES_SEPARATOR}{extra}" if existing else extra
    return combined[:NOTES_MAX_LENGTH]


def _check_notes(notes: Optional[str]) -> str:
    notes = (notes or "").strip()
    if len(notes) > NOTES_MAX_LENGTH:
        raise ValidationError(f"Notes cannot exceed {NOTES_MAX_LENGTH} characters")
    return notes


def _parse_status(value) -> EntryStatus:
    try:
        return EntryStatus(value)
    except ValueError:
        raise InvalidStatus(f"Invalid status '{value}'. Expected one of {enum_values(EntryStatus)}")


# ── Results / filters ────────────────────────────────────────────────────────
@dataclass
class CheckInResult:
    entry: PresenceEntry
    vehicle_presence: Optional[VehiclePresence] = None
    monthly_visit_count: Optional[int] = None


@dataclass
class CheckOutResult:
    entry: PresenceEntry
    vehicle_presence: Optional[VehiclePresence] = None


@dataclass
class PresenceQuery:
    person_type: Optional[str] = None
    status: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search: Optional[str] = None
    page: int = 1
    limit: Optional[int] = None
    sort_by: str = "log_date"
    sort_order: str = "desc"


class PresenceLedger:
    """
    Check-in/check-out engine for one DB session.
    Collaborators are injectable so tests can replace the logger or make a
    side effect fail.
    """

    def __init__(
        self,
        db: Session,
        *,
        logger=None,
        visits=monthly_visit_service,
        vehicles=vehicle_presence_service,
        resolver=owner_resolver,
    ):
        self.db = db
        self.logger = logger if logger is not None else get_logger(__name__)
        self._visits = visits
        self._vehicles = vehicles
        self._resolver = resolver

    # ── Lookups ──────────────────────────────────────────────────────────
    def find_open(self, person_id: int, person_type) -> Optional[PresenceEntry]:
        person_type = parse_person_type(person_type)
        return (
            self.db.query(PresenceEntry)
            .filter(
                PresenceEntry.person_id == person_id,
                PresenceEntry.person_type == person_type.value,
                PresenceEntry.status.in_(OPEN_STATUSES),
                PresenceEntry.exit_time.is_(None),
            )
            .first()
        )

    def get(self, entry_id: int) -> PresenceEntry:
        entry = self.db.get(PresenceEntry, entry_id)
        if entry is None:
            raise NotFoundError("Log entry not found")
        return entry

    def _require_person(self, person_id: int, person_type: PersonType):
        if not self._resolver.exists(self.db, person_id, person_type):
            raise NotFoundError(f"{person_type.value} #{person_id} not found")

    def _require_vehicle(self, vehicle_id: Optional[int]):
        if vehicle_id is not None and self.db.get(Vehicle, vehicle_id) is None:
            raise NotFoundError(f"Vehicle #{vehicle_id} not found")

    # ── Mutations ────────────────────────────────────────────────────────
    def check_in(
        self,
        person_id: int,
        person_type,
        recorded_by: int,
        vehicle_id: Optional[int] = None,
        entry_time: Optional[datetime] = None,
        notes: Optional[str] = None,
        parking_location: Optional[str] = None,
    ) -> CheckInResult:
        person_type = parse_person_type(person_type)
        notes = _check_notes(notes)
        self._require_person(person_id, person_type)
        self._require_vehicle(vehicle_id)

        if self.find_open(person_id, person_type):
            raise AlreadyCheckedIn()

        visit_time = to_naive_utc(entry_time) or utcnow()
        entry = PresenceEntry(
            person_id=person_id,
            person_type=person_type.value,
            status=EntryStatus.ENTRY.value,
            entry_time=visit_time,
            exit_time=None,
            duration=0,
            log_date=visit_time,
            notes=notes,
            recorded_by=recorded_by,
        )
        self._commit_new(entry, person_id, person_type)
        self.logger.info(
            f"[Presence] Check-in {entry.log_code} | {person_type.value}#{person_id} at {visit_time:%Y-%m-%d %H:%M}"
        )

        return CheckInResult(
            entry=entry,
            vehicle_presence=self._link_vehicle(entry, vehicle_id, recorded_by, parking_location),
            monthly_visit_count=self._count_visit(entry, person_type),
        )

    def check_out(
        self,
        person_id: int,
        person_type,
        exit_time: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> CheckOutResult:
        person_type = parse_person_type(person_type)
        notes = _check_notes(notes)

        entry = self.find_open(person_id, person_type)
        if entry is None:
            raise NoActiveEntry()

        entry.exit_time = to_naive_utc(exit_time) or utcnow()
        entry.status = EntryStatus.EXIT.value
        entry.duration = self._duration(entry)
        entry.notes = self._merge_notes(entry, notes)
        self.db.commit()
        self.db.refresh(entry)
        self.logger.info(
            f"[Presence] Check-out {entry.log_code} | {person_type.value}#{person_id} after {format_duration(entry.duration)}"
        )

        vehicle_presence = self._best_effort(
            "vehicle exit mirror", entry, lambda: self._vehicles.sync_from_entry(self.db, entry, notes)
        )
        return CheckOutResult(entry=entry, vehicle_presence=vehicle_presence)

    def record_manual(
        self,
        person_id: int,
        person_type,
        recorded_by: int,
        entry_time: Optional[datetime] = None,
        exit_time: Optional[datetime] = None,
        status: Optional[str] = None,
        notes: Optional[str] = None,
        vehicle_id: Optional[int] = None,
        parking_location: Optional[str] = None,
        log_date: Optional[datetime] = None,
    ) -> CheckInResult:
        """
        Record a back-dated visit. With an exit_time the entry is created closed,
        otherwise it is an open entry and the one-open-entry rule applies.
        Notes are tagged [MANUAL ENTRY] so corrections stand out in listings.
        """
        person_type = parse_person_type(person_type)
        notes = _check_notes(f"{MANUAL_TAG} {_check_notes(notes)}".strip())
        entry_time = to_naive_utc(entry_time)
        exit_time = to_naive_utc(exit_time)
        status = _parse_status(status or (EntryStatus.EXIT if exit_time else EntryStatus.ENTRY))

        if status == EntryStatus.EXIT and exit_time is None:
            raise ValidationError("exit_time is required when status is 'exit'")
        if status != EntryStatus.EXIT:
            if entry_time is None:
                raise ValidationError(f"entry_time is required when status is '{status.value}'")
            if exit_time is not None:
                raise ValidationError(f"exit_time must be empty when status is '{status.value}'")
        # vehicle logs always carry an entry time
        if vehicle_id is not None and entry_time is None:
            raise ValidationError("entry_time is required when a vehicle is recorded")

        self._require_person(person_id, person_type)
        self._require_vehicle(vehicle_id)
        if status != EntryStatus.EXIT and self.find_open(person_id, person_type):
            raise AlreadyCheckedIn()

        entry = PresenceEntry(
            person_id=person_id,
            person_type=person_type.value,
            status=status.value,
            entry_time=entry_time,
            exit_time=exit_time,
            log_date=to_naive_utc(log_date) or entry_time or exit_time,
            notes=notes,
            recorded_by=recorded_by,
        )
        entry.duration = self._duration(entry)
        self._commit_new(entry, person_id, person_type)
        self.logger.info(f"[Presence] Manual entry {entry.log_code} | {person_type.value}#{person_id} status={status.value}")

        return CheckInResult(
            entry=entry,
            vehicle_presence=self._link_vehicle(entry, vehicle_id, recorded_by, parking_location, notes=MANUAL_TAG),
            monthly_visit_count=self._count_visit(entry, person_type),
        )

    def resync_vehicle(self, entry_id: int) -> Optional[VehiclePresence]:
        """Re-run the vehicle mirror for one entry (after a logged mirror failure)."""
        return self._vehicles.sync_from_entry(self.db, self.get(entry_id))

    # ── Internals ────────────────────────────────────────────────────────
    def _commit_new(self, entry: PresenceEntry, person_id: int, person_type: PersonType):
        self.db.add(entry)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if self.find_open(person_id, person_type):
                # lost the race against a concurrent check-in
                raise AlreadyCheckedIn()
            raise
        self.db.refresh(entry)

    def _duration(self, entry: PresenceEntry) -> int:
        if entry.entry_time and entry.exit_time and entry.exit_time < entry.entry_time:
            self.logger.warning(
                f"[Presence] Negative duration for {entry.person_type}#{entry.person_id}: "
                f"entry={entry.entry_time.isoformat()} exit={entry.exit_time.isoformat()}, duration set to 0"
            )
        return compute_duration(entry.entry_time, entry.exit_time)

    def _merge_notes(self, entry: PresenceEntry, extra: Optional[str]) -> Optional[str]:
        merged = append_notes(entry.notes, extra)
        if extra and entry.notes and len(entry.notes) + len(NOTES_SEPARATOR) + len(extra) > NOTES_MAX_LENGTH:
            self.logger.warning(
                f"[Presence] Notes for {entry.log_code} exceed {NOTES_MAX_LENGTH} characters, truncated"
            )
        return merged

    def _best_effort(self, what: str, entry: PresenceEntry, action: Callable):
        try:
            return action()
        except Exception as e:
            self.db.rollback()
            self.logger.error(f"[Presence] {what} failed for entry #{entry.id}: {e}", exc_info=True)
            return None

    def _link_vehicle(self, entry, vehicle_id, recorded_by, parking_location, notes=None) -> Optional[VehiclePresence]:
        if vehicle_id is None:
            return None
        return self._best_effort(
            "vehicle link",
            entry,
            lambda: self._vehicles.open_for(self.db, entry, vehicle_id, recorded_by, parking_location, notes),
        )

    def _count_visit(self, entry: PresenceEntry, person_type: PersonType) -> Optional[int]:
        if person_type != PersonType.SUPPLIER:
            return None
        record = self._best_effort(
            "monthly visit increment",
            entry,
            lambda: self._visits.increment(self.db, entry.person_id, entry.log_date),
        )
        return record.visit_count if record else None

    # ── Queries ──────────────────────────────────────────────────────────
    def list_active(self) -> List[PresenceEntry]:
        """Everyone currently inside, most recent entry first."""
        return (
            self.db.query(PresenceEntry)
            .filter(PresenceEntry.status.in_(OPEN_STATUSES), PresenceEntry.exit_time.is_(None))
            .order_by(PresenceEntry.entry_time.desc(), PresenceEntry.id.desc())
            .all()
        )

    def query(self, filters: PresenceQuery) -> Page:
        q = self.db.query(PresenceEntry)

        if filters.person_type:
            q = q.filter(PresenceEntry.person_type == parse_person_type(filters.person_type).value)
        if filters.status:
            q = q.filter(PresenceEntry.status == _parse_status(filters.status).value)
        if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
            raise ValidationError("date_from must be before date_to")
        if filters.date_from:
            q = q.filter(PresenceEntry.log_date >= start_of_day(filters.date_from))
        if filters.date_to:
            q = q.filter(PresenceEntry.log_date <= end_of_day(filters.date_to))
        if filters.search and filters.search.strip():
            q = q.filter(self._search_clause(filters.search, filters.person_type))

        column = SORT_FIELDS.get(filters.sort_by)
        if column is None:
            raise ValidationError(f"Cannot sort by '{filters.sort_by}'. Expected one of {sorted(SORT_FIELDS)}")
        if filters.sort_order == "asc":
            q = q.order_by(column.asc(), PresenceEntry.id.asc())
        else:
            q = q.order_by(column.desc(), PresenceEntry.id.desc())

        return paginate(q, filters.page, filters.limit)

    def _search_clause(self, text: str, person_type=None):
        refs = self._resolver.search(self.db, text, person_type)
        ids_by_type = {}
        for ref in refs:
            ids_by_type.setdefault(ref.person_type.value, set()).add(ref.person_id)

        clauses = [PresenceEntry.log_code.ilike(like_pattern(text), escape=LIKE_ESCAPE)]
        for kind, ids in ids_by_type.items():
            clauses.append(and_(PresenceEntry.person_type == kind, PresenceEntry.person_id.in_(ids)))
        return or_(*clauses)

    def person_history(self, person_id: int, person_type=None, page: int = 1, limit: int = None) -> Page:
        q = self.db.query(PresenceEntry).filter(PresenceEntry.person_id == person_id)
        if person_type:
            q = q.filter(PresenceEntry.person_type == parse_person_type(person_type).value)
        return paginate(q.order_by(PresenceEntry.log_date.desc(), PresenceEntry.id.desc()), page, limit)

    def daily_stats(self, day: Optional[date] = None) -> dict:
        day = day or utcnow().date()
        start, end = start_of_day(day), end_of_day(day)
        on_day = PresenceEntry.log_date.between(start, end)

        per_kind = dict(
            self.db.query(PresenceEntry.person_type, func.count(PresenceEntry.id))
            .filter(on_day)
            .group_by(PresenceEntry.person_type)
            .all()
        )
        vehicles_today = self.db.query(VehiclePresence).filter(VehiclePresence.vlog_date.between(start, end))

        return {
            "date": day.isoformat(),
            "today": {
                "total_entries": self.db.query(PresenceEntry).filter(on_day).count(),
                "total_exits": self.db.query(PresenceEntry).filter(PresenceEntry.exit_time.between(start, end)).count(),
                "currently_inside": len(self.list_active()),
                "supplier_entries": per_kind.get(PersonType.SUPPLIER.value, 0),
                "worker_entries": per_kind.get(PersonType.WORKER.value, 0),
                "leoni_personnel_entries": per_kind.get(PersonType.LEONI_PERSONNEL.value, 0),
            },
            "vehicles": {
                "total_vehicles_today": vehicles_today.count(),
                "currently_parked": vehicles_today.filter(VehiclePresence.exit_time.is_(None)).count(),
            },
        }

    # ── Read-side enrichment ─────────────────────────────────────────────
    def enrich(self, entries: List[PresenceEntry]) -> List[dict]:
        """Attach owner, recorder, vehicle and monthly visit info for API output."""
        owners = self._resolver.resolve_many(self.db, [(e.person_id, e.person_type) for e in entries])
        return [self._enrich_one(entry, owners) for entry in entries]

    def _enrich_one(self, entry: PresenceEntry, owners: dict) -> dict:
        person_type = parse_person_type(entry.person_type)
        owner = owners.get(PersonRef(entry.person_id, person_type))
        recorder = entry.recorder

        vehicle = entry.vehicle_presence.vehicle if entry.vehicle_presence else None
        if vehicle is None:
            vehicle = (
                self.db.query(Vehicle)
                .filter(Vehicle.owner_id == entry.person_id, Vehicle.owner_type == person_type.value)
                .first()
            )

        monthly_visit_count = None
        if person_type == PersonType.SUPPLIER and entry.log_date:
            monthly_visit_count = self._visits.get_count(
                self.db, entry.person_id, monthly_visit_service.month_key(entry.log_date)
            )

        return {
            "id": entry.id,
            "log_code": entry.log_code,
            "person_id": entry.person_id,
            "person_type": entry.person_type,
            "status": entry.status,
            "entry_time": entry.entry_time,
            "exit_time": entry.exit_time,
            "duration": entry.duration,
            "formatted_duration": format_duration(entry.duration),
            "log_date": entry.log_date,
            "notes": entry.notes,
            "vehicle_link_id": entry.vehicle_link_id,
            "recorded_by": entry.recorded_by,
            "recorded_by_info": {"id": recorder.id, "name": recorder.full_name, "email": recorder.email}
            if recorder else None,
            "person": owner.to_dict() if owner else None,
            "vehicle_info": {
                "id": vehicle.id,
                "lic_plate_string": vehicle.lic_plate_string,
                "mark": vehicle.mark,
                "model": vehicle.model,
                "color": vehicle.color,
            }
            if vehicle else None,
            "monthly_visit_count": monthly_visit_count,
            "created_at": entry.created_at,
        }
