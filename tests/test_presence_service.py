# tests/test_presence_service.py
"""Tests for the presence ledger: check-in/check-out, vehicle links, supplier visit counting."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock, patch
from datetime import date, datetime, timedelta, timezone
from app.errors import AlreadyCheckedIn, InvalidStatus, NoActiveEntry, NotFoundError, ValidationError
from app.models import PresenceEntry, VehiclePresence
from app.models.enums import EntryStatus, PersonType
from app.services import monthly_visit_service
from app.services.presence_service import (
    PresenceLedger,
    PresenceQuery,
    append_notes,
    compute_duration,
    format_duration,
)

T0 = datetime(2024, 6, 1, 8, 0)


def open_entries(db, person):
    return (
        db.query(PresenceEntry)
        .filter(
            PresenceEntry.person_id == person.id,
            PresenceEntry.person_type == person.person_type.value,
            PresenceEntry.exit_time.is_(None),
        )
        .count()
    )


class TestDurationHelpers:
    def test_whole_minutes_floored(self):
        assert compute_duration(T0, T0 + timedelta(minutes=90, seconds=59)) == 90

    def test_negative_clamped_to_zero(self):
        assert compute_duration(T0, T0 - timedelta(hours=2)) == 0

    def test_missing_time_is_zero(self):
        assert compute_duration(T0, None) == 0
        assert compute_duration(None, T0) == 0

    def test_format(self):
        assert format_duration(0) == "N/A"
        assert format_duration(None) == "N/A"
        assert format_duration(45) == "45m"
        assert format_duration(150) == "2h 30m"

    def test_append_notes(self):
        assert append_notes(None, "late") == "late"
        assert append_notes("gate 2", "late") == "gate 2 | late"
        assert append_notes("gate 2", None) == "gate 2"
        assert len(append_notes("x" * 490, "y" * 50)) == 500


class TestCheckIn:
    def test_check_in_opens_entry(self, db, admin, make_worker):
        worker = make_worker()
        result = PresenceLedger(db).check_in(worker.id, "Worker", recorded_by=admin.id, entry_time=T0)

        entry = result.entry
        assert entry.status == EntryStatus.ENTRY.value
        assert entry.entry_time == T0
        assert entry.exit_time is None
        assert entry.duration == 0
        assert entry.log_code.startswith("LOG")
        assert result.monthly_visit_count is None
        assert result.vehicle_presence is None

    def test_second_check_in_rejected(self, db, admin, make_worker):
        worker = make_worker()
        ledger = PresenceLedger(db)
        ledger.check_in(worker.id, PersonType.WORKER, recorded_by=admin.id, entry_time=T0)

        active = ledger.list_active()
        assert [(e.person_id, e.person_type) for e in active] == [(worker.id, "Worker")]

        with pytest.raises(AlreadyCheckedIn):
            ledger.check_in(worker.id, PersonType.WORKER, recorded_by=admin.id)
        assert open_entries(db, worker) == 1

    def test_concurrent_duplicate_rejected_by_store(self, db, admin, make_worker):
        worker = make_worker()
        ledger = PresenceLedger(db)
        first = ledger.check_in(worker.id, "Worker", recorded_by=admin.id, entry_time=T0).entry

        # pre-check misses the open entry, as if both requests read before either wrote
        with patch.object(ledger, "find_open", side_effect=[None, first]):
            with pytest.raises(AlreadyCheckedIn):
                ledger.check_in(worker.id, "Worker", recorded_by=admin.id)
        assert open_entries(db, worker) == 1

    def test_same_id_different_kind_is_a_different_person(self, db, admin, make_worker, make_personnel):
        worker = make_worker()
        staff = make_personnel()
        ledger = PresenceLedger(db)
        ledger.check_in(worker.id, "Worker", recorded_by=admin.id)
        ledger.check_in(staff.id, "LeoniPersonnel", recorded_by=admin.id)
        assert len(ledger.list_active()) == 2

    def test_aware_entry_time_stored_as_utc(self, db, admin, make_worker):
        worker = make_worker()
        aware = datetime(2024, 6, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        entry = PresenceLedger(db).check_in(worker.id, "Worker", recorded_by=admin.id, entry_time=aware).entry
        assert entry.entry_time == T0

    def test_unknown_person(self, db, admin):
        with pytest.raises(NotFoundError):
            PresenceLedger(db).check_in(999, "Worker", recorded_by=admin.id)

    def test_unknown_vehicle(self, db, admin, make_worker):
        worker = make_worker()
        with pytest.raises(NotFoundError):
            PresenceLedger(db).check_in(worker.id, "Worker", recorded_by=admin.id, vehicle_id=999)
        assert open_entries(db, worker) == 0

    def test_invalid_person_type(self, db, admin):
        with pytest.raises(ValidationError) as exc:
            PresenceLedger(db).check_in(1, "Visitor", recorded_by=admin.id)
        assert exc.value.code == "invalid_person_type"

    def test_notes_too_long(self, db, admin, make_worker):
        worker = make_worker()
        with pytest.raises(ValidationError):
            PresenceLedger(db).check_in(worker.id, "Worker", recorded_by=admin.id, notes="x" * 501)


class TestCheckOut:
    def test_check_out_closes_entry(self, db, admin, make_worker):
        worker = make_worker()
        ledger = PresenceLedger(db)
        ledger.check_in(worker.id, "Worker", recorded_by=admin.id, entry_time=T0, notes="gate 1")

        result = ledger.check_out(worker.id, "Worker", exit_time=T0 + timedelta(hours=2, minutes=30), notes="left early")
        entry = result.entry
        assert entry.status == EntryStatus.EXIT.value
        assert entry.duration == 150
        assert entry.notes == "gate 1 | left early"
        assert ledger.list_active() == []

    def test_long_notes_truncated_with_warning(self, db, admin, make_worker):
        worker = make_worker()
        log = MagicMock()
        ledger = PresenceLedger(db, logger=log)
        ledger.check_in(worker.id, "Worker", recorded_by=admin.id, entry_time=T0, notes="x" * 450)

        entry = ledger.check_out(worker.id, "Worker", exit_time=T0 + timedelta(hours=1), notes="y" * 100).entry
        assert len(entry.notes) == 500
        assert entry.notes.startswith("x" * 450)
        log.warning.assert_called_once()
        assert "truncated" in log.warning.call_args[0][0]

    def test_check_out_without_check_in(self, db, make_worker):
        worker = make_worker()
        with pytest.raises(NoActiveEntry):
            PresenceLedger(db).check_out(worker.id, "Worker")

    def test_check_in_again_after_check_out(self, db, admin, make_worker):
        worker = make_worker()
        ledger = PresenceLedger(db)
        ledger.check_in(worker.id, "Worker", recorded_by=admin.id, entry_time=T0)
        ledger.check_out(worker.id, "Worker", exit_time=T0 + timedelta(hours=1))
        ledger.check_in(worker.id, "Worker", recorded_by=admin.id, entry_time=T0 + timedelta(hours=2))
        assert open_entries(db, worker) == 1

    @pytest.mark.parametrize("delta", [timedelta(0), timedelta(minutes=-45)])
    def test_exit_not_after_entry_gives_zero_duration(self, db, admin, make_supplier, delta):
        supplier = make_supplier()
        log = MagicMock()
        ledger = PresenceLedger(db, logger=log)
        ledger.check_in(supplier.id, "Supplier", recorded_by=admin.id, entry_time=T0)

        entry = ledger.check_out(supplier.id, "Supplier", exit_time=T0 + delta).entry
        assert entry.duration == 0
        if delta < timedelta(0):
            log.warning.assert_called_once()
            assert "Negative duration" in log.warning.call_args[0][0]

    def test_durations_never_negative(self, db, admin, make_worker):
        ledger = PresenceLedger(db, logger=MagicMock())
        for offset in (-120, -1, 0, 1, 600):
            worker = make_worker()
            ledger.check_in(worker.id, "Worker", recorded_by=admin.id, entry_time=T0)
            entry = ledger.check_out(worker.id, "Worker", exit_time=T0 + timedelta(minutes=offset)).entry
            assert entry.duration == max(0, offset)


class TestVehicleLink:
    def test_vehicle_log_mirrors_entry(self, db, admin, make_worker, make_vehicle):
        worker = make_worker()
        vehicle = make_vehicle(worker)
        ledger = PresenceLedger(db)

        result = ledger.check_in(
            worker.id, "Worker", recorded_by=admin.id, vehicle_id=vehicle.id, entry_time=T0, parking_location="P2"
        )
        vp = result.vehicle_presence
        assert vp.vehicle_id == vehicle.id
        assert vp.presence_entry_id == result.entry.id
        assert vp.entry_time == T0
        assert vp.exit_time is None
        assert vp.parking_location == "P2"
        assert result.entry.vehicle_link_id == vp.id

        out = ledger.check_out(worker.id, "Worker", exit_time=T0 + timedelta(hours=8))
        assert out.vehicle_presence.exit_time == out.entry.exit_time

    def test_link_failure_keeps_entry(self, db, admin, make_worker, make_vehicle):
        worker = make_worker()
        vehicle = make_vehicle(worker)
        vehicles = MagicMock()
        vehicles.open_for.side_effect = RuntimeError("disk full")
        log = MagicMock()

        result = PresenceLedger(db, logger=log, vehicles=vehicles).check_in(
            worker.id, "Worker", recorded_by=admin.id, vehicle_id=vehicle.id
        )
        assert result.vehicle_presence is None
        assert result.entry.id is not None
        assert open_entries(db, worker) == 1
        log.error.assert_called_once()

    def test_resync_after_failed_mirror(self, db, admin, make_worker, make_vehicle):
        worker = make_worker()
        vehicle = make_vehicle(worker)
        PresenceLedger(db).check_in(worker.id, "Worker", recorded_by=admin.id, vehicle_id=vehicle.id, entry_time=T0)

        vehicles = MagicMock()
        vehicles.sync_from_entry.side_effect = RuntimeError("lock timeout")
        out = PresenceLedger(db, logger=MagicMock(), vehicles=vehicles).check_out(
            worker.id, "Worker", exit_time=T0 + timedelta(hours=1)
        )
        assert out.vehicle_presence is None
        stale = db.query(VehiclePresence).one()
        assert stale.exit_time is None

        synced = PresenceLedger(db).resync_vehicle(out.entry.id)
        assert synced.exit_time == T0 + timedelta(hours=1)


class TestSupplierVisits:
    def test_supplier_check_in_counts_visit(self, db, admin, make_supplier):
        supplier = make_supplier()
        ledger = PresenceLedger(db)

        first = ledger.check_in(supplier.id, "Supplier", recorded_by=admin.id, entry_time=T0)
        ledger.check_out(supplier.id, "Supplier", exit_time=T0 + timedelta(hours=1))
        second = ledger.check_in(supplier.id, "Supplier", recorded_by=admin.id, entry_time=T0 + timedelta(days=3))

        assert first.monthly_visit_count == 1
        assert second.monthly_visit_count == 2
        assert monthly_visit_service.get_count(db, supplier.id, "2024-06") == 2

    def test_counter_failure_is_logged_not_raised(self, db, admin, make_supplier):
        supplier = make_supplier()
        visits = MagicMock()
        visits.increment.side_effect = RuntimeError("connection reset")
        log = MagicMock()

        result = PresenceLedger(db, logger=log, visits=visits).check_in(supplier.id, "Supplier", recorded_by=admin.id)
        assert result.monthly_visit_count is None
        assert result.entry.id is not None
        log.error.assert_called_once()
        assert "monthly visit increment" in log.error.call_args[0][0]


class TestManualEntry:
    def test_closed_manual_entry(self, db, admin, make_supplier):
        supplier = make_supplier()
        result = PresenceLedger(db).record_manual(
            supplier.id, "Supplier", recorded_by=admin.id,
            entry_time=T0, exit_time=T0 + timedelta(minutes=75),
        )
        assert result.entry.status == EntryStatus.EXIT.value
        assert result.entry.duration == 75
        assert result.monthly_visit_count == 1

    def test_open_manual_entry_respects_single_open(self, db, admin, make_worker):
        worker = make_worker()
        ledger = PresenceLedger(db)
        ledger.record_manual(worker.id, "Worker", recorded_by=admin.id, entry_time=T0, status="present")
        with pytest.raises(AlreadyCheckedIn):
            ledger.record_manual(worker.id, "Worker", recorded_by=admin.id, entry_time=T0, status="entry")

    def test_exit_status_requires_exit_time(self, db, admin, make_worker):
        worker = make_worker()
        with pytest.raises(ValidationError):
            PresenceLedger(db).record_manual(worker.id, "Worker", recorded_by=admin.id, entry_time=T0, status="exit")

    def test_unknown_status(self, db, admin, make_worker):
        worker = make_worker()
        with pytest.raises(InvalidStatus):
            PresenceLedger(db).record_manual(worker.id, "Worker", recorded_by=admin.id, entry_time=T0, status="gone")

    def test_vehicle_requires_entry_time(self, db, admin, make_worker, make_vehicle):
        worker = make_worker()
        vehicle = make_vehicle(worker)
        with pytest.raises(ValidationError):
            PresenceLedger(db).record_manual(
                worker.id, "Worker", recorded_by=admin.id, exit_time=T0, status="exit", vehicle_id=vehicle.id
            )
        assert db.query(PresenceEntry).count() == 0
        assert db.query(VehiclePresence).count() == 0

    def test_closed_manual_entry_with_vehicle(self, db, admin, make_worker, make_vehicle):
        worker = make_worker()
        vehicle = make_vehicle(worker)
        result = PresenceLedger(db).record_manual(
            worker.id, "Worker", recorded_by=admin.id,
            entry_time=T0, exit_time=T0 + timedelta(hours=1), vehicle_id=vehicle.id,
        )
        vp = result.vehicle_presence
        assert vp is not None
        assert vp.entry_time == T0
        assert vp.notes == "[MANUAL ENTRY]"

    def test_notes_are_tagged(self, db, admin, make_worker):
        ledger = PresenceLedger(db)
        first = ledger.record_manual(
            make_worker().id, "Worker", recorded_by=admin.id, entry_time=T0, notes="fixed gate badge"
        )
        second = ledger.record_manual(make_worker().id, "Worker", recorded_by=admin.id, entry_time=T0)
        assert first.entry.notes == "[MANUAL ENTRY] fixed gate badge"
        assert second.entry.notes == "[MANUAL ENTRY]"

    def test_explicit_log_date(self, db, admin, make_worker):
        worker = make_worker()
        logged = datetime(2024, 6, 3, 9, 0)
        result = PresenceLedger(db).record_manual(
            worker.id, "Worker", recorded_by=admin.id,
            entry_time=T0, exit_time=T0 + timedelta(minutes=30), log_date=logged,
        )
        assert result.entry.log_date == logged

    def test_log_date_defaults_to_entry_time(self, db, admin, make_worker):
        worker = make_worker()
        result = PresenceLedger(db).record_manual(worker.id, "Worker", recorded_by=admin.id, entry_time=T0)
        assert result.entry.log_date == T0


class TestQueries:
    def test_search_by_owner_name(self, db, admin, make_worker, make_supplier):
        alice = make_worker(worker_name="Alice Ben Salah")
        supplier = make_supplier(name="Bob Trading")
        ledger = PresenceLedger(db)
        ledger.check_in(alice.id, "Worker", recorded_by=admin.id, entry_time=T0)
        ledger.check_in(supplier.id, "Supplier", recorded_by=admin.id, entry_time=T0)

        page = ledger.query(PresenceQuery(search="alice"))
        assert [e.person_id for e in page.items] == [alice.id]
        assert page.items[0].person_type == "Worker"

    def test_filters_and_pagination(self, db, admin, make_worker):
        ledger = PresenceLedger(db)
        for i in range(5):
            worker = make_worker()
            ledger.check_in(worker.id, "Worker", recorded_by=admin.id, entry_time=T0 + timedelta(hours=i))

        page = ledger.query(PresenceQuery(person_type="Worker", page=2, limit=2, sort_by="entry_time", sort_order="asc"))
        assert page.total == 5
        assert [e.entry_time for e in page.items] == [T0 + timedelta(hours=2), T0 + timedelta(hours=3)]
        assert page.meta()["pages"] == 3
        assert page.meta()["has_next"] is True

        assert ledger.query(PresenceQuery(date_from=date(2024, 6, 2))).total == 0

    @pytest.mark.parametrize("search", ["%", "_"])
    def test_search_wildcards_match_literally(self, db, admin, make_worker, search):
        ledger = PresenceLedger(db)
        for _ in range(2):
            ledger.check_in(make_worker().id, "Worker", recorded_by=admin.id, entry_time=T0)
        assert ledger.query(PresenceQuery()).total == 2
        assert ledger.query(PresenceQuery(search=search)).total == 0

    def test_bad_sort_field(self, db):
        with pytest.raises(ValidationError):
            PresenceLedger(db).query(PresenceQuery(sort_by="password_hash"))

    def test_enrich_attaches_owner_recorder_and_vehicle(self, db, admin, make_supplier, make_vehicle):
        supplier = make_supplier(name="Bob Trading")
        vehicle = make_vehicle(supplier)
        ledger = PresenceLedger(db)
        entry = ledger.check_in(supplier.id, "Supplier", recorded_by=admin.id, vehicle_id=vehicle.id, entry_time=T0).entry

        item = ledger.enrich([entry])[0]
        assert item["person"]["name"] == "Bob Trading"
        assert item["person"]["num_vst"] == supplier.num_vst
        assert item["recorded_by_info"]["email"] == admin.email
        assert item["vehicle_info"]["lic_plate_string"] == vehicle.lic_plate_string
        assert item["monthly_visit_count"] == 1
        assert item["formatted_duration"] == "N/A"

    def test_person_history_and_daily_stats(self, db, admin, make_worker, make_supplier):
        worker = make_worker()
        supplier = make_supplier()
        ledger = PresenceLedger(db)
        ledger.check_in(worker.id, "Worker", recorded_by=admin.id, entry_time=T0)
        ledger.check_out(worker.id, "Worker", exit_time=T0 + timedelta(hours=1))
        ledger.check_in(worker.id, "Worker", recorded_by=admin.id, entry_time=T0 + timedelta(hours=2))
        ledger.check_in(supplier.id, "Supplier", recorded_by=admin.id, entry_time=T0)

        assert ledger.person_history(worker.id, "Worker").total == 2

        stats = ledger.daily_stats(date(2024, 6, 1))["today"]
        assert stats["total_entries"] == 3
        assert stats["total_exits"] == 1
        assert stats["currently_inside"] == 2
        assert stats["worker_entries"] == 2
        assert stats["supplier_entries"] == 1
