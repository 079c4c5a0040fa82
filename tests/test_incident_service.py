# tests/test_incident_service.py
"""Tests for incident reporting and the admin review workflow."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta
from app.errors import InvalidStatus, InvalidTransition, NotFoundError, ValidationError
from app.services import incident_service
from app.utils.time_utils import utcnow

WHEN = datetime(2024, 6, 1, 14, 0)


def report(db, reporter, **overrides):
    values = dict(type="Gate malfunction", description="Barrier stuck open", date=WHEN)
    values.update(overrides)
    return incident_service.report(db, reporter, **values)


class TestReport:
    def test_report_starts_pending(self, db, make_user):
        sos = make_user()
        incident = report(db, sos)
        assert incident.status == "pending"
        assert incident.priority == "medium"
        assert incident.reported_by == sos.id
        assert incident.approved_by is None

    def test_unknown_type(self, db, make_user):
        with pytest.raises(ValidationError):
            report(db, make_user(), type="Alien landing")

    def test_future_date(self, db, make_user):
        with pytest.raises(ValidationError):
            report(db, make_user(), date=utcnow() + timedelta(days=1))

    def test_blank_description(self, db, make_user):
        with pytest.raises(ValidationError):
            report(db, make_user(), description="   ")


class TestTransition:
    def test_approve_then_resolve(self, db, admin, make_user):
        incident = report(db, make_user())

        approved = incident_service.transition(db, admin, incident.id, "approved", admin_notes="Technician sent")
        assert approved.status == "approved"
        assert approved.approved_by == admin.id
        assert approved.approved_at is not None
        assert approved.admin_notes == "Technician sent"

        resolved = incident_service.transition(db, admin, incident.id, "resolved", priority="low")
        assert resolved.status == "resolved"
        assert resolved.resolved_at is not None
        assert resolved.priority == "low"
        assert resolved.approved_by == admin.id

    @pytest.mark.parametrize("first,second", [
        ("resolved", "approved"),
        ("approved", "rejected"),
        ("rejected", "pending"),
        ("resolved", "resolved"),
    ])
    def test_no_backwards_moves(self, db, admin, make_user, first, second):
        incident = report(db, make_user())
        incident_service.transition(db, admin, incident.id, first)
        with pytest.raises(InvalidTransition):
            incident_service.transition(db, admin, incident.id, second)

    def test_invalid_status(self, db, admin, make_user):
        incident = report(db, make_user())
        with pytest.raises(InvalidStatus):
            incident_service.transition(db, admin, incident.id, "closed")

    def test_missing_incident(self, db, admin):
        with pytest.raises(NotFoundError):
            incident_service.transition(db, admin, 404, "approved")


class TestListing:
    def test_reporter_sees_only_own(self, db, admin, make_user):
        alice, bob = make_user(), make_user()
        mine = report(db, alice)
        theirs = report(db, bob, type="Fire", description="Smoke near dock 3")

        assert [i.id for i in incident_service.list_for_reporter(db, alice).items] == [mine.id]
        with pytest.raises(NotFoundError):
            incident_service.get(db, theirs.id, reported_by=alice.id)
        assert incident_service.list_all(db, type="Fire").total == 1
        assert incident_service.list_all(db, search="dock").total == 1

    def test_stats(self, db, admin, make_user):
        sos = make_user()
        report(db, sos)
        report(db, sos, type="Fire", priority="critical")
        third = report(db, sos)
        incident_service.transition(db, admin, third.id, "rejected")

        stats = incident_service.stats(db)
        assert stats["overall"] == {"pending": 2, "approved": 0, "rejected": 1, "resolved": 0, "total": 3}
        assert stats["by_type"] == {"Gate malfunction": 2, "Fire": 1}
        assert stats["by_priority"] == {"medium": 2, "critical": 1}
