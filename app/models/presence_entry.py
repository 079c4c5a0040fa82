# app/models/presence_entry.py
"""
Presence log table. One row per visit of one person (check-in -> check-out).
Duration (minutes) is computed by services.presence_service at the two
mutation points, never by the database.

The partial unique index keeps at most one open entry (exit_time IS NULL)
per (person_id, person_type), so a concurrent duplicate check-in fails at the store.
"""

import random
import time

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, CheckConstraint, text
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time_utils import utcnow


def generate_log_code() -> str:
    return f"LOG{int(time.time() * 1000)}{random.randint(0, 999):03d}"


class PresenceEntry(Base):
    __tablename__ = "presence_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    log_code = Column(String(32), unique=True, nullable=False, default=generate_log_code)
    person_id = Column(Integer, nullable=False)
    person_type = Column(String(20), nullable=False)     # Worker | Supplier | LeoniPersonnel
    status = Column(String(10), nullable=False, default="entry", index=True)  # entry | exit | present
    entry_time = Column(DateTime, index=True)
    exit_time = Column(DateTime)
    duration = Column(Integer, default=0, nullable=False)   # minutes
    log_date = Column(DateTime, nullable=False, default=utcnow, index=True)
    notes = Column(String(500))
    recorded_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    recorder = relationship("User", lazy="joined")
    vehicle_presence = relationship(
        "VehiclePresence", back_populates="presence_entry", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_presence_entries_person", "person_id", "person_type"),
        Index(
            "uq_presence_entries_open_person",
            "person_id",
            "person_type",
            unique=True,
            postgresql_where=text("exit_time IS NULL"),
            sqlite_where=text("exit_time IS NULL"),
        ),
        CheckConstraint("duration >= 0", name="ck_presence_entries_duration"),
        CheckConstraint(
            "person_type IN ('Worker', 'Supplier', 'LeoniPersonnel')", name="ck_presence_entries_person_type"
        ),
        CheckConstraint("status IN ('entry', 'exit', 'present')", name="ck_presence_entries_status"),
    )

    @property
    def vehicle_link_id(self):
        return self.vehicle_presence.id if self.vehicle_presence else None

    def __repr__(self):
        return f"<PresenceEntry {self.id} {self.person_type}#{self.person_id} status={self.status}>"
