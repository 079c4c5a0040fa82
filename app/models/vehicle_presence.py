# app/models/vehicle_presence.py
"""
Vehicle presence log. Mirrors the entry/exit times of its parent PresenceEntry (1:1)
for vehicle-specific reporting. Only written by services.vehicle_presence_service.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time_utils import utcnow


class VehiclePresence(Base):
    __tablename__ = "vehicle_presences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    presence_entry_id = Column(
        Integer, ForeignKey("presence_entries.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    vlog_date = Column(DateTime, nullable=False, default=utcnow, index=True)
    entry_time = Column(DateTime, nullable=False)
    exit_time = Column(DateTime)                 # NULL while still parked
    parking_location = Column(String(100))
    notes = Column(String(300))
    recorded_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    vehicle = relationship("Vehicle", lazy="joined")
    presence_entry = relationship("PresenceEntry", back_populates="vehicle_presence")

    def __repr__(self):
        return f"<VehiclePresence {self.id} vehicle={self.vehicle_id} entry={self.presence_entry_id}>"
