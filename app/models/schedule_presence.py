# app/models/schedule_presence.py
"""Planned supplier visits (date + HH:MM time + reason)."""

from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey, Index
from app.database import Base
from app.utils.time_utils import utcnow


class SchedulePresence(Base):
    __tablename__ = "schedule_presences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    supplier_name = Column(String(200), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False)          # HH:MM, 24h
    reason = Column(String(500), nullable=False)
    status = Column(String(20), default="scheduled", nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_schedule_presences_date_supplier", "date", "supplier_name"),
    )

    def __repr__(self):
        return f"<SchedulePresence {self.id} {self.supplier_name} {self.date} {self.time}>"
