# app/models/incident.py
"""
Incidents reported by SOS operators and reviewed by admins.
Status flow: pending -> approved | rejected | resolved, approved | rejected -> resolved.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time_utils import utcnow


class Incident(Base):
    __tablename__ = "incidents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(DateTime, nullable=False)
    status = Column(String(20), default="pending", nullable=False, index=True)
    priority = Column(String(20), default="medium", nullable=False, index=True)
    reported_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    approved_by = Column(Integer, ForeignKey("users.id"))
    approved_at = Column(DateTime)
    resolved_at = Column(DateTime)
    admin_notes = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    reporter = relationship("User", foreign_keys=[reported_by], lazy="joined")
    approver = relationship("User", foreign_keys=[approved_by], lazy="joined")

    __table_args__ = (
        Index("ix_incidents_reporter_created", "reported_by", "created_at"),
    )

    def __repr__(self):
        return f"<Incident {self.id} type={self.type} status={self.status}>"
