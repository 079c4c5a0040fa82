# app/models/monthly_visit.py
"""
Per-supplier, per-month visit counter.
Updated only through an atomic INSERT ... ON CONFLICT DO UPDATE (see monthly_visit_service).
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from app.database import Base
from app.utils.time_utils import utcnow


class MonthlyVisit(Base):
    __tablename__ = "monthly_visits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False, index=True)
    month = Column(String(7), nullable=False, index=True)     # "YYYY-MM"
    year = Column(Integer, nullable=False, index=True)
    visit_count = Column(Integer, default=0, nullable=False)
    last_visit_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("supplier_id", "month", name="uq_monthly_visits_supplier_month"),
    )

    def __repr__(self):
        return f"<MonthlyVisit supplier={self.supplier_id} {self.month} count={self.visit_count}>"
