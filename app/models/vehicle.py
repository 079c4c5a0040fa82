# app/models/vehicle.py
"""
Registered vehicles. Owned by exactly one Worker, Supplier or LeoniPersonnel
(owner_id + owner_type). Owner details are resolved by services.owner_resolver.
"""

from sqlalchemy import Column, Integer, String, DateTime, Index, CheckConstraint
from app.database import Base
from app.utils.time_utils import utcnow


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lic_plate_string = Column(String(50), unique=True, nullable=False, index=True)
    mark = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    v_year = Column(Integer, nullable=False)
    color = Column(String(50), nullable=False)
    owner_id = Column(Integer, nullable=False)
    owner_type = Column(String(20), nullable=False)   # Worker | Supplier | LeoniPersonnel
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_vehicles_owner", "owner_id", "owner_type"),
        Index("ix_vehicles_mark_model", "mark", "model"),
        CheckConstraint(
            "owner_type IN ('Worker', 'Supplier', 'LeoniPersonnel')", name="ck_vehicles_owner_type"
        ),
    )

    def __repr__(self):
        return f"<Vehicle {self.lic_plate_string} owner={self.owner_type}#{self.owner_id}>"
