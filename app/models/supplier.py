# app/models/supplier.py
"""
Suppliers visiting the site. Each supplier gets a generated id_sup (SUPxxxxxxxxx)
and a sequential visitor number (VST000001, VST000002, ...).
"""

import random
import time

from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base
from app.models.enums import PersonType
from app.utils.time_utils import utcnow


def generate_supplier_id() -> str:
    timestamp = str(int(time.time() * 1000))[-6:]
    return f"SUP{timestamp}{random.randint(0, 999):03d}"


def format_vst_number(number: int) -> str:
    return f"VST{number:06d}"


class Supplier(Base):
    __tablename__ = "suppliers"

    person_type = PersonType.SUPPLIER
    search_columns = ("name", "cin", "id_sup", "comp_affil")

    id = Column(Integer, primary_key=True, autoincrement=True)
    id_sup = Column(String(20), unique=True, nullable=False, index=True, default=generate_supplier_id)
    num_vst = Column(String(20), unique=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    email = Column(String(200), unique=True, nullable=False, index=True)
    phone_number = Column(String(30), nullable=False)
    cin = Column(String(20), unique=True, nullable=False, index=True)
    comp_affil = Column(String(200), nullable=False)    # company affiliation
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def display_name(self):
        return self.name or self.comp_affil

    @property
    def identifier(self):
        return self.id_sup

    @property
    def contact_info(self):
        return self.email

    def __repr__(self):
        return f"<Supplier {self.id} {self.id_sup} {self.name}>"
