# app/models/leoni_personnel.py
"""Internal Leoni staff, identified by matricule."""

from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base
from app.models.enums import PersonType
from app.utils.time_utils import utcnow


class LeoniPersonnel(Base):
    __tablename__ = "leoni_personnel"

    person_type = PersonType.LEONI_PERSONNEL
    search_columns = ("name", "cin", "matricule")

    id = Column(Integer, primary_key=True, autoincrement=True)
    matricule = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False, index=True)
    cin = Column(String(8), unique=True, nullable=False, index=True)
    email = Column(String(200), unique=True, nullable=False, index=True)
    address = Column(String(300), nullable=False)
    state = Column(String(100), nullable=False)
    postal_code = Column(String(20), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def display_name(self):
        return self.name

    @property
    def identifier(self):
        return self.matricule

    @property
    def contact_info(self):
        return self.email

    def __repr__(self):
        return f"<LeoniPersonnel {self.id} {self.matricule} {self.name}>"
