# app/models/worker.py
"""
External workers (contractors) allowed on site.
One of the three owner kinds for vehicles and presence entries.
"""

from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base
from app.models.enums import PersonType
from app.utils.time_utils import utcnow


class Worker(Base):
    __tablename__ = "workers"

    person_type = PersonType.WORKER
    search_columns = ("worker_name", "cin", "email")

    id = Column(Integer, primary_key=True, autoincrement=True)
    cin = Column(String(20), unique=True, nullable=False, index=True)
    worker_name = Column(String(200), nullable=False, index=True)
    com_num = Column(String(50), nullable=False)      # company / contract number
    email = Column(String(200), nullable=False, index=True)
    worker_address = Column(String(300), nullable=False)
    state = Column(String(100), nullable=False)
    postal_code = Column(String(20), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def display_name(self):
        return self.worker_name

    @property
    def identifier(self):
        return self.cin

    @property
    def contact_info(self):
        return self.email

    def __repr__(self):
        return f"<Worker {self.id} {self.worker_name} cin={self.cin}>"
