# app/models/enums.py
"""Enumerated column values shared by models, schemas and services."""

from enum import Enum


class PersonType(str, Enum):
    """The three kinds of person a presence entry or vehicle can belong to."""

    WORKER = "Worker"
    SUPPLIER = "Supplier"
    LEONI_PERSONNEL = "LeoniPersonnel"


class EntryStatus(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"
    PRESENT = "present"


OPEN_STATUSES = (EntryStatus.ENTRY.value, EntryStatus.PRESENT.value)


class Role(str, Enum):
    ADMIN = "admin"
    SOS = "sos"


class IncidentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    RESOLVED = "resolved"


class IncidentPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


INCIDENT_TYPES = (
    "Login bug",
    "Report submission error",
    "Gate malfunction",
    "Electricity outage",
    "Fire",
    "Car accident",
    "Unauthorized worker entry",
    "Worker's vehicle overstaying",
)


class ScheduleStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


def enum_values(enum_cls) -> list:
    return [member.value for member in enum_cls]
