# app/schemas/presence.py
"""Check-in / check-out payloads and enriched presence log output."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict, Any
from app.models.enums import EntryStatus, PersonType
from app.schemas.common import PaginationOut
from app.schemas.vehicle import VehicleBrief


class CheckInRequest(BaseModel):
    person_id: int
    person_type: PersonType
    vehicle_id: Optional[int] = None
    entry_time: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=500)
    parking_location: Optional[str] = Field(None, max_length=100)


class CheckOutRequest(BaseModel):
    person_id: int
    person_type: PersonType
    exit_time: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=500)


class ManualEntryRequest(BaseModel):
    person_id: int
    person_type: PersonType
    status: Optional[EntryStatus] = None
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=500)
    vehicle_id: Optional[int] = None
    parking_location: Optional[str] = Field(None, max_length=100)
    log_date: Optional[datetime] = None


class RecorderOut(BaseModel):
    id: int
    name: str
    email: str


class PresenceEntryOut(BaseModel):
    id: int
    log_code: str
    person_id: int
    person_type: str
    status: str
    entry_time: Optional[datetime]
    exit_time: Optional[datetime]
    duration: int                    # minutes
    formatted_duration: str
    log_date: datetime
    notes: Optional[str]
    vehicle_link_id: Optional[int]
    recorded_by: int
    recorded_by_info: Optional[RecorderOut]
    person: Optional[Dict[str, Any]]
    vehicle_info: Optional[VehicleBrief]
    monthly_visit_count: Optional[int]
    created_at: Optional[datetime]


class VehiclePresenceOut(BaseModel):
    id: int
    vehicle_id: int
    presence_entry_id: int
    vlog_date: datetime
    entry_time: datetime
    exit_time: Optional[datetime]
    parking_location: Optional[str]
    notes: Optional[str]
    duration: Optional[int] = None
    vehicle: Optional[VehicleBrief] = None

    class Config:
        from_attributes = True


class CheckInData(BaseModel):
    log: PresenceEntryOut
    vehicle_log: Optional[VehiclePresenceOut]
    monthly_visit_count: Optional[int]


class CheckInOut(BaseModel):
    success: bool = True
    message: str
    data: CheckInData


class CheckOutOut(BaseModel):
    success: bool = True
    message: str
    data: PresenceEntryOut
    vehicle_log: Optional[VehiclePresenceOut] = None


class PresenceListOut(BaseModel):
    success: bool = True
    data: List[PresenceEntryOut]
    count: int


class PresencePageOut(BaseModel):
    success: bool = True
    data: List[PresenceEntryOut]
    pagination: PaginationOut


class VehiclePresencePageOut(BaseModel):
    success: bool = True
    data: List[VehiclePresenceOut]
    pagination: PaginationOut
