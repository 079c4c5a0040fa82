# app/schemas/schedule_presence.py
from pydantic import BaseModel, Field, field_validator
from datetime import date as date_type, datetime
from typing import Optional, List
from app.models.enums import ScheduleStatus
from app.schemas.common import PaginationOut
from app.utils.time_utils import utcnow

TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"


class ScheduleCreate(BaseModel):
    supplier_name: str = Field(..., min_length=1, max_length=200)
    date: date_type
    time: str = Field(..., pattern=TIME_PATTERN)
    reason: str = Field(..., min_length=1, max_length=500)

    @field_validator("date")
    @classmethod
    def not_in_past(cls, value: date_type) -> date_type:
        if value < utcnow().date():
            raise ValueError("Date cannot be in the past")
        return value


class ScheduleUpdate(BaseModel):
    supplier_name: Optional[str] = Field(None, min_length=1, max_length=200)
    date: Optional[date_type] = None
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    reason: Optional[str] = Field(None, min_length=1, max_length=500)
    status: Optional[ScheduleStatus] = None

    @field_validator("date")
    @classmethod
    def not_in_past(cls, value):
        if value is not None and value < utcnow().date():
            raise ValueError("Date cannot be in the past")
        return value


class ScheduleOut(BaseModel):
    id: int
    supplier_name: str
    date: date_type
    time: str
    reason: str
    status: str
    created_by: int
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class SchedulePageOut(BaseModel):
    data: List[ScheduleOut]
    pagination: PaginationOut
