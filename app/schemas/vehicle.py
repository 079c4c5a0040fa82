# app/schemas/vehicle.py
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List, Dict, Any
from app.models.enums import PersonType
from app.schemas.common import PaginationOut
from app.utils.time_utils import utcnow


def _check_year(value):
    if value is not None and not 1900 <= value <= utcnow().year + 1:
        raise ValueError(f"v_year must be between 1900 and {utcnow().year + 1}")
    return value


class VehicleCreate(BaseModel):
    lic_plate_string: str = Field(..., min_length=1, max_length=50)
    mark: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    v_year: int
    color: str = Field(..., min_length=1, max_length=50)
    owner_id: int
    owner_type: PersonType

    @field_validator("v_year")
    @classmethod
    def check_year(cls, value):
        return _check_year(value)

    @field_validator("lic_plate_string")
    @classmethod
    def normalize_plate(cls, value: str) -> str:
        return value.strip().upper()


class VehicleUpdate(BaseModel):
    lic_plate_string: Optional[str] = Field(None, min_length=1, max_length=50)
    mark: Optional[str] = None
    model: Optional[str] = None
    v_year: Optional[int] = None
    color: Optional[str] = None
    owner_id: Optional[int] = None
    owner_type: Optional[PersonType] = None

    @field_validator("v_year")
    @classmethod
    def check_year(cls, value):
        return _check_year(value)

    @field_validator("lic_plate_string")
    @classmethod
    def normalize_plate(cls, value):
        return value.strip().upper() if value else value


class VehicleBrief(BaseModel):
    id: int
    lic_plate_string: str
    mark: str
    model: str
    color: str

    class Config:
        from_attributes = True


class VehicleOut(BaseModel):
    id: int
    lic_plate_string: str
    mark: str
    model: str
    v_year: int
    color: str
    owner_id: int
    owner_type: str
    owner_info: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class VehiclePageOut(BaseModel):
    data: List[VehicleOut]
    pagination: PaginationOut
