# app/schemas/person.py
"""Workers, suppliers and Leoni personnel (the three owner kinds)."""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, List
from app.schemas.common import PaginationOut


# ── Workers ──────────────────────────────────────────────────────────────────
class WorkerCreate(BaseModel):
    cin: str = Field(..., min_length=1, max_length=20)
    worker_name: str = Field(..., min_length=1, max_length=200)
    com_num: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    worker_address: str = Field(..., min_length=1, max_length=300)
    state: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)


class WorkerUpdate(BaseModel):
    cin: Optional[str] = Field(None, min_length=1, max_length=20)
    worker_name: Optional[str] = Field(None, min_length=1, max_length=200)
    com_num: Optional[str] = None
    email: Optional[EmailStr] = None
    worker_address: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None


class WorkerOut(BaseModel):
    id: int
    cin: str
    worker_name: str
    com_num: str
    email: str
    worker_address: str
    state: str
    postal_code: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class WorkerPageOut(BaseModel):
    data: List[WorkerOut]
    pagination: PaginationOut


# ── Suppliers ────────────────────────────────────────────────────────────────
class SupplierCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone_number: str = Field(..., min_length=1, max_length=30)
    cin: str = Field(..., min_length=1, max_length=20)
    comp_affil: str = Field(..., min_length=1, max_length=200)


class SupplierUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    cin: Optional[str] = Field(None, min_length=1, max_length=20)
    comp_affil: Optional[str] = None


class SupplierOut(BaseModel):
    id: int
    id_sup: str
    num_vst: Optional[str]
    name: str
    email: str
    phone_number: str
    cin: str
    comp_affil: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class SupplierPageOut(BaseModel):
    data: List[SupplierOut]
    pagination: PaginationOut


# ── Leoni personnel ──────────────────────────────────────────────────────────
class LeoniPersonnelCreate(BaseModel):
    matricule: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    cin: str = Field(..., pattern=r"^[0-9]{8}$")
    email: EmailStr
    address: str = Field(..., min_length=1, max_length=300)
    state: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)


class LeoniPersonnelUpdate(BaseModel):
    matricule: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    cin: Optional[str] = Field(None, pattern=r"^[0-9]{8}$")
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None


class LeoniPersonnelOut(BaseModel):
    id: int
    matricule: str
    name: str
    cin: str
    email: str
    address: str
    state: str
    postal_code: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class LeoniPersonnelPageOut(BaseModel):
    data: List[LeoniPersonnelOut]
    pagination: PaginationOut
