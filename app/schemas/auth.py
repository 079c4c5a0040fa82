# app/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field
from datetime import date, datetime
from typing import Optional, List
from app.models.enums import Role
from app.schemas.common import PaginationOut


class RegisterRequest(BaseModel):
    cin: str = Field(..., min_length=1, max_length=20)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    birthdate: date
    phone_number: str = Field(..., min_length=1, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role


class AdminCreateUserRequest(BaseModel):
    cin: str = Field(..., min_length=1, max_length=20)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone_number: Optional[str] = None
    birthdate: Optional[date] = None
    role: Role = Role.SOS


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=6)


class UserOut(BaseModel):
    id: int
    cin: str
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str]
    birthdate: Optional[date]
    role: str
    is_approved: bool
    is_active: bool
    approved_by: Optional[int]
    approved_at: Optional[datetime]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class LoginOut(BaseModel):
    msg: str = "Login successful"
    token: str
    user: UserOut


class RegisterOut(BaseModel):
    msg: str
    needs_approval: bool
    user: UserOut


class UserPageOut(BaseModel):
    users: List[UserOut]
    pagination: PaginationOut


class UserStatsOut(BaseModel):
    total_admins: int
    total_sos: int
    pending_approvals: int
    approved_sos: int
    deactivated_users: int
    total_users: int
