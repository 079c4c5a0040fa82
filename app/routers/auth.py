# app/routers/auth.py
"""Registration, login and the caller's own profile."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.schemas.auth import (
    ChangePasswordRequest,
    LoginOut,
    LoginRequest,
    RegisterOut,
    RegisterRequest,
    UserOut,
)
from app.schemas.common import MessageOut
from app.services import auth_service

router = APIRouter()


@router.post("/auth/register", response_model=RegisterOut, status_code=201, summary="Register an admin or SOS account")
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """SOS accounts stay pending until an admin approves them."""
    user = auth_service.register(db, body.model_dump())
    needs_approval = not user.is_approved
    msg = (
        "Registration successful. Your account is pending admin approval."
        if needs_approval else "Registration successful"
    )
    return {"msg": msg, "needs_approval": needs_approval, "user": user}


@router.post("/auth/login", response_model=LoginOut, summary="Log in and receive a bearer token")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    token, user = auth_service.authenticate(db, body.email, body.password)
    return {"token": token, "user": user}


@router.get("/auth/me", response_model=UserOut, summary="Current user profile")
def me(user: User = Depends(get_current_user)):
    return user


@router.put("/auth/password", response_model=MessageOut, summary="Change own password")
def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    auth_service.change_password(db, user, body.old_password, body.new_password)
    return {"message": "Password updated"}
