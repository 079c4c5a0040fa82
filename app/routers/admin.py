# app/routers/admin.py
"""Admin-only account management: approvals, activation, listing."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require_admin
from app.models import User
from app.schemas.auth import AdminCreateUserRequest, UserOut, UserPageOut, UserStatsOut
from app.services import auth_service

router = APIRouter()


@router.get("/admin/pending-approvals", response_model=list[UserOut], summary="SOS accounts awaiting approval")
def pending_approvals(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return auth_service.pending_approvals(db)


@router.put("/admin/approve/{user_id}", response_model=UserOut, summary="Approve an SOS account")
def approve_user(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return auth_service.approve(db, admin, user_id)


@router.delete("/admin/reject/{user_id}", summary="Reject (delete) a pending account")
def reject_user(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    removed = auth_service.reject(db, user_id)
    return {"success": True, "message": "User registration rejected and removed", "user": removed}


@router.put("/admin/toggle-status/{user_id}", response_model=UserOut, summary="Activate / deactivate an account")
def toggle_status(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return auth_service.toggle_active(db, admin, user_id)


@router.post("/admin/users", response_model=UserOut, status_code=201, summary="Create an approved account")
def create_user(body: AdminCreateUserRequest, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return auth_service.create_user_by_admin(db, admin, body.model_dump())


@router.get("/admin/users", response_model=UserPageOut, summary="List accounts")
def list_users(
    role: Optional[str] = None,
    is_approved: Optional[bool] = None,
    is_active: Optional[bool] = None,
    page: int = 1,
    limit: int = 10,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    result = auth_service.list_users(db, role, is_approved, is_active, page, limit)
    return {"users": result.items, "pagination": result.meta()}


@router.get("/admin/stats", response_model=UserStatsOut, summary="Account counters")
def user_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return auth_service.user_stats(db)
