# app/routers/leoni_personnel.py
"""Leoni personnel registry."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user, require_admin
from app.models import LeoniPersonnel, User
from app.schemas.common import MessageOut
from app.schemas.person import (
    LeoniPersonnelCreate,
    LeoniPersonnelOut,
    LeoniPersonnelPageOut,
    LeoniPersonnelUpdate,
)
from app.services import crud_service

router = APIRouter()

UNIQUE_FIELDS = ("matricule", "cin", "email")


@router.get("/leoni-personnel", response_model=LeoniPersonnelPageOut, summary="List Leoni personnel")
def list_personnel(
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = crud_service.search_page(
        db, LeoniPersonnel, search, LeoniPersonnel.search_columns, LeoniPersonnel.created_at.desc(), page, limit
    )
    return {"data": result.items, "pagination": result.meta()}


@router.get("/leoni-personnel/{personnel_id}", response_model=LeoniPersonnelOut, summary="Get one staff member")
def get_personnel(personnel_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud_service.get_or_404(db, LeoniPersonnel, personnel_id, "Leoni personnel")


@router.post("/leoni-personnel", response_model=LeoniPersonnelOut, status_code=201, summary="Register a staff member")
def create_personnel(body: LeoniPersonnelCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud_service.create(db, LeoniPersonnel, body.model_dump(), UNIQUE_FIELDS)


@router.put("/leoni-personnel/{personnel_id}", response_model=LeoniPersonnelOut, summary="Update a staff member")
def update_personnel(
    personnel_id: int,
    body: LeoniPersonnelUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    personnel = crud_service.get_or_404(db, LeoniPersonnel, personnel_id, "Leoni personnel")
    return crud_service.update(db, personnel, body.model_dump(exclude_unset=True), UNIQUE_FIELDS)


@router.delete("/leoni-personnel/{personnel_id}", response_model=MessageOut, summary="Remove a staff member")
def delete_personnel(personnel_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    personnel = crud_service.get_or_404(db, LeoniPersonnel, personnel_id, "Leoni personnel")
    crud_service.ensure_owner_has_no_vehicles(db, personnel)
    crud_service.delete(db, personnel)
    return {"message": "Leoni personnel deleted"}
