# app/routers/suppliers.py
"""Supplier registry. New suppliers get the next visitor number (VSTnnnnnn)."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user, require_admin
from app.models import Supplier, User
from app.schemas.common import MessageOut
from app.schemas.monthly_visit import MonthlyVisitOut
from app.schemas.person import SupplierCreate, SupplierOut, SupplierPageOut, SupplierUpdate
from app.services import crud_service, monthly_visit_service

router = APIRouter()

UNIQUE_FIELDS = ("email", "cin")


@router.get("/suppliers", response_model=SupplierPageOut, summary="List suppliers")
def list_suppliers(
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = crud_service.search_page(
        db, Supplier, search, Supplier.search_columns, Supplier.created_at.desc(), page, limit
    )
    return {"data": result.items, "pagination": result.meta()}


@router.get("/suppliers/{supplier_id}", response_model=SupplierOut, summary="Get one supplier")
def get_supplier(supplier_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud_service.get_or_404(db, Supplier, supplier_id)


@router.get("/suppliers/{supplier_id}/visits", response_model=list[MonthlyVisitOut], summary="Monthly visit counters")
def supplier_visits(supplier_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    crud_service.get_or_404(db, Supplier, supplier_id)
    return monthly_visit_service.history(db, supplier_id)


@router.post("/suppliers", response_model=SupplierOut, status_code=201, summary="Register a supplier")
def create_supplier(body: SupplierCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    values = body.model_dump()
    values["num_vst"] = crud_service.next_vst_number(db)
    return crud_service.create(db, Supplier, values, UNIQUE_FIELDS)


@router.put("/suppliers/{supplier_id}", response_model=SupplierOut, summary="Update a supplier")
def update_supplier(
    supplier_id: int,
    body: SupplierUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    supplier = crud_service.get_or_404(db, Supplier, supplier_id)
    return crud_service.update(db, supplier, body.model_dump(exclude_unset=True), UNIQUE_FIELDS)


@router.delete("/suppliers/{supplier_id}", response_model=MessageOut, summary="Remove a supplier")
def delete_supplier(supplier_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    supplier = crud_service.get_or_404(db, Supplier, supplier_id)
    crud_service.ensure_owner_has_no_vehicles(db, supplier)
    crud_service.delete(db, supplier)
    return {"message": "Supplier deleted"}
