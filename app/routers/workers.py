# app/routers/workers.py
"""Worker registry."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user, require_admin
from app.models import User, Worker
from app.schemas.common import MessageOut
from app.schemas.person import WorkerCreate, WorkerOut, WorkerPageOut, WorkerUpdate
from app.services import crud_service

router = APIRouter()

UNIQUE_FIELDS = ("cin",)


@router.get("/workers", response_model=WorkerPageOut, summary="List workers")
def list_workers(
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = crud_service.search_page(db, Worker, search, Worker.search_columns, Worker.created_at.desc(), page, limit)
    return {"data": result.items, "pagination": result.meta()}


@router.get("/workers/{worker_id}", response_model=WorkerOut, summary="Get one worker")
def get_worker(worker_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud_service.get_or_404(db, Worker, worker_id)


@router.post("/workers", response_model=WorkerOut, status_code=201, summary="Register a worker")
def create_worker(body: WorkerCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud_service.create(db, Worker, body.model_dump(), UNIQUE_FIELDS)


@router.put("/workers/{worker_id}", response_model=WorkerOut, summary="Update a worker")
def update_worker(
    worker_id: int,
    body: WorkerUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    worker = crud_service.get_or_404(db, Worker, worker_id)
    return crud_service.update(db, worker, body.model_dump(exclude_unset=True), UNIQUE_FIELDS)


@router.delete("/workers/{worker_id}", response_model=MessageOut, summary="Remove a worker")
def delete_worker(worker_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    worker = crud_service.get_or_404(db, Worker, worker_id)
    crud_service.ensure_owner_has_no_vehicles(db, worker)
    crud_service.delete(db, worker)
    return {"message": "Worker deleted"}
