# app/routers/schedule_presence.py
"""Planned supplier visits."""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user
from app.models import SchedulePresence, User
from app.models.enums import ScheduleStatus
from app.schemas.common import MessageOut
from app.schemas.schedule_presence import ScheduleCreate, ScheduleOut, SchedulePageOut, ScheduleUpdate
from app.services import crud_service

router = APIRouter()


@router.get("/schedule-presence", response_model=SchedulePageOut, summary="List planned visits")
def list_schedules(
    search: Optional[str] = None,
    on: Optional[date] = None,
    status: Optional[ScheduleStatus] = None,
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    filters = {}
    if on:
        filters["date"] = on
    if status:
        filters["status"] = status.value
    result = crud_service.search_page(
        db, SchedulePresence, search, ("supplier_name", "reason"),
        SchedulePresence.date.asc(), page, limit, filters=filters,
    )
    return {"data": result.items, "pagination": result.meta()}


@router.get("/schedule-presence/{schedule_id}", response_model=ScheduleOut, summary="Get one planned visit")
def get_schedule(schedule_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return crud_service.get_or_404(db, SchedulePresence, schedule_id, "Schedule")


@router.post("/schedule-presence", response_model=ScheduleOut, status_code=201, summary="Plan a supplier visit")
def create_schedule(body: ScheduleCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    values = body.model_dump()
    values["status"] = ScheduleStatus.SCHEDULED.value
    values["created_by"] = user.id
    return crud_service.create(db, SchedulePresence, values)


@router.put("/schedule-presence/{schedule_id}", response_model=ScheduleOut, summary="Update a planned visit")
def update_schedule(
    schedule_id: int,
    body: ScheduleUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    schedule = crud_service.get_or_404(db, SchedulePresence, schedule_id, "Schedule")
    values = body.model_dump(exclude_unset=True)
    if values.get("status") is not None:
        values["status"] = values["status"].value
    return crud_service.update(db, schedule, values)


@router.delete("/schedule-presence/{schedule_id}", response_model=MessageOut, summary="Delete a planned visit")
def delete_schedule(schedule_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    schedule = crud_service.get_or_404(db, SchedulePresence, schedule_id, "Schedule")
    crud_service.delete(db, schedule)
    return {"message": "Schedule deleted"}
