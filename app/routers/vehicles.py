# app/routers/vehicles.py
"""Registered vehicles. Each vehicle belongs to a Worker, Supplier or Leoni staff member."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_user, require_admin
from app.errors import NotFoundError
from app.models import User, Vehicle
from app.schemas.common import MessageOut
from app.schemas.vehicle import VehicleCreate, VehicleOut, VehiclePageOut, VehicleUpdate
from app.services import crud_service, owner_resolver

router = APIRouter()

UNIQUE_FIELDS = ("lic_plate_string",)
SEARCH_COLUMNS = ("lic_plate_string", "mark", "model", "color")


def _require_owner(db: Session, owner_id: int, owner_type):
    if not owner_resolver.exists(db, owner_id, owner_type):
        raise NotFoundError(f"Owner {owner_resolver.parse_person_type(owner_type).value} #{owner_id} not found")


def _with_owner(db: Session, vehicles):
    owners = owner_resolver.resolve_many(db, [(v.owner_id, v.owner_type) for v in vehicles])
    out = []
    for vehicle in vehicles:
        item = VehicleOut.model_validate(vehicle)
        owner = owners.get(owner_resolver.PersonRef(vehicle.owner_id, owner_resolver.parse_person_type(vehicle.owner_type)))
        item.owner_info = owner.to_dict() if owner else None
        out.append(item)
    return out


@router.get("/vehicles", response_model=VehiclePageOut, summary="List registered vehicles")
def list_vehicles(
    search: Optional[str] = None,
    owner_type: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if owner_type:
        owner_type = owner_resolver.parse_person_type(owner_type).value
    result = crud_service.search_page(
        db, Vehicle, search, SEARCH_COLUMNS, Vehicle.created_at.desc(), page, limit,
        filters={"owner_type": owner_type} if owner_type else None,
    )
    return {"data": _with_owner(db, result.items), "pagination": result.meta()}


@router.get("/vehicles/lookup/{plate}", response_model=VehicleOut, summary="Look up a plate number")
def lookup_vehicle(plate: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    vehicle = db.query(Vehicle).filter(Vehicle.lic_plate_string == plate.strip().upper()).first()
    if not vehicle:
        raise NotFoundError(f"Plate {plate} is not registered")
    return _with_owner(db, [vehicle])[0]


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Get one vehicle")
def get_vehicle(vehicle_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _with_owner(db, [crud_service.get_or_404(db, Vehicle, vehicle_id)])[0]


@router.post("/vehicles", response_model=VehicleOut, status_code=201, summary="Register a vehicle")
def register_vehicle(body: VehicleCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    _require_owner(db, body.owner_id, body.owner_type)
    values = body.model_dump()
    values["owner_type"] = body.owner_type.value
    vehicle = crud_service.create(db, Vehicle, values, UNIQUE_FIELDS)
    return _with_owner(db, [vehicle])[0]


@router.put("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Update a vehicle")
def update_vehicle(
    vehicle_id: int,
    body: VehicleUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    vehicle = crud_service.get_or_404(db, Vehicle, vehicle_id)
    values = body.model_dump(exclude_unset=True)
    if "owner_type" in values and values["owner_type"] is not None:
        values["owner_type"] = values["owner_type"].value
    if "owner_id" in values or "owner_type" in values:
        _require_owner(db, values.get("owner_id", vehicle.owner_id), values.get("owner_type") or vehicle.owner_type)
    vehicle = crud_service.update(db, vehicle, values, UNIQUE_FIELDS)
    return _with_owner(db, [vehicle])[0]


@router.delete("/vehicles/{vehicle_id}", response_model=MessageOut, summary="Remove a vehicle")
def remove_vehicle(vehicle_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    vehicle = crud_service.get_or_404(db, Vehicle, vehicle_id)
    plate = vehicle.lic_plate_string
    crud_service.delete(db, vehicle)
    return {"message": f"Vehicle {plate} removed"}
