"""Vehicle registry — lookup, listing, manual registration and cedula correction."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.vehicle import CedulaUpdate, PlatesQuery, VehicleConnection, VehicleCreate, VehicleOut
from app.services import vehicle_service
from app.services.errors import VehicleAlreadyExistsError, VehicleNotFoundError
from app.services.vehicle_store import VehicleStore

router = APIRouter()


def get_store(db: Session = Depends(get_db)) -> VehicleStore:
    """FastAPI dependency — one store per request, bound to the request session."""
    return VehicleStore(db)


@router.get("/vehicles", response_model=VehicleConnection, summary="List vehicles (paginated)")
def list_vehicles(skip: int = 0, take: int = 10, store: VehicleStore = Depends(get_store)):
    vehicles, total = vehicle_service.list_vehicles(store, skip=skip, take=take)
    return {"vehicles": vehicles, "total_count": total}


@router.post("/vehicles/by-plates", response_model=list[VehicleOut], summary="Read vehicles for a list of plates")
def get_vehicles_by_plates(body: PlatesQuery, store: VehicleStore = Depends(get_store)):
    return vehicle_service.get_vehicles_by_plates(store, body.placas)


@router.get("/vehicles/{placa}", response_model=VehicleOut, summary="Look up a plate")
def get_vehicle(placa: str, store: VehicleStore = Depends(get_store)):
    try:
        return vehicle_service.get_vehicle_by_plate(store, placa)
    except VehicleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/vehicles", response_model=VehicleOut, status_code=201, summary="Register a vehicle")
def create_vehicle(body: VehicleCreate, store: VehicleStore = Depends(get_store)):
    try:
        return vehicle_service.create_vehicle(store, body)
    except (VehicleAlreadyExistsError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/vehicles/{placa}/cedula", response_model=VehicleOut, summary="Correct the cedula of one vehicle")
def update_vehicle_cedula(placa: str, body: CedulaUpdate, store: VehicleStore = Depends(get_store)):
    """
    Stores the new cedula as typed and links the driver only if one exists
    with that ID. Earlier imports are never re-linked automatically.
    """
    try:
        return vehicle_service.update_vehicle_cedula(store, placa, body.cedula)
    except VehicleNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
