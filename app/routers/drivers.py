"""Drivers — read-only lookup by cedula."""

from fastapi import APIRouter, Depends, HTTPException
from app.routers.vehicles import get_store
from app.schemas.driver import DriverOut
from app.services.vehicle_store import VehicleStore

router = APIRouter()


@router.get("/drivers/{driver_id}", response_model=DriverOut, summary="Look up a driver by cedula")
def get_driver(driver_id: str, store: VehicleStore = Depends(get_store)):
    driver = store.find_driver_by_id(driver_id.strip())
    if not driver:
        raise HTTPException(status_code=404, detail=f"Driver '{driver_id}' not found")
    return driver
