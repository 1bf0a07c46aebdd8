# app/schemas/vehicle.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from app.schemas.driver import DriverSummary


class VehicleCreate(BaseModel):
    placa: str
    conductor_id: Optional[str] = None
    estado: Optional[str] = None
    tipo_vehiculo: Optional[str] = None
    origen: Optional[str] = None
    nombre: Optional[str] = None
    cargo: Optional[str] = None
    area: Optional[str] = None


class CedulaUpdate(BaseModel):
    cedula: str


class PlatesQuery(BaseModel):
    placas: list[str]


class VehicleOut(BaseModel):
    id: str
    placa: str
    cedula: str
    estado: str
    tipo_vehiculo: str
    origen: str
    nombre: str
    cargo: str
    area: str
    conductor_id: Optional[str]
    conductor: Optional[DriverSummary]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class VehicleConnection(BaseModel):
    vehicles: list[VehicleOut]
    total_count: int
