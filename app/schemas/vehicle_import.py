# app/schemas/vehicle_import.py
from pydantic import BaseModel
from typing import Any

from app.schemas.vehicle import VehicleOut


class BulkImportRequest(BaseModel):
    vehicles: list[dict[str, Any]]


class ImportResultOut(BaseModel):
    success: bool
    inserted_count: int
    updated_count: int
    skipped_count: int
    duplicate_count: int
    errors: list[str]
    errors_truncated: bool
    message: str
    notifications: list[str]

    class Config:
        from_attributes = True


class ImportResponse(BaseModel):
    result: ImportResultOut
    vehicles: list[VehicleOut]
