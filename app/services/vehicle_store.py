# app/services/vehicle_store.py
"""
Persistence collaborator for the vehicle services.

Wraps one SQLAlchemy Session passed in by the caller (a request, a script or
a test). Existence checks are single `IN` queries; the bulk insert works on
one bounded chunk and commits it as a single transaction.
"""

from dataclasses import dataclass
from typing import Iterable, Optional
from sqlalchemy.orm import Session
from app.models.driver import Driver
from app.models.vehicle import Vehicle
from app.services.errors import VehicleNotFoundError
from app.services.row_normalizer import VehicleFields
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class InsertResult:
    requested: int
    inserted: int
    skipped_as_duplicate: int


class VehicleStore:
    def __init__(self, db: Session):
        self.db = db

    # ── Existence lookups ────────────────────────────────────────────────
    def exists_plates(self, plates: Iterable[str]) -> set[str]:
        plates = {p for p in plates if p}
        if not plates:
            return set()
        rows = self.db.query(Vehicle.placa).filter(Vehicle.placa.in_(plates)).all()
        return {r[0] for r in rows}

    def exists_driver_ids(self, ids: Iterable[str]) -> set[str]:
        ids = {i for i in ids if i}
        if not ids:
            return set()
        rows = self.db.query(Driver.id).filter(Driver.id.in_(ids)).all()
        return {r[0] for r in rows}

    # ── Writes ───────────────────────────────────────────────────────────
    def create_vehicles_bulk(self, records: list[VehicleFields]) -> InsertResult:
        """
        Insert one chunk, skipping plates that already exist or repeat inside
        the chunk. Any database error rolls the whole chunk back and propagates.
        """
        taken = self.exists_plates(r.placa for r in records)
        to_add = []
        for rec in records:
            if rec.placa in taken:
                continue
            taken.add(rec.placa)
            to_add.append(Vehicle(placa=rec.placa, **rec.as_columns()))

        try:
            self.db.add_all(to_add)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if len(to_add) < len(records):
            logger.debug(f"Bulk insert skipped {len(records) - len(to_add)} duplicate plates")
        return InsertResult(
            requested=len(records),
            inserted=len(to_add),
            skipped_as_duplicate=len(records) - len(to_add),
        )

    def update_vehicle_by_plate(self, plate: str, patch: dict) -> Vehicle:
        vehicle = self.find_vehicle_by_plate(plate)
        for key, value in patch.items():
            setattr(vehicle, key, value)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(vehicle)
        return vehicle

    def create_vehicle(self, fields: VehicleFields) -> Vehicle:
        vehicle = Vehicle(placa=fields.placa, **fields.as_columns())
        self.db.add(vehicle)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(vehicle)
        return vehicle

    # ── Reads ────────────────────────────────────────────────────────────
    def find_vehicles_by_plates(self, plates: Iterable[str]) -> list[Vehicle]:
        plates = {p for p in plates if p}
        if not plates:
            return []
        return (
            self.db.query(Vehicle)
            .filter(Vehicle.placa.in_(plates))
            .order_by(Vehicle.placa.asc())
            .all()
        )

    def find_vehicle_by_plate(self, plate: str) -> Vehicle:
        vehicle = self.db.query(Vehicle).filter(Vehicle.placa == plate).first()
        if not vehicle:
            raise VehicleNotFoundError(plate)
        return vehicle

    def find_driver_by_id(self, driver_id: str) -> Optional[Driver]:
        return self.db.query(Driver).filter(Driver.id == driver_id).first()

    def list_vehicles(self, skip: int = 0, take: int = 10) -> list[Vehicle]:
        return self.db.query(Vehicle).order_by(Vehicle.placa.asc()).offset(skip).limit(take).all()

    def count_vehicles(self) -> int:
        return self.db.query(Vehicle).count()
