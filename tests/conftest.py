# tests/conftest.py
"""Shared fixtures: an in-memory store double and a throwaway SQLite session."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from types import SimpleNamespace
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa  registers Driver + Vehicle on Base.metadata
from app.database import Base
from app.models.driver import Driver
from app.services.errors import VehicleNotFoundError
from app.services.vehicle_store import InsertResult


class FakeVehicleStore:
    """
    Dict-backed stand-in for VehicleStore.
    `broken_plates` makes any chunk / update touching those plates raise.
    `calls` records every method call in order.
    """

    def __init__(self, drivers=(), broken_plates=()):
        self.vehicles = {}
        self.drivers = {d: SimpleNamespace(id=d, name=f"Driver {d}", email=None) for d in drivers}
        self.broken_plates = set(broken_plates)
        self.fail_lookups = False
        self.calls = []

    def exists_plates(self, plates):
        self.calls.append(("exists_plates", set(plates)))
        if self.fail_lookups:
            raise ConnectionError("database unreachable")
        return {p for p in plates if p in self.vehicles}

    def exists_driver_ids(self, ids):
        self.calls.append(("exists_driver_ids", set(ids)))
        if self.fail_lookups:
            raise ConnectionError("database unreachable")
        return {i for i in ids if i in self.drivers}

    def create_vehicles_bulk(self, records):
        self.calls.append(("create_vehicles_bulk", len(records)))
        if any(r.placa in self.broken_plates for r in records):
            raise ValueError("value too long for column placa")
        inserted = 0
        for rec in records:
            if rec.placa in self.vehicles:
                continue
            self.vehicles[rec.placa] = SimpleNamespace(placa=rec.placa, **rec.as_columns())
            inserted += 1
        return InsertResult(requested=len(records), inserted=inserted,
                            skipped_as_duplicate=len(records) - inserted)

    def update_vehicle_by_plate(self, plate, patch):
        self.calls.append(("update_vehicle_by_plate", plate))
        if plate in self.broken_plates:
            raise ValueError("deadlock detected")
        vehicle = self.find_vehicle_by_plate(plate)
        for key, value in patch.items():
            setattr(vehicle, key, value)
        return vehicle

    def find_vehicle_by_plate(self, plate):
        if plate not in self.vehicles:
            raise VehicleNotFoundError(plate)
        return self.vehicles[plate]

    def find_vehicles_by_plates(self, plates):
        return [self.vehicles[p] for p in sorted(set(plates)) if p in self.vehicles]

    def find_driver_by_id(self, driver_id):
        return self.drivers.get(driver_id)

    def snapshot(self):
        return {p: dict(vars(v)) for p, v in self.vehicles.items()}


@pytest.fixture
def fake_store():
    return FakeVehicleStore(drivers=["111", "222"])


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = Session()
    db.add_all([
        Driver(id="111", name="Ana Pérez", email="ana@vehicar.com", password="!", role="USER"),
        Driver(id="222", name="Luis Gómez", email="luis@vehicar.com", password="!", role="USER"),
    ])
    db.commit()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def store_factory():
    return FakeVehicleStore
