"""
Single-record vehicle operations: lookup, listing, manual registration
and cedula correction. Unlike the bulk import these raise typed errors.
"""

from typing import Iterable
from app.config import settings
from app.models.vehicle import Vehicle
from app.schemas.vehicle import VehicleCreate
from app.services.errors import VehicleAlreadyExistsError, VehicleNotFoundError
from app.services.row_normalizer import VehicleFields, coalesce_blank, normalize_plate
from app.services.vehicle_store import VehicleStore
from app.utils.logger import get_logger

logger = get_logger(__name__)


def get_vehicle_by_plate(store: VehicleStore, placa: str) -> Vehicle:
    """Find a registered vehicle by plate. Raises VehicleNotFoundError."""
    return store.find_vehicle_by_plate(normalize_plate(placa))


def get_vehicles_by_plates(store: VehicleStore, placas: Iterable[str]) -> list[Vehicle]:
    """Authoritative read of the given plates, used to show what an import stored."""
    return store.find_vehicles_by_plates({normalize_plate(p) for p in placas})


def list_vehicles(store: VehicleStore, skip: int = 0, take: int = 10):
    return store.list_vehicles(skip=skip, take=take), store.count_vehicles()


def is_registered(store: VehicleStore, placa: str) -> bool:
    return bool(store.exists_plates([normalize_plate(placa)]))


def create_vehicle(store: VehicleStore, data: VehicleCreate) -> Vehicle:
    placa = normalize_plate(data.placa)
    if not placa:
        raise ValueError("La placa es obligatoria")
    if is_registered(store, placa):
        raise VehicleAlreadyExistsError(placa)

    cedula = (data.conductor_id or "").strip()
    conductor_id = cedula if cedula and store.find_driver_by_id(cedula) else None
    fields = VehicleFields(
        placa=placa,
        cedula=cedula,
        estado=coalesce_blank(data.estado, settings.DEFAULT_ESTADO).upper(),
        tipo_vehiculo=coalesce_blank(data.tipo_vehiculo, settings.DEFAULT_TIPO_VEHICULO).upper(),
        origen=coalesce_blank(data.origen, settings.DEFAULT_ORIGEN_REGISTRO).upper(),
        nombre=coalesce_blank(data.nombre, ""),
        cargo=coalesce_blank(data.cargo, settings.DEFAULT_CARGO_REGISTRO),
        area=coalesce_blank(data.area, settings.DEFAULT_AREA_REGISTRO),
        conductor_id=conductor_id,
    )
    vehicle = store.create_vehicle(fields)
    logger.info(f"Vehicle {placa} registered (conductor={conductor_id})")
    return vehicle


def update_vehicle_cedula(store: VehicleStore, placa: str, cedula: str) -> Vehicle:
    """
    Replace the cedula on one vehicle. The text is always stored; the driver
    link is set only if a driver with that ID exists right now, otherwise cleared.
    """
    placa = normalize_plate(placa)
    store.find_vehicle_by_plate(placa)  # raises VehicleNotFoundError before any write

    cedula = (cedula or "").strip()
    driver = store.find_driver_by_id(cedula) if cedula else None
    vehicle = store.update_vehicle_by_plate(placa, {
        "cedula": cedula,
        "conductor_id": driver.id if driver else None,
    })
    logger.info(f"Cedula for {placa} set to '{cedula}' (linked={driver is not None})")
    return vehicle
