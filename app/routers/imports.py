"""
Bulk vehicle import.
POST /vehicles/import       — rows already parsed by the client (JSON)
POST /vehicles/import/file  — .xlsx / .csv upload, parsed here
Both answer with the import summary plus a fresh read of every submitted plate
(empty when the import aborted before writing).
"""

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from app.config import settings
from app.routers.vehicles import get_store
from app.schemas.vehicle_import import BulkImportRequest, ImportResponse
from app.services.errors import SpreadsheetError
from app.services.import_pipeline import ImportResult, import_vehicles
from app.services.spreadsheet_reader import read_rows
from app.services.vehicle_store import VehicleStore
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def _respond(store: VehicleStore, result: ImportResult) -> dict:
    if result.aborted:
        return {"result": result, "vehicles": []}

    # Show what is actually stored rather than trusting the counters
    try:
        vehicles = store.find_vehicles_by_plates(result.plates)
    except Exception as e:
        store.db.rollback()
        logger.error(f"[IMPORT] Follow-up read of {len(result.plates)} plates failed: {e}")
        vehicles = []
    return {"result": result, "vehicles": vehicles}


@router.post("/vehicles/import", response_model=ImportResponse, summary="Bulk import parsed rows")
def import_rows(body: BulkImportRequest, store: VehicleStore = Depends(get_store)):
    if not body.vehicles:
        raise HTTPException(status_code=400, detail="No hay datos para guardar")
    result = import_vehicles(store, body.vehicles)
    return _respond(store, result)


@router.post("/vehicles/import/file", response_model=ImportResponse, summary="Bulk import a spreadsheet file")
async def import_file(file: UploadFile = File(...), store: VehicleStore = Depends(get_store)):
    content = await file.read()
    if len(content) > settings.IMPORT_MAX_FILE_MB * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"El archivo supera {settings.IMPORT_MAX_FILE_MB} MB")

    try:
        rows = read_rows(file.filename, content)
    except SpreadsheetError as e:
        logger.warning(f"[IMPORT] Rejected upload {file.filename}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    if not rows:
        raise HTTPException(status_code=400, detail="El archivo no contiene registros")

    result = import_vehicles(store, rows)
    return _respond(store, result)
