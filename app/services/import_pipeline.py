# app/services/import_pipeline.py
"""
Bulk vehicle import: spreadsheet rows -> stored vehicles.

Stages:
  1. normalize + validate rows (blank plate -> row error)
  2. report duplicate plates inside the input
  3. resolve which plates / driver IDs already exist (one bulk query each)
  4. insert new plates in fixed-size chunks, update existing plates one by one
  5. aggregate counts and capped errors into an ImportResult

Chunks and updates run strictly one after another. A failing chunk or
update is recorded and skipped; only a failure before chunking (the
existence lookups) aborts the import.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence, TypeVar
from app.config import settings
from app.services.row_normalizer import (
    RawRow,
    VehicleFields,
    detect_duplicate_plates,
    normalize_rows,
    to_vehicle_fields,
    validate_row,
)
from app.services.vehicle_store import VehicleStore
from app.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class Resolution:
    existing_plates: set[str]
    existing_driver_ids: set[str]


@dataclass
class ImportStats:
    inserted: int = 0
    updated: int = 0
    existing: int = 0
    duplicates: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class ImportResult:
    success: bool
    inserted_count: int
    updated_count: int
    skipped_count: int
    duplicate_count: int
    errors: list[str]
    errors_truncated: bool
    message: str
    notifications: list[str] = field(default_factory=list)
    plates: list[str] = field(default_factory=list)   # every plate submitted, for the follow-up read
    aborted: bool = False   # nothing was written; the session may be unusable


# ── Existence resolution ─────────────────────────────────────────────────────

def resolve_existing(store: VehicleStore, records: Sequence[VehicleFields]) -> Resolution:
    """One bulk lookup for plates and one for driver IDs, over the whole input."""
    plates = {r.placa for r in records}
    cedulas = {r.cedula for r in records if r.cedula}
    return Resolution(
        existing_plates=store.exists_plates(plates),
        existing_driver_ids=store.exists_driver_ids(cedulas),
    )


def partition_records(records: Iterable[VehicleFields], existing_plates: set[str]):
    """Split into (new_records, existing_records) by plate."""
    new_records, existing_records = [], []
    for rec in records:
        (existing_records if rec.placa in existing_plates else new_records).append(rec)
    return new_records, existing_records


def link_driver(rec: VehicleFields, existing_driver_ids: set[str]) -> VehicleFields:
    rec.conductor_id = rec.cedula if rec.cedula and rec.cedula in existing_driver_ids else None
    return rec


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


# ── Upsert engine ────────────────────────────────────────────────────────────

def insert_new_records(store: VehicleStore, records: Sequence[VehicleFields],
                       driver_ids: set[str], chunk_size: int, stats: ImportStats) -> None:
    for number, chunk in enumerate(chunked(records, chunk_size), start=1):
        for rec in chunk:
            link_driver(rec, driver_ids)
        try:
            result = store.create_vehicles_bulk(chunk)
        except Exception as e:
            logger.error(f"[IMPORT] Chunk {number} ({len(chunk)} rows) failed: {e}")
            stats.errors.append(f"Lote {number}: {e}")
            continue
        stats.inserted += result.inserted
        stats.duplicates += result.skipped_as_duplicate
        logger.debug(f"[IMPORT] Chunk {number}: {result.inserted}/{result.requested} inserted")


def update_existing_records(store: VehicleStore, records: Sequence[VehicleFields],
                            driver_ids: set[str], stats: ImportStats) -> None:
    stats.existing += len(records)
    for rec in records:
        link_driver(rec, driver_ids)
        try:
            store.update_vehicle_by_plate(rec.placa, rec.as_patch())
        except Exception as e:
            logger.error(f"[IMPORT] Update of {rec.placa} failed: {e}")
            stats.errors.append(f"Placa {rec.placa}: {e}")
            continue
        stats.updated += 1


# ── Result aggregation ───────────────────────────────────────────────────────

def compose_message(inserted: int, updated: int, skipped: int, duplicates: int) -> str:
    clauses = []
    if inserted > 0:
        clauses.append(f"{inserted} insertados")
    if updated > 0:
        clauses.append(f"{updated} actualizados")
    if skipped > 0:
        clauses.append(f"{skipped} omitidos")
    if duplicates > 0:
        clauses.append(f"{duplicates} duplicados")
    if not clauses:
        return "Proceso completado: sin cambios"
    return "Proceso completado: " + ", ".join(clauses)


def notification_lines(errors: Sequence[str], total_errors: int, cap: Optional[int] = None) -> list[str]:
    """First few errors for the toast side-channel, plus a "... and N more" line."""
    cap = settings.IMPORT_NOTIFY_ERROR_CAP if cap is None else cap
    lines = list(errors[:cap])
    if total_errors > cap:
        lines.append(f"... y {total_errors - cap} errores más")
    return lines


def build_result(stats: ImportStats, plates: Sequence[str] = (), error_cap: Optional[int] = None) -> ImportResult:
    error_cap = settings.IMPORT_ERROR_CAP if error_cap is None else error_cap
    # Failed updates land here as well as in errors
    skipped = stats.existing - stats.updated
    return ImportResult(
        success=stats.inserted > 0 or stats.updated > 0,
        inserted_count=stats.inserted,
        updated_count=stats.updated,
        skipped_count=skipped,
        duplicate_count=stats.duplicates,
        errors=stats.errors[:error_cap],
        errors_truncated=len(stats.errors) > error_cap,
        message=compose_message(stats.inserted, stats.updated, skipped, stats.duplicates),
        notifications=notification_lines(stats.errors, len(stats.errors)),
        plates=list(plates),
    )


def build_failure(exc: Exception, plates: Sequence[str] = ()) -> ImportResult:
    errors = [str(exc)]
    return ImportResult(
        success=False,
        inserted_count=0,
        updated_count=0,
        skipped_count=0,
        duplicate_count=0,
        errors=errors,
        errors_truncated=False,
        message="Error general en la importación",
        notifications=notification_lines(errors, len(errors)),
        plates=list(plates),
        aborted=True,
    )


# ── Entry point ──────────────────────────────────────────────────────────────

def import_vehicles(store: VehicleStore, raw_rows: Sequence[RawRow],
                    chunk_size: Optional[int] = None) -> ImportResult:
    chunk_size = chunk_size or settings.IMPORT_CHUNK_SIZE
    logger.info(f"[IMPORT] Starting import of {len(raw_rows)} rows (chunk size {chunk_size})")

    stats = ImportStats()
    records: list[VehicleFields] = []
    plates: list[str] = []
    try:
        rows = normalize_rows(raw_rows)
        for row in rows:
            check = validate_row(row)
            if not check.ok:
                logger.warning(f"[IMPORT] {check.error}")
                stats.errors.append(check.error)
                continue
            records.append(to_vehicle_fields(check.row))

        plates = list(dict.fromkeys(r.placa for r in records))
        for placa in detect_duplicate_plates(rows):
            stats.errors.append(f"Placa {placa} duplicada en el archivo")

        resolution = resolve_existing(store, records)
    except Exception as e:
        logger.error(f"[IMPORT] Import aborted before writing: {e}", exc_info=True)
        return build_failure(e, plates)

    new_records, existing_records = partition_records(records, resolution.existing_plates)
    logger.info(f"[IMPORT] {len(new_records)} new, {len(existing_records)} existing, "
                f"{len(resolution.existing_driver_ids)} known drivers")

    insert_new_records(store, new_records, resolution.existing_driver_ids, chunk_size, stats)
    update_existing_records(store, existing_records, resolution.existing_driver_ids, stats)

    result = build_result(stats, plates)
    logger.info(f"[IMPORT] {result.message} ({len(stats.errors)} errors)")
    return result
