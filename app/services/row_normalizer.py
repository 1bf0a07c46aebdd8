# app/services/row_normalizer.py
"""
Turns loosely-typed spreadsheet rows into canonical vehicle rows.

Header matching ignores case, accents and extra spacing, so "CÉDULA",
"Cedula " and "cedula" all land in the same field. Unknown columns are dropped.
Nothing here touches the database.
"""

import secrets
import time
import unicodedata
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

RawRow = dict[str, Union[str, int, float, None]]

# normalized header -> canonical field
HEADER_ALIASES = {
    "cedula": "cedula",
    "placa": "placa",
    "estado": "estado",
    "tipo de vehiculo": "tipo_vehiculo",
    "tipo vehiculo": "tipo_vehiculo",
    "tipovehiculo": "tipo_vehiculo",
    "tipo": "tipo_vehiculo",
    "origen": "origen",
    "nombre": "nombre",
    "cargo": "cargo",
    "area": "area",
}


@dataclass
class CanonicalRow:
    index: int                  # position in the source file (0-based)
    uid: str                    # in-memory only, never persisted
    placa: str = ""
    cedula: str = ""
    estado: str = ""
    tipo_vehiculo: str = ""
    origen: str = ""
    nombre: str = ""
    cargo: str = ""
    area: str = ""


@dataclass
class RowCheck:
    """Per-row validation outcome: exactly one of `row` / `error` is set."""
    row: Optional[CanonicalRow] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class VehicleFields:
    """Write-ready values for one vehicle, after defaults and casing."""
    placa: str
    cedula: str
    estado: str
    tipo_vehiculo: str
    origen: str
    nombre: str = ""
    cargo: str = ""
    area: str = ""
    conductor_id: Optional[str] = None
    source_index: Optional[int] = field(default=None, compare=False)

    def as_patch(self) -> dict:
        """Columns an import overwrites on an already registered plate."""
        return {
            "cedula": self.cedula,
            "estado": self.estado,
            "tipo_vehiculo": self.tipo_vehiculo,
            "origen": self.origen,
            "cargo": self.cargo,
            "area": self.area,
            "conductor_id": self.conductor_id,
        }

    def as_columns(self) -> dict:
        """Every column of a new row except the plate."""
        return {**self.as_patch(), "nombre": self.nombre}


def normalize_header(name) -> str:
    """Lowercase, strip accents, collapse whitespace."""
    text = unicodedata.normalize("NFKD", str(name))
    text = "".join(c for c in text if not unicodedata.combining(c))
    return " ".join(text.lower().split())


def normalize_plate(value) -> str:
    return cell_to_str(value).upper()


def cell_to_str(value) -> str:
    """Spreadsheet cell -> trimmed string. 1234.0 becomes "1234"."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def coalesce_blank(value: Optional[str], default: str) -> str:
    """Fall back to `default` only for None or whitespace-only strings ("0" is a real value)."""
    if value is None:
        return default
    text = str(value).strip()
    return text if text else default


def _new_uid(placa: str, index: int) -> str:
    return f"{placa or 'unknown'}-{index}-{time.time_ns()}{secrets.token_hex(3)}"


def normalize_row(raw: RawRow, index: int) -> CanonicalRow:
    row = CanonicalRow(index=index, uid="")
    for key, value in raw.items():
        target = HEADER_ALIASES.get(normalize_header(key))
        if target is None:
            continue
        setattr(row, target, cell_to_str(value))
    row.uid = _new_uid(row.placa, index)
    return row


def normalize_rows(raw_rows: Iterable[RawRow]) -> list[CanonicalRow]:
    return [normalize_row(raw, i) for i, raw in enumerate(raw_rows)]


def validate_row(row: CanonicalRow) -> RowCheck:
    """A row needs a plate to be written. A blank cedula is fine (no driver link)."""
    if not row.placa.strip():
        return RowCheck(error=f"Fila {row.index + 1}: placa vacía")
    return RowCheck(row=row)


def detect_duplicate_plates(rows: Iterable[CanonicalRow]) -> list[str]:
    """
    Plates that appear more than once (after normalization), in the order
    their second occurrence shows up. Rows are reported, not removed.
    """
    counts = Counter()
    duplicates = []
    for row in rows:
        placa = normalize_plate(row.placa)
        if not placa:
            continue
        counts[placa] += 1
        if counts[placa] == 2:
            duplicates.append(placa)

    if duplicates:
        logger.warning(f"[IMPORT] Duplicate plates in input: {', '.join(duplicates)}")
    return duplicates


def to_vehicle_fields(row: CanonicalRow, default_origen: Optional[str] = None) -> VehicleFields:
    return VehicleFields(
        placa=normalize_plate(row.placa),
        cedula=row.cedula.strip(),
        estado=coalesce_blank(row.estado, settings.DEFAULT_ESTADO).upper(),
        tipo_vehiculo=coalesce_blank(row.tipo_vehiculo, settings.DEFAULT_TIPO_VEHICULO).upper(),
        origen=coalesce_blank(row.origen, default_origen or settings.DEFAULT_ORIGEN_IMPORT).upper(),
        nombre=row.nombre.strip(),
        cargo=coalesce_blank(row.cargo, ""),
        area=coalesce_blank(row.area, ""),
        source_index=row.index,
    )
