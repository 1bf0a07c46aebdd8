# app/services/spreadsheet_reader.py
"""
Reads an uploaded spreadsheet into header -> value rows.
.xlsx/.xlsm go through openpyxl (active sheet, first row is the header);
.csv is read with the csv module: BOM stripped, delimiter (";" or ",")
taken from the header line.
"""

import csv
import io
import os
from typing import Optional
import openpyxl
from app.services.errors import SpreadsheetError
from app.services.row_normalizer import RawRow
from app.utils.logger import get_logger

logger = get_logger(__name__)

EXCEL_EXTENSIONS = (".xlsx", ".xlsm")
CSV_EXTENSIONS = (".csv",)


def read_rows(filename: str, content: bytes) -> list[RawRow]:
    ext = os.path.splitext(filename or "")[1].lower()
    if ext in EXCEL_EXTENSIONS:
        rows = read_excel(content)
    elif ext in CSV_EXTENSIONS:
        rows = read_csv(content)
    else:
        raise SpreadsheetError(f"Formato no soportado: '{ext or filename}'. Use .xlsx o .csv")
    logger.info(f"Read {len(rows)} rows from {filename}")
    return rows


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def read_excel(content: bytes) -> list[RawRow]:
    try:
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise SpreadsheetError(f"No se pudo leer el archivo Excel: {e}") from e

    try:
        ws = wb.active
        if ws is None:
            raise SpreadsheetError("El archivo no tiene hojas")

        values = ws.iter_rows(values_only=True)
        header: Optional[tuple] = next(values, None)
        if header is None:
            return []
        columns = [str(h).strip() if h is not None else "" for h in header]

        rows = []
        for raw in values:
            if all(_is_blank(v) for v in raw):
                continue
            rows.append({col: val for col, val in zip(columns, raw) if col})
        return rows
    finally:
        wb.close()


def read_csv(content: bytes) -> list[RawRow]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = content.decode("latin-1")

    header_line = text.split("\n", 1)[0]
    delimiter = ";" if header_line.count(";") >= header_line.count(",") else ","

    reader = csv.DictReader(io.StringIO(text), delimiter=delimiter)
    rows = []
    for raw in reader:
        row = {k.strip(): v for k, v in raw.items() if k}
        if all(_is_blank(v) for v in row.values()):
            continue
        rows.append(row)
    return rows
