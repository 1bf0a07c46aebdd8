# scripts/import_vehicles.py
"""
Import a vehicle spreadsheet straight into the database (no HTTP).
Same pipeline as POST /api/v1/vehicles/import/file.
Usage: python scripts/import_vehicles.py data/vehiculos.xlsx [--chunk-size 50]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.database import SessionLocal, create_tables
from app.services.errors import SpreadsheetError
from app.services.import_pipeline import import_vehicles
from app.services.spreadsheet_reader import read_rows
from app.services.vehicle_store import VehicleStore


def main():
    parser = argparse.ArgumentParser(description="Bulk import vehicles from .xlsx or .csv")
    parser.add_argument("path")
    parser.add_argument("--chunk-size", type=int, default=None)
    args = parser.parse_args()

    if not os.path.exists(args.path):
        print(f"❌ File not found: {args.path}")
        sys.exit(1)

    with open(args.path, "rb") as fh:
        content = fh.read()
    try:
        rows = read_rows(os.path.basename(args.path), content)
    except SpreadsheetError as e:
        print(f"❌ {e}")
        sys.exit(1)
    print(f"📊 {len(rows)} rows found in {args.path}")

    create_tables()
    db = SessionLocal()
    try:
        result = import_vehicles(VehicleStore(db), rows, chunk_size=args.chunk_size)
    finally:
        db.close()

    print(f"\n{'✅' if result.success else '❌'} {result.message}")
    print(f"   - Inserted:   {result.inserted_count}")
    print(f"   - Updated:    {result.updated_count}")
    print(f"   - Skipped:    {result.skipped_count}")
    print(f"   - Duplicates: {result.duplicate_count}")
    for err in result.errors:
        print(f"   ⚠️  {err}")
    if result.errors_truncated:
        print("   ... more errors in logs/registry.log")
    sys.exit(0 if result.success else 2)


if __name__ == "__main__":
    main()
