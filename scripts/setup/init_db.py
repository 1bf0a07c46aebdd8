"""
Initialize database — creates all tables.
Run once before first launch, or after adding new models.
Optionally seeds one driver so imports have someone to link to.
Usage: python scripts/setup/init_db.py [--seed-id 1234567890 --seed-name "Admin" --seed-email admin@vehicar.com]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from sqlalchemy import inspect, text
from app.database import SessionLocal, create_tables, engine
from app.config import settings
from app.models.driver import Driver


def seed_driver(driver_id: str, name: str, email: str, role: str):
    db = SessionLocal()
    try:
        if db.query(Driver).filter(Driver.id == driver_id).first():
            print(f"ℹ️  Driver {driver_id} already exists")
            return
        # Credentials are managed by the auth service; "!" marks no local password
        db.add(Driver(id=driver_id, name=name, email=email, password="!", role=role))
        db.commit()
        print(f"✅ Driver {driver_id} ({role}) created")
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Create tables and optionally seed a driver")
    parser.add_argument("--seed-id")
    parser.add_argument("--seed-name", default="Administrador")
    parser.add_argument("--seed-email", default="admin@vehicar.com")
    parser.add_argument("--seed-role", default="ADMIN", choices=["ADMIN", "USER", "HR"])
    args = parser.parse_args()

    print("🗄️  Vehicar DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"✅ Tables ready ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if args.seed_id:
        seed_driver(args.seed_id.strip(), args.seed_name, args.seed_email, args.seed_role)

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn app.main:app --host 0.0.0.0 --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
