"""
Registry health check.
Reports backend + DB status and how many vehicles and drivers are stored,
so an operator can confirm an import landed without opening the database.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.models.driver import Driver
from app.models.vehicle import Vehicle
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "vehicles": None,
        "drivers": None,
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
        result["vehicles"] = db.query(Vehicle).count()
        result["drivers"] = db.query(Driver).count()
    except Exception as e:
        db.rollback()
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
