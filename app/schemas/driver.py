# app/schemas/driver.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class DriverSummary(BaseModel):
    id: str
    name: str
    email: Optional[str]

    class Config:
        from_attributes = True


class DriverOut(DriverSummary):
    role: str
    created_at: Optional[datetime]
