"""
Drivers ("conductores") — the users table.
The national ID (cedula) is the primary key and the login identity.
The import pipeline only reads this table; drivers are created by the setup script.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime
from app.database import Base


class Driver(Base):
    __tablename__ = "users"

    id = Column(String(50), primary_key=True)      # cedula
    name = Column(String(200), nullable=False)
    email = Column(String(200), unique=True, nullable=False)
    password = Column(String(200), nullable=False)  # hashed, never read here
    role = Column(String(20), nullable=False, default="USER")  # ADMIN | USER | HR
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Driver {self.id} name={self.name} role={self.role}>"
