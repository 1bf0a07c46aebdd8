"""
Registered vehicles table.
Keyed by the normalized plate. `cedula` keeps whatever ID was typed or imported;
`conductor_id` is only set when that ID resolved to an existing driver at write time.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    placa = Column(String(20), unique=True, nullable=False, index=True)
    cedula = Column(String(50), nullable=False, default="")
    estado = Column(String(50), nullable=False, default="ACTIVO")
    tipo_vehiculo = Column(String(50), nullable=False, default="AUTOMOVIL")
    origen = Column(String(50), nullable=False, default="EXCEL")
    nombre = Column(String(200), nullable=False, default="")
    cargo = Column(String(200), nullable=False, default="")
    area = Column(String(200), nullable=False, default="")
    conductor_id = Column(String(50), ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    conductor = relationship("Driver", lazy="joined")

    def __repr__(self):
        return f"<Vehicle {self.placa} cedula={self.cedula} conductor={self.conductor_id}>"
