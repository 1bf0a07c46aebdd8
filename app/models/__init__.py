# Vehicar Registry — Database Models
# Import all models here for SQLAlchemy discovery

from app.models.driver import Driver     # noqa
from app.models.vehicle import Vehicle   # noqa
