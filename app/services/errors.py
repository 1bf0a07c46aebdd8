"""Domain errors raised by the vehicle services. Routers map them to HTTP status codes."""


class RegistryError(Exception):
    """Base class for registry errors."""


class VehicleNotFoundError(RegistryError):
    def __init__(self, placa: str):
        self.placa = placa
        super().__init__(f"No se encontró ningún vehículo con la placa {placa}")


class VehicleAlreadyExistsError(RegistryError):
    def __init__(self, placa: str):
        self.placa = placa
        super().__init__(f"Ya existe un vehículo con la placa {placa}")


class SpreadsheetError(RegistryError):
    """The uploaded file could not be read as a spreadsheet."""
