"""
Excepciones relacionadas con la lógica de dominio.
"""
from restock_sync.shared.exceptions.base import AppException


class DomainException(AppException):
    """Excepción base para errores de dominio."""
    
    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details
        )


class InvalidLocationException(DomainException):
    """Excepción cuando la tienda proporcionada no es válida."""
    
    def __init__(self, location: str, valid_locations: list[str]):
        super().__init__(
            message=f"La tienda '{location}' no es válida",
            error_code="INVALID_LOCATION",
            details={
                "location_provided": location,
                "valid_locations": valid_locations
            }
        )


class UnknownSyncCommandException(DomainException):
    """Excepcion cuando se pide un comando de sync que no existe."""
    
    def __init__(self, command: str, valid_commands: list[str]):
        super().__init__(
            message=f"Comando de sync '{command}' no encontrado",
            error_code="SYNC_COMMAND_NOT_FOUND",
            details={
                "command": command,
                "valid_commands": valid_commands
            }
        )
        self.status_code = 404
