"""
Excepción base para todas las excepciones personalizadas de la aplicación.
"""
from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Excepción base de la aplicación.
    Todo error que deba llegar al relay HTTP o al CLI con un mensaje legible
    hereda de esta clase.

    Args:
        message: Mensaje de error descriptivo
        status_code: Código de estado HTTP
        error_code: Código de error estable (lo consume el cliente del relay)
        details: Detalles adicionales del error
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_response(self) -> Dict[str, Any]:
        """Cuerpo JSON con la misma forma que las respuestas fallidas del relay."""
        return {
            "success": False,
            "message": self.message,
            "error": self.error_code,
            "details": self.details,
        }
