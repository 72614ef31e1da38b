"""
DTOs del relay HTTP de sincronizacion.
"""
from typing import Optional

from pydantic import BaseModel, Field


class SyncRunResponseDTO(BaseModel):
    """Resultado de una corrida del CLI lanzada desde el relay."""

    success: bool
    message: str
    output: Optional[str] = Field(None, description="stdout del comando (si termino bien)")
    error: Optional[str] = Field(None, description="stderr / motivo del fallo")
    code: Optional[int] = Field(None, description="Codigo de salida del proceso")
