"""
Configuracion de logging (loguru).
"""
import sys
from typing import Optional

from loguru import logger


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Reemplaza el sink por defecto de loguru.
    
    Args:
        level: Nivel minimo de log
        log_file: Ruta del archivo de log (rotado). None = solo stderr
    """
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_file:
        logger.add(
            log_file,
            rotation="500 MB",
            retention="10 days",
            level=level
        )
