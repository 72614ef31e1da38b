"""
Endpoints del relay de sincronizacion.

El relay no ejecuta el pipeline en el proceso del API: lanza el CLI
(`python -m restock_sync.cli <comando>`) como subproceso, espera a que
termine y devuelve su salida. Asi un sync largo no comparte memoria ni
estado con el servidor.
"""
import asyncio
import subprocess
import sys
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse
from loguru import logger

from restock_sync.application.dto.sync_dto import SyncRunResponseDTO
from restock_sync.cli import COMMANDS
from restock_sync.core.config import settings
from restock_sync.shared.exceptions.domain import UnknownSyncCommandException


router = APIRouter(prefix="/sync", tags=["Sync"])


def build_cli_args(
    command: str,
    *,
    location: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    day: Optional[date] = None,
    codes: Optional[str] = None,
    from_sales: bool = False,
    verify: bool = False,
) -> List[str]:
    """Traduce los query params del relay a argumentos del CLI."""
    args = [sys.executable, "-m", "restock_sync.cli", command]
    if location:
        args.append(f"--location={location}")
    if day:
        args.append(f"--date={day.isoformat()}")
    if start:
        args.append(f"--start={start.isoformat()}")
    if end:
        args.append(f"--end={end.isoformat()}")
    if codes:
        args.append(f"--codes={codes}")
    if from_sales:
        args.append("--from-sales")
    if verify:
        args.append("--verify")
    return args


def run_cli(args: List[str]) -> subprocess.CompletedProcess:
    """
    Ejecuta el CLI y espera a que termine.
    Esta funcion es sincrona y se ejecuta en un thread separado.
    """
    return subprocess.run(
        args,
        capture_output=True,
        text=True,
        timeout=settings.SYNC_SUBPROCESS_TIMEOUT_S,
    )


@router.post(
    "/{command}",
    response_model=SyncRunResponseDTO,
    status_code=status.HTTP_200_OK,
    summary="Ejecutar un comando de sync",
)
async def run_sync_command(
    command: str,
    location: Optional[str] = Query(None, description="Tienda (newtown | paddington)"),
    start: Optional[date] = Query(None, description="Primer dia (YYYY-MM-DD)"),
    end: Optional[date] = Query(None, description="Ultimo dia (YYYY-MM-DD), inclusive"),
    day: Optional[date] = Query(None, alias="date", description="Un solo dia (YYYY-MM-DD)"),
    codes: Optional[str] = Query(None, description="stock: codigos separados por coma"),
    from_sales: bool = Query(False, description="stock: productos vendidos en la ventana"),
    verify: bool = Query(False, description="Loguear el total de filas al terminar"),
):
    """
    Lanza `restock_sync.cli <command>` y devuelve su salida.

    - 200 con `output` si el proceso termino con codigo 0
    - 500 con `error` y `code` si fallo, no pudo lanzarse o excedio el timeout
    """
    if command not in COMMANDS:
        raise UnknownSyncCommandException(command, list(COMMANDS))

    args = build_cli_args(
        command,
        location=location,
        start=start,
        end=end,
        day=day,
        codes=codes,
        from_sales=from_sales,
        verify=verify,
    )
    logger.info(f"Relay: ejecutando '{command}' ({' '.join(args[3:])})")

    try:
        # Ejecutar en thread separado para no bloquear el event loop
        completed = await asyncio.to_thread(run_cli, args)
    except subprocess.TimeoutExpired:
        logger.error(f"Relay: '{command}' excedio {settings.SYNC_SUBPROCESS_TIMEOUT_S}s")
        return _failure(command, f"Timeout tras {settings.SYNC_SUBPROCESS_TIMEOUT_S}s", None)
    except OSError as e:
        logger.error(f"Relay: no se pudo lanzar '{command}': {e}")
        return _failure(command, str(e), None)

    if completed.returncode != 0:
        logger.error(f"Relay: '{command}' termino con codigo {completed.returncode}")
        return _failure(command, completed.stderr or completed.stdout, completed.returncode)

    logger.info(f"Relay: '{command}' completado")
    return SyncRunResponseDTO(
        success=True,
        message=f"{command} completado",
        output=completed.stdout,
    )


def _failure(command: str, error: str, code: Optional[int]) -> JSONResponse:
    body = SyncRunResponseDTO(
        success=False,
        message=f"{command} fallo",
        error=error,
        code=code,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(exclude_none=True),
    )
