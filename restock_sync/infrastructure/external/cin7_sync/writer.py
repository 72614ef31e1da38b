"""
Escritura por lotes hacia el store destino.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from loguru import logger

from .sink import SinkStore

DEFAULT_BATCH_SIZE = 100


@dataclass
class WriteResult:
    written: int = 0
    failed: int = 0
    failed_chunks: int = 0


class UpsertSinkWriter:
    """
    Divide las filas en chunks de tamaño fijo y hace un UPSERT por chunk.

    Un chunk que falla se loguea y se cuenta; los siguientes chunks se
    procesan igual (tolerante a fallas parciales).
    """

    def __init__(self, store: SinkStore, *, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size debe ser > 0")
        self._store = store
        self._batch_size = batch_size

    def upsert(self, table: str, rows: Sequence[Mapping[str, Any]], conflict_key: Sequence[str]) -> WriteResult:
        result = WriteResult()
        total_chunks = (len(rows) + self._batch_size - 1) // self._batch_size

        for index, start in enumerate(range(0, len(rows), self._batch_size), start=1):
            chunk = rows[start : start + self._batch_size]
            try:
                self._store.upsert(table, chunk, conflict_key)
            except Exception as e:
                result.failed += len(chunk)
                result.failed_chunks += 1
                logger.error(f"UPSERT '{table}' chunk {index}/{total_chunks} falló ({len(chunk)} filas): {e}")
                continue

            result.written += len(chunk)
            logger.debug(f"UPSERT '{table}' chunk {index}/{total_chunks}: {len(chunk)} filas")

        if rows:
            logger.info(f"UPSERT '{table}': {result.written} escritas, {result.failed} con error")
        return result
