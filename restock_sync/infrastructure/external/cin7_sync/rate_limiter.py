"""
Rate limiter para el API de Cin7.

Cin7 limita la frecuencia de requests; garantizamos un espaciado mínimo
entre llamadas consecutivas del mismo proceso.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

DEFAULT_MIN_INTERVAL_S = 0.5


class RateLimiter:
    """
    Espaciado mínimo entre llamadas al API.

    La instancia es dueña de su estado (momento de la última llamada
    permitida) y se inyecta en el cliente. Dos corridas independientes con
    instancias distintas no comparten estado.

    El lock serializa callers concurrentes del mismo proceso.
    """

    def __init__(
        self,
        min_interval_s: float = DEFAULT_MIN_INTERVAL_S,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if min_interval_s < 0:
            raise ValueError("min_interval_s no puede ser negativo")
        self._min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None
        self._lock = threading.Lock()

    @property
    def min_interval_s(self) -> float:
        return self._min_interval_s

    def wait(self) -> None:
        """
        Bloquea hasta que haya pasado al menos min_interval_s desde la
        llamada anterior y registra la llamada actual.
        """
        with self._lock:
            if self._last_call is not None:
                elapsed = self._clock() - self._last_call
                remaining = self._min_interval_s - elapsed
                if remaining > 0:
                    self._sleep(remaining)
            self._last_call = self._clock()
