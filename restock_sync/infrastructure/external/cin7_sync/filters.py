"""
Filtros client-side.

Cin7 acepta `dateFrom`/`dateTo` pero no siempre los respeta, y no filtra por
tienda. Estos filtros se aplican sobre los records ya tipados y preservan el
orden de paginación.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, TypeVar

from restock_sync.shared.exceptions.domain import InvalidLocationException

R = TypeVar("R")

REFERENCE_SEPARATOR = "-"

# Tienda -> prefijo de la referencia de venta (p.ej. "279-000123").
LOCATIONS: dict[str, str] = {
    "newtown": "279",
    "paddington": "255c",
}


def resolve_location(name: str) -> str:
    """Retorna el código de la tienda o lanza InvalidLocationException."""
    code = LOCATIONS.get((name or "").strip().lower())
    if code is None:
        raise InvalidLocationException(name, list(LOCATIONS))
    return code


def location_for_reference(reference: Optional[str]) -> Optional[str]:
    """Nombre de la tienda a partir del prefijo de la referencia, o None."""
    prefix = reference_prefix(reference)
    for name, code in LOCATIONS.items():
        if prefix == code:
            return name
    return None


def reference_prefix(reference: Optional[str]) -> Optional[str]:
    if not reference:
        return None
    return str(reference).split(REFERENCE_SEPARATOR, 1)[0]


def record_day(record: object) -> Optional[str]:
    """Porción ISO de fecha (YYYY-MM-DD) de la fecha de creación del record."""
    created = getattr(record, "created_date", None)
    if not created:
        return None
    return str(created)[:10]


def filter_by_window(records: Iterable[R], day: date) -> list[R]:
    """
    Conserva los records creados exactamente en `day`.

    La comparación es por igualdad de la porción de fecha ISO: no hay
    conversión de zona horaria. Un record sin fecha se descarta.
    """
    target = day.isoformat()
    return [r for r in records if record_day(r) == target]


def filter_by_location(records: Iterable[R], location_code: str) -> list[R]:
    """
    Conserva los records cuya referencia empieza con `<location_code>-`.

    Un record sin referencia se descarta.
    """
    return [r for r in records if reference_prefix(getattr(r, "reference", None)) == location_code]
