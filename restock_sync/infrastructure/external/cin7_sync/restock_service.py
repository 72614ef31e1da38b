"""
Flujos de reposición por tienda sobre las tablas `restock_<tienda>`.

- seed: reconstruye la tabla desde el catálogo de productos sincronizado
- clear: resetea cantidades conservando los productos
- apply_sales: vuelca las unidades vendidas del día en la columna `sold`
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping

from loguru import logger

from .filters import resolve_location
from .restock_repository import RestockRepository


@dataclass(frozen=True)
class RestockUpdate:
    updated: int
    not_found: int
    errors: int = 0


def restock_table(location: str) -> str:
    """Nombre de la tabla de reposición de la tienda (valida la tienda)."""
    resolve_location(location)
    return f"restock_{location.strip().lower()}"


def sold_totals_by_code(rows: Iterable[Mapping[str, Any]]) -> dict[str, float]:
    """
    Suma de cantidades vendidas por código de producto.

    Líneas sin código se ignoran; una línea sin cantidad cuenta como 1.
    """
    totals: dict[str, float] = {}
    for row in rows:
        code = row.get("code")
        if not code:
            continue
        qty = row.get("qty")
        totals[code] = totals.get(code, 0) + (qty if qty is not None else 1)
    return totals


def build_restock_rows(products: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Una fila de reposición por opción de producto, con cantidades en 0."""
    return [
        {
            "product_id": p.get("id"),
            "option_product_id": p.get("productOptionCode") or p.get("id"),
            "productOptionCode": p.get("productOptionCode"),
            "name": p.get("name"),
            "option1": p.get("option1"),
            "option2": p.get("option2"),
            "option3": p.get("option3"),
            "sold": 0,
            "returned": 0,
            "picked": 0,
            "review": 0,
            "storeroom_empty": 0,
            "missing": 0,
        }
        for p in products
    ]


class RestockService:
    def __init__(self, repository: RestockRepository, *, batch_size: int = 100) -> None:
        self._repo = repository
        self._batch_size = batch_size

    def seed(self, location: str) -> int:
        table = restock_table(location)
        products = self._repo.load_product_options()
        rows = build_restock_rows(products)
        inserted = self._repo.replace_rows(table, rows, batch_size=self._batch_size)
        logger.info(f"'{table}' reconstruida desde products: {inserted} fila(s)")
        return inserted

    def clear(self, location: str) -> int:
        table = restock_table(location)
        updated = self._repo.reset_quantities(table)
        logger.info(f"Cantidades de '{table}' reseteadas a 0 ({updated} fila(s), productos intactos)")
        return updated

    def apply_sales(self, location: str, day: date) -> RestockUpdate:
        """
        Actualiza `sold` con las unidades vendidas en la tienda ese día.

        Un código sin fila en la tabla de reposición se loguea y se cuenta
        como no encontrado; un error de escritura no corta el resto.
        """
        table = restock_table(location)
        location_code = resolve_location(location)

        items = self._repo.load_sale_items(day, location_code)
        totals = sold_totals_by_code(items)
        logger.info(f"{len(items)} línea(s) vendidas en {location} el {day.isoformat()}: {len(totals)} producto(s)")

        updated = not_found = errors = 0
        for code, sold in totals.items():
            try:
                affected = self._repo.set_sold(table, code, sold)
            except Exception as e:
                logger.error(f"Error actualizando {code} en '{table}': {e}")
                errors += 1
                continue

            if affected:
                updated += 1
                logger.debug(f"{code}: sold = {sold}")
            else:
                not_found += 1
                logger.warning(f"Producto {code} no encontrado en '{table}'")

        logger.info(f"'{table}' actualizada: {updated} actualizados, {not_found} no encontrados, {errors} errores")
        return RestockUpdate(updated=updated, not_found=not_found, errors=errors)
