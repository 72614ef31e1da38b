"""
Configuración del sync (mapeo Cin7 -> Postgres).

Aquí se define, por recurso de Cin7:
- qué tablas destino se alimentan
- con qué función de mapeo
- con qué clave natural se resuelven conflictos
- si el recurso se filtra por día/tienda del lado del cliente

Este módulo no realiza I/O: solo define configuración.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .mappers import FlatRow, map_product_rows, map_sale_item_rows, map_sale_row, map_stock_row

Mapper = Callable[..., list[FlatRow]]


@dataclass(frozen=True)
class TableTarget:
    """Una tabla destino alimentada por un recurso."""

    table: str
    conflict_key: tuple[str, ...]
    mapper: Mapper


@dataclass(frozen=True)
class ResourceSyncPlan:
    """
    Config de un recurso Cin7 -> una o más tablas Postgres.

    NOTA sobre la clave natural:
    - Se confía en los ids asignados por Cin7; no se deduplica en origen.
    - Recursos con sub-entidades componen el id del padre con el del hijo.
    """

    resource: str
    targets: tuple[TableTarget, ...]
    date_filtered: bool = False
    location_filtered: bool = False


SALES_PLAN = ResourceSyncPlan(
    resource="sales",
    targets=(
        TableTarget(table="sales", conflict_key=("id",), mapper=map_sale_row),
        TableTarget(table="sale_items", conflict_key=("id",), mapper=map_sale_item_rows),
    ),
    date_filtered=True,
    location_filtered=True,
)

PRODUCTS_PLAN = ResourceSyncPlan(
    resource="products",
    targets=(TableTarget(table="products", conflict_key=("id", "option_id"), mapper=map_product_rows),),
)

STOCK_PLAN = ResourceSyncPlan(
    resource="stock",
    targets=(
        TableTarget(table="stock", conflict_key=("productId", "productOptionId", "branchId"), mapper=map_stock_row),
    ),
)

SYNC_PLANS: dict[str, ResourceSyncPlan] = {
    plan.resource: plan for plan in (SALES_PLAN, PRODUCTS_PLAN, STOCK_PLAN)
}
