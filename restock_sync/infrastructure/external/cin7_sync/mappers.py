"""
Mapeo de records Cin7 a filas planas listas para UPSERT.

Reglas generales:
- Funciones puras: mismo record -> mismas filas (sin timestamps de reloj),
  así re-sincronizar datos sin cambios deja la base idéntica.
- Recursos con sub-entidades (productos con opciones, ventas con líneas)
  emiten una fila por sub-entidad con los campos del padre repetidos.
- Recursos simples (venta, stock) emiten exactamente una fila y aplican
  defaults para que la base no reciba NULL en columnas obligatorias.
"""

from __future__ import annotations

from typing import Any

from .filters import location_for_reference
from .types import (
    PRODUCT_FIELDS,
    PRODUCT_OPTION_FIELDS,
    Cin7ApiError,
    ProductRecord,
    SaleRecord,
    SourceRecord,
    StockRecord,
)

FlatRow = dict[str, Any]

# Campos de la opción que chocan con columnas del padre: van con prefijo.
OPTION_PREFIX = "option_"
OPTION_PREFIXED_FIELDS = frozenset({"createdDate", "modifiedDate", "status", "productId"})

DEFAULT_SALE_STATUS = "COMPLETED"
DEFAULT_SALE_STAGE = "Dispatched"
DEFAULT_CURRENCY_CODE = "USD"
DEFAULT_CURRENCY_SYMBOL = "$"
DEFAULT_TAX_STATUS = "Incl"

STOCK_NUMERIC_FIELDS = ("available", "stockOnHand", "openSales", "incoming", "virtual", "holding")
STOCK_TEXT_FIELDS = ("styleCode", "code", "barcode", "branchName", "productName", "option1", "option2", "option3", "size")


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None or value == "" else value


def map_product_rows(product: ProductRecord) -> list[FlatRow]:
    """
    Una fila por opción del producto.

    Un producto sin opciones no emite filas: no se sincroniza el padre solo.
    """
    rows: list[FlatRow] = []
    for option in product.options:
        row: FlatRow = {"id": product.id}
        for name in PRODUCT_FIELDS:
            row[name] = product.attributes.get(name)

        row[f"{OPTION_PREFIX}id"] = option.id
        for name in PRODUCT_OPTION_FIELDS:
            column = f"{OPTION_PREFIX}{name}" if name in OPTION_PREFIXED_FIELDS else name
            row[column] = option.attributes.get(name)
        rows.append(row)
    return rows


def _sale_created_date(sale: SaleRecord) -> str:
    """
    Fecha de creación obligatoria de la venta.

    No se reemplaza por la hora actual: la fila dejaría de ser determinística.
    """
    if not sale.created_date:
        raise Cin7ApiError(f"Venta {sale.id} sin fecha de creación")
    return sale.created_date


def map_sale_row(sale: SaleRecord) -> list[FlatRow]:
    """Exactamente una fila para la tabla `sales`."""
    created_date = _sale_created_date(sale)
    return [
        {
            "id": sale.id,
            "reference": _or_default(sale.reference, f"SALE-{sale.id}"),
            "created_date": created_date,
            "modified_date": _or_default(sale.modified_date, created_date),
            "first_name": _or_default(sale.first_name, ""),
            "last_name": _or_default(sale.last_name, ""),
            "company": _or_default(sale.company, ""),
            "email": _or_default(sale.email, ""),
            "total": _or_default(sale.total, 0),
            "product_total": _or_default(sale.product_total, 0),
            "status": _or_default(sale.status, DEFAULT_SALE_STATUS),
            "stage": _or_default(sale.stage, DEFAULT_SALE_STAGE),
            "currency_code": _or_default(sale.currency_code, DEFAULT_CURRENCY_CODE),
            "currency_symbol": _or_default(sale.currency_symbol, DEFAULT_CURRENCY_SYMBOL),
            "tax_status": _or_default(sale.tax_status, DEFAULT_TAX_STATUS),
            "is_approved": sale.is_approved is not False,
        }
    ]


def map_sale_item_rows(sale: SaleRecord) -> list[FlatRow]:
    """Una fila por línea de la venta para la tabla `sale_items`."""
    created_date = _sale_created_date(sale)
    location = location_for_reference(sale.reference) or ""
    return [
        {
            "id": item.id,
            "transaction_id": sale.id,
            "code": _or_default(item.code, ""),
            "name": _or_default(item.name, ""),
            # Una línea sin cantidad representa una unidad.
            "qty": _or_default(item.qty, 1),
            "unit_price": _or_default(item.unit_price, 0),
            "discount": _or_default(item.discount, 0),
            "created_date": created_date,
            "location": location,
            "sales_reference": _or_default(sale.reference, f"SALE-{sale.id}"),
        }
        for item in sale.line_items
    ]


def map_stock_row(stock: StockRecord) -> list[FlatRow]:
    """Exactamente una fila para la tabla `stock`."""
    row: FlatRow = {
        "productId": stock.product_id,
        "productOptionId": stock.attributes.get("productOptionId"),
        "branchId": stock.attributes.get("branchId"),
        "modifiedDate": stock.attributes.get("modifiedDate"),
    }
    for name in STOCK_TEXT_FIELDS:
        row[name] = _or_default(stock.attributes.get(name), "")
    for name in STOCK_NUMERIC_FIELDS:
        row[name] = _or_default(stock.attributes.get(name), 0)
    return [row]


def map_to_rows(record: SourceRecord) -> list[FlatRow]:
    """Mapea un record a las filas de su tabla principal."""
    if isinstance(record, ProductRecord):
        return map_product_rows(record)
    if isinstance(record, SaleRecord):
        return map_sale_row(record)
    if isinstance(record, StockRecord):
        return map_stock_row(record)
    raise TypeError(f"Tipo de record no soportado: {type(record).__name__}")
