"""
Tipos y utilidades puras para el pipeline Cin7 -> Postgres.

Se mantienen libres de I/O para poder testearlos fácilmente.

Cin7 no es consistente con los nombres de campos entre versiones del API
(p.ej. `createdDate` vs `CreatedDate` vs `created_date`). Cada cadena de
alias se declara UNA vez aquí, en orden de prioridad, y el resto del
pipeline lee los atributos ya resueltos del record tipado.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterator, Mapping, Optional, Sequence, Union

RecordId = Union[int, str]


class Cin7ApiError(RuntimeError):
    """Error de integración con Cin7."""


# ---------------------------------------------------------------------------
# Cadenas de alias (orden = prioridad)
# ---------------------------------------------------------------------------

CREATED_DATE_FIELDS = ("createdDate", "CreatedDate", "created_date")
MODIFIED_DATE_FIELDS = ("modifiedDate", "ModifiedDate", "modified_date")
SALE_REFERENCE_FIELDS = ("reference", "orderNumber")
SALE_LINE_ITEMS_FIELDS = ("lineItems", "Items")
SALE_PRODUCT_TOTAL_FIELDS = ("productTotal", "total")
LINE_ITEM_CODE_FIELDS = ("code", "productCode", "sku")
LINE_ITEM_QTY_FIELDS = ("qty", "quantity")
LINE_ITEM_PRICE_FIELDS = ("unitPrice", "price")
STOCK_PRODUCT_ID_FIELDS = ("ProductId", "productId")
# Resto de la clave natural de stock (junto con productId).
STOCK_KEY_FIELDS = ("productOptionId", "branchId")

# Campos escalares del producto padre que se copian a cada fila de opción.
PRODUCT_FIELDS = (
    "status",
    "createdDate",
    "modifiedDate",
    "styleCode",
    "name",
    "description",
    "tags",
    "images",
    "pdfUpload",
    "pdfDescription",
    "supplierId",
    "brand",
    "category",
    "subCategory",
    "categoryIdArray",
    "channels",
    "weight",
    "height",
    "width",
    "length",
    "volume",
    "stockControl",
    "orderType",
    "productType",
    "productSubtype",
    "projectName",
    "optionLabel1",
    "optionLabel2",
    "optionLabel3",
    "salesAccount",
    "purchasesAccount",
    "importCustomsDuty",
    "sizeRangeId",
    "customFields",
)

PRODUCT_OPTION_FIELDS = (
    "createdDate",
    "modifiedDate",
    "status",
    "productId",
    "code",
    "barcode",
    "productOptionCode",
    "productOptionSizeCode",
    "productOptionBarcode",
    "productOptionSizeBarcode",
    "supplierCode",
    "option1",
    "option2",
    "option3",
    "optionWeight",
    "size",
    "sizeId",
    "retailPrice",
    "wholesalePrice",
    "vipPrice",
    "specialPrice",
    "specialsStartDate",
    "specialDays",
    "stockAvailable",
    "stockOnHand",
    "uomOptions",
    "image",
    "priceColumns",
)

STOCK_FIELDS = (
    "productOptionId",
    "modifiedDate",
    "styleCode",
    "code",
    "barcode",
    "branchId",
    "branchName",
    "productName",
    "option1",
    "option2",
    "option3",
    "size",
    "available",
    "stockOnHand",
    "openSales",
    "incoming",
    "virtual",
    "holding",
)


def first_present(payload: Mapping[str, Any], aliases: Sequence[str]) -> Any:
    """
    Retorna el primer valor presente (no None, no "") entre los alias dados.
    """
    for name in aliases:
        value = payload.get(name)
        if value is not None and value != "":
            return value
    return None


def _split_known(payload: Mapping[str, Any], known: Sequence[str]) -> tuple[dict[str, Any], dict[str, Any]]:
    known_set = set(known)
    attributes = {name: payload.get(name) for name in known}
    extra = {k: v for k, v in payload.items() if k not in known_set}
    return attributes, extra


def _require_id(payload: Mapping[str, Any], resource: str) -> RecordId:
    rec_id = payload.get("id")
    if rec_id is None or rec_id == "":
        # Caso raro; preferimos fallar temprano y visible.
        raise Cin7ApiError(f"Cin7 devolvió un record de '{resource}' sin 'id'")
    return rec_id


# ---------------------------------------------------------------------------
# Records tipados (unión etiquetada por recurso)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SaleLineItem:
    """Línea de una venta (producto vendido)."""

    id: RecordId
    code: Optional[str]
    name: Optional[str]
    qty: Optional[float]
    unit_price: Optional[float]
    discount: Optional[float]
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SaleLineItem":
        consumed = {"id", "name", "discount", *LINE_ITEM_CODE_FIELDS, *LINE_ITEM_QTY_FIELDS, *LINE_ITEM_PRICE_FIELDS}
        return cls(
            id=_require_id(payload, "lineItems"),
            code=first_present(payload, LINE_ITEM_CODE_FIELDS),
            name=payload.get("name"),
            qty=first_present(payload, LINE_ITEM_QTY_FIELDS),
            unit_price=first_present(payload, LINE_ITEM_PRICE_FIELDS),
            discount=payload.get("discount"),
            extra={k: v for k, v in payload.items() if k not in consumed},
        )


@dataclass(frozen=True)
class SaleRecord:
    """Venta (Sales / SalesOrders)."""

    kind = "sales"

    id: RecordId
    reference: Optional[str]
    created_date: Optional[str]
    modified_date: Optional[str]
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    total: Optional[float] = None
    product_total: Optional[float] = None
    status: Optional[str] = None
    stage: Optional[str] = None
    currency_code: Optional[str] = None
    currency_symbol: Optional[str] = None
    tax_status: Optional[str] = None
    is_approved: Optional[bool] = None
    line_items: tuple[SaleLineItem, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SaleRecord":
        raw_items = first_present(payload, SALE_LINE_ITEMS_FIELDS)
        items = tuple(
            SaleLineItem.from_payload(item) for item in (raw_items if isinstance(raw_items, list) else [])
        )
        scalar = {
            "firstName": "first_name",
            "lastName": "last_name",
            "company": "company",
            "email": "email",
            "total": "total",
            "status": "status",
            "stage": "stage",
            "currencyCode": "currency_code",
            "currencySymbol": "currency_symbol",
            "taxStatus": "tax_status",
            "isApproved": "is_approved",
        }
        consumed = {
            "id",
            "productTotal",
            *scalar,
            *CREATED_DATE_FIELDS,
            *MODIFIED_DATE_FIELDS,
            *SALE_REFERENCE_FIELDS,
            *SALE_LINE_ITEMS_FIELDS,
        }
        return cls(
            id=_require_id(payload, cls.kind),
            reference=first_present(payload, SALE_REFERENCE_FIELDS),
            created_date=first_present(payload, CREATED_DATE_FIELDS),
            modified_date=first_present(payload, MODIFIED_DATE_FIELDS),
            product_total=first_present(payload, SALE_PRODUCT_TOTAL_FIELDS),
            line_items=items,
            extra={k: v for k, v in payload.items() if k not in consumed},
            **{attr: payload.get(src) for src, attr in scalar.items()},
        )


@dataclass(frozen=True)
class ProductOption:
    """Opción (variante) de un producto."""

    id: RecordId
    attributes: dict[str, Any]
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ProductOption":
        attributes, extra = _split_known(payload, PRODUCT_OPTION_FIELDS)
        extra.pop("id", None)
        return cls(id=_require_id(payload, "productOptions"), attributes=attributes, extra=extra)


@dataclass(frozen=True)
class ProductRecord:
    """Producto padre con sus opciones anidadas (productOptions)."""

    kind = "products"

    id: RecordId
    created_date: Optional[str]
    attributes: dict[str, Any]
    options: tuple[ProductOption, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ProductRecord":
        attributes, extra = _split_known(payload, PRODUCT_FIELDS)
        extra.pop("id", None)
        raw_options = extra.pop("productOptions", None)
        options = tuple(
            ProductOption.from_payload(opt) for opt in (raw_options if isinstance(raw_options, list) else [])
        )
        return cls(
            id=_require_id(payload, cls.kind),
            created_date=first_present(payload, CREATED_DATE_FIELDS),
            attributes=attributes,
            options=options,
            extra=extra,
        )


@dataclass(frozen=True)
class StockRecord:
    """Nivel de stock de una opción en una sucursal."""

    kind = "stock"

    product_id: int
    attributes: dict[str, Any]
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> tuple[Any, Any, Any]:
        return (self.product_id, self.attributes.get("productOptionId"), self.attributes.get("branchId"))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "StockRecord":
        raw_product_id = first_present(payload, STOCK_PRODUCT_ID_FIELDS)
        try:
            product_id = int(raw_product_id)
        except (TypeError, ValueError) as e:
            raise Cin7ApiError(f"Record de stock con productId inválido: {raw_product_id!r}") from e
        attributes, extra = _split_known(payload, STOCK_FIELDS)
        for name in STOCK_KEY_FIELDS:
            value = attributes.get(name)
            if value is None or value == "":
                # Ninguna parte de la clave natural puede llegar NULL al UPSERT.
                raise Cin7ApiError(f"Record de stock del producto {product_id} sin '{name}'")
        for name in STOCK_PRODUCT_ID_FIELDS:
            extra.pop(name, None)
        return cls(product_id=product_id, attributes=attributes, extra=extra)


SourceRecord = Union[SaleRecord, ProductRecord, StockRecord]

_RECORD_TYPES = {
    SaleRecord.kind: SaleRecord,
    ProductRecord.kind: ProductRecord,
    StockRecord.kind: StockRecord,
}


def parse_records(resource: str, payloads: Sequence[Mapping[str, Any]]) -> list[SourceRecord]:
    """
    Convierte los payloads crudos de Cin7 en records tipados del recurso.

    Preserva el orden de paginación.
    """
    record_type = _RECORD_TYPES.get(resource)
    if record_type is None:
        raise ValueError(f"Recurso desconocido: {resource}")
    return [record_type.from_payload(p) for p in payloads]


# ---------------------------------------------------------------------------
# Ventana de sync
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SyncWindow:
    """
    Rango de días [start, end] (ambos inclusive).

    Un solo día es el caso degenerado start == end.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Ventana inválida: start {self.start} > end {self.end}")

    @classmethod
    def single_day(cls, day: date) -> "SyncWindow":
        return cls(start=day, end=day)

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1
