"""
CLI: Cin7 -> Postgres (one-way sync) y flujos de reposición por tienda.

Uso recomendado:
  - Ejecutar como job (cron/systemd timer) o vía el relay HTTP.
  - No se integra al request/response del API para evitar timeouts y bloquear workers.

Variables de entorno requeridas:
  - CIN7_API_URL
  - CIN7_USERNAME
  - CIN7_API_KEY
  - DATABASE_URL (debe ser postgresql://... o postgres://...)

Ejecución:
  python -m restock_sync.cli sales                      # hoy
  python -m restock_sync.cli sales --date=2024-05-01
  python -m restock_sync.cli sales --start=2024-05-01 --end=2024-05-31 --location=newtown
  python -m restock_sync.cli products --verify
  python -m restock_sync.cli stock --codes=JEL-BASS6BN,1FY-INC-1300
  python -m restock_sync.cli stock --from-sales --date=2024-05-01
  python -m restock_sync.cli restock-sales --location=paddington
  python -m restock_sync.cli restock-clear --location=newtown
  python -m restock_sync.cli restock-seed --location=newtown
"""

from __future__ import annotations

import argparse
from datetime import date
from typing import Optional, Sequence

from loguru import logger

from restock_sync.core.config import settings
from restock_sync.core.logging import configure_logging
from restock_sync.infrastructure.external.cin7_sync.filters import resolve_location
from restock_sync.infrastructure.external.cin7_sync.restock_repository import RestockRepository
from restock_sync.infrastructure.external.cin7_sync.restock_service import RestockService
from restock_sync.infrastructure.external.cin7_sync.sync_config import PRODUCTS_PLAN, SALES_PLAN, SYNC_PLANS
from restock_sync.infrastructure.external.cin7_sync.sync_service import (
    SyncConfigError,
    SyncResult,
    build_from_env,
    build_store_from_env,
)
from restock_sync.infrastructure.external.cin7_sync.types import SyncWindow
from restock_sync.shared.exceptions.base import AppException

COMMANDS = ("sales", "products", "stock", "restock-sales", "restock-clear", "restock-seed")


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Fecha inválida (se espera YYYY-MM-DD): {value}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="restock-sync", description="Sync Cin7 -> Postgres")
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--location", help="Tienda (newtown | paddington)")
    parser.add_argument("--start", type=_iso_date, help="Primer día (YYYY-MM-DD)")
    parser.add_argument("--end", type=_iso_date, help="Último día (YYYY-MM-DD), inclusive")
    parser.add_argument("--date", type=_iso_date, help="Un solo día (equivale a --start=X --end=X)")
    parser.add_argument("--codes", help="stock: códigos de producto separados por coma")
    parser.add_argument(
        "--from-sales",
        action="store_true",
        help="stock: sincroniza los productos vendidos en la ventana",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Al terminar, loguea el total de filas de las tablas tocadas.",
    )
    return parser


def resolve_window(
    start: Optional[date],
    end: Optional[date],
    single: Optional[date],
    *,
    today: Optional[date] = None,
) -> SyncWindow:
    """
    --date gana sobre --start/--end; sin fechas se sincroniza hoy; sin
    --end el rango termina hoy.
    """
    today = today or date.today()
    if single is not None:
        return SyncWindow.single_day(single)
    if start is None:
        return SyncWindow.single_day(today)
    return SyncWindow(start=start, end=end or today)


def _print_summary(label: str, result: SyncResult) -> None:
    for failure in result.failures:
        logger.warning(f"Falla [{failure.unit}]: {failure.reason}")
    print(f"Resumen {label}: {result.summary()}")


def _run(args: argparse.Namespace) -> int:
    window = resolve_window(args.start, args.end, args.date)
    location_code = resolve_location(args.location) if args.location else None

    if args.command in ("restock-clear", "restock-seed"):
        store = build_store_from_env(settings)
        with store:
            restock = RestockService(RestockRepository(store), batch_size=settings.UPSERT_BATCH_SIZE)
            location = args.location or "newtown"
            if args.command == "restock-clear":
                updated = restock.clear(location)
                print(f"Resumen restock-clear: {updated} fila(s) reseteadas en {location}")
            else:
                inserted = restock.seed(location)
                print(f"Resumen restock-seed: {inserted} fila(s) creadas en {location}")
        return 0

    service, store = build_from_env(settings)
    with store:
        touched: tuple[str, ...] = ()

        if args.command == "sales":
            result = service.sync_range(SALES_PLAN, window, location_code=location_code)
            touched = tuple(t.table for t in SALES_PLAN.targets)
            _print_summary("ventas", result)

        elif args.command == "products":
            result = service.sync_all(PRODUCTS_PLAN)
            touched = tuple(t.table for t in PRODUCTS_PLAN.targets)
            _print_summary("productos", result)

        elif args.command == "stock":
            if args.codes:
                codes = [c.strip() for c in args.codes.split(",") if c.strip()]
            elif args.from_sales:
                codes = service.sold_codes(window)
                if not codes:
                    print("Resumen stock: sin productos vendidos en la ventana")
                    return 0
            else:
                logger.error("stock requiere --codes o --from-sales")
                return 2
            result = service.sync_stock(codes=codes)
            touched = tuple(t.table for t in SYNC_PLANS["stock"].targets)
            _print_summary("stock", result)

        else:  # restock-sales
            location = args.location or "newtown"
            location_code = resolve_location(location)
            result = service.sync_range(SALES_PLAN, window, location_code=location_code)
            _print_summary("ventas", result)

            restock = RestockService(RestockRepository(store), batch_size=settings.UPSERT_BATCH_SIZE)
            for day in window.days():
                update = restock.apply_sales(location, day)
                print(
                    f"Resumen reposición {location} {day.isoformat()}: "
                    f"{update.updated} actualizados, {update.not_found} no encontrados, {update.errors} errores"
                )
            touched = tuple(t.table for t in SALES_PLAN.targets)

        if args.verify:
            for table in touched:
                logger.info(f"Verificación: '{table}' tiene {store.count(table)} fila(s)")

    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        resolve_window(args.start, args.end, args.date)
    except ValueError as e:
        parser.error(str(e))

    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    logger.info(f"Iniciando {args.command}...")

    try:
        return _run(args)
    except SyncConfigError as e:
        logger.error(f"Configuración inválida: {e}")
        return 1
    except AppException as e:
        logger.error(e.message)
        return 1
    except Exception as e:
        logger.exception(f"{args.command} falló: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
