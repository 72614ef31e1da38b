"""
Repositorio Postgres (psycopg) para las tablas de reposición por tienda
(`restock_<tienda>`).

Comparte la conexión del PostgresSinkStore.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from .sink import PostgresSinkStore, quote_ident

RESTOCK_QUANTITY_COLUMNS = ("sold", "returned", "picked", "review", "storeroom_empty", "missing")


class RestockRepository:
    def __init__(self, store: PostgresSinkStore) -> None:
        self._store = store

    def reset_quantities(self, table: str) -> int:
        """
        Pone en 0 todas las cantidades, conservando las filas de producto.
        """
        set_sql = ", ".join(f"{quote_ident(c)} = 0" for c in RESTOCK_QUANTITY_COLUMNS)
        conn = self._store.connection()
        try:
            with conn.cursor() as cur:
                cur.execute(f"UPDATE {quote_ident(table)} SET {set_sql}, last_updated = now()")
                updated = cur.rowcount or 0
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        return updated

    def load_product_options(self) -> list[dict[str, Any]]:
        conn = self._store.connection()
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT id, "productOptionCode", name, option1, option2, option3
                FROM products
                ORDER BY id, option_id
                """
            )
            rows = cur.fetchall()
        conn.commit()
        return [dict(r) for r in rows]

    def replace_rows(self, table: str, rows: Sequence[dict[str, Any]], *, batch_size: int = 100) -> int:
        """
        Reemplaza el contenido de la tabla en una sola transacción
        (DELETE + INSERT por lotes).
        """
        conn = self._store.connection()
        try:
            with conn.cursor() as cur:
                cur.execute(f"DELETE FROM {quote_ident(table)}")
                if rows:
                    columns = list(rows[0].keys())
                    cols_sql = ", ".join(quote_ident(c) for c in columns)
                    placeholders = ", ".join(["%s"] * len(columns))
                    sql = f"INSERT INTO {quote_ident(table)} ({cols_sql}) VALUES ({placeholders})"
                    for start in range(0, len(rows), batch_size):
                        chunk = rows[start : start + batch_size]
                        cur.executemany(sql, [tuple(r[c] for c in columns) for r in chunk])
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        return len(rows)

    def load_sale_items(self, day: date, location_code: str) -> list[dict[str, Any]]:
        """
        Líneas de venta del día cuya venta pertenece a la tienda
        (prefijo de la referencia antes del primer '-').
        """
        conn = self._store.connection()
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT si.code, si.qty
                FROM sale_items si
                JOIN sales s ON s.id = si.transaction_id
                WHERE LEFT(s.created_date::text, 10) = %s
                  AND split_part(s.reference, '-', 1) = %s
                """,
                (day.isoformat(), location_code),
            )
            rows = cur.fetchall()
        conn.commit()
        return [dict(r) for r in rows]

    def set_sold(self, table: str, product_option_code: str, sold: float) -> int:
        conn = self._store.connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    UPDATE {quote_ident(table)}
                    SET sold = %s,
                        last_updated = now()
                    WHERE "productOptionCode" = %s
                    """,
                    (sold, product_option_code),
                )
                updated = cur.rowcount or 0
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        return updated
