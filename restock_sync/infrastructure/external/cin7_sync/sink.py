"""
Store destino (Postgres vía psycopg v3).

El core solo necesita semántica de UPSERT por clave natural y lecturas
simples (select/count) para verificación. Cualquier objeto que cumpla
`SinkStore` sirve como destino (en tests se usa un store en memoria).
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

import psycopg
from loguru import logger
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb


class SinkStore(Protocol):
    def upsert(self, table: str, rows: Sequence[Mapping[str, Any]], conflict_key: Sequence[str]) -> int:
        ...

    def select(self, table: str, where: Optional[Mapping[str, Any]] = None) -> list[dict[str, Any]]:
        ...

    def count(self, table: str) -> int:
        ...


def quote_ident(name: str) -> str:
    """Cita un identificador SQL. Rechaza nombres con comillas dobles."""
    if not name or '"' in name or "\x00" in name:
        raise ValueError(f"Identificador SQL inválido: {name!r}")
    return f'"{name}"'


def _adapt(value: Any) -> Any:
    # dict/list (images, customFields, priceColumns...) van como JSONB.
    if isinstance(value, (dict, list)):
        return Jsonb(value)
    return value


def build_upsert_sql(table: str, columns: Sequence[str], conflict_key: Sequence[str]) -> str:
    """
    INSERT ... ON CONFLICT (clave natural) DO UPDATE SET <resto de columnas>.

    Política "insert or overwrite": re-ejecutar con los mismos datos deja la
    fila idéntica.
    """
    missing = [k for k in conflict_key if k not in columns]
    if missing:
        raise ValueError(f"Falta clave de conflicto {missing} en row para UPSERT en '{table}'")

    insert_cols_sql = ", ".join(quote_ident(c) for c in columns)
    placeholders = ", ".join(["%s"] * len(columns))
    conflict_sql = ", ".join(quote_ident(k) for k in conflict_key)

    update_cols = [c for c in columns if c not in conflict_key]
    if update_cols:
        set_sql = ", ".join(f"{quote_ident(c)} = EXCLUDED.{quote_ident(c)}" for c in update_cols)
        action = f"DO UPDATE SET {set_sql}"
    else:
        action = "DO NOTHING"

    return (
        f"INSERT INTO {quote_ident(table)} ({insert_cols_sql}) "
        f"VALUES ({placeholders}) "
        f"ON CONFLICT ({conflict_sql}) {action}"
    )


class PostgresSinkStore:
    """
    Store Postgres. Cada llamada a `upsert` es una transacción: un chunk se
    escribe completo o no se escribe.
    """

    def __init__(self, dsn: str) -> None:
        self._dsn = dsn
        self._conn: Optional[psycopg.Connection] = None

    def connection(self) -> psycopg.Connection:
        """
        Conexión perezosa (autocommit False). El store controla commits.
        """
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg.connect(self._dsn, row_factory=dict_row)
            except psycopg.OperationalError as e:
                raise psycopg.OperationalError(
                    f"{e}\n"
                    f"Sugerencia: verifica que DATABASE_URL sea accesible desde donde ejecutas el sync."
                ) from e
        return self._conn

    def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
        self._conn = None

    def __enter__(self) -> "PostgresSinkStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def upsert(self, table: str, rows: Sequence[Mapping[str, Any]], conflict_key: Sequence[str]) -> int:
        if not rows:
            return 0

        # Columnas: asumimos que todas las filas traen el mismo conjunto.
        columns = list(rows[0].keys())
        sql = build_upsert_sql(table, columns, conflict_key)
        values = [tuple(_adapt(row.get(c)) for c in columns) for row in rows]

        conn = self.connection()
        try:
            with conn.cursor() as cur:
                cur.executemany(sql, values)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        return len(values)

    def select(self, table: str, where: Optional[Mapping[str, Any]] = None) -> list[dict[str, Any]]:
        sql = f"SELECT * FROM {quote_ident(table)}"
        params: list[Any] = []
        if where:
            sql += " WHERE " + " AND ".join(f"{quote_ident(k)} = %s" for k in where)
            params = list(where.values())

        conn = self.connection()
        with conn.cursor() as cur:
            cur.execute(sql, params)
            rows = cur.fetchall()
        conn.commit()
        return [dict(r) for r in rows]

    def count(self, table: str) -> int:
        conn = self.connection()
        with conn.cursor() as cur:
            cur.execute(f"SELECT COUNT(*) AS total FROM {quote_ident(table)}")
            row = cur.fetchone()
        conn.commit()
        total = int(row["total"]) if row else 0
        logger.debug(f"COUNT {table} = {total}")
        return total
