from __future__ import annotations

import pytest

pytest.importorskip("psycopg")

from psycopg.types.json import Jsonb

from restock_sync.infrastructure.external.cin7_sync.sink import PostgresSinkStore, build_upsert_sql, quote_ident


class _DummyCursor:
    def __init__(self) -> None:
        self.executed_sql: str | None = None
        self.executemany_values = None
        self.fail = False

    def executemany(self, sql: str, values) -> None:
        if self.fail:
            raise RuntimeError("violates not-null constraint")
        self.executed_sql = sql
        self.executemany_values = values

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class _DummyConn:
    def __init__(self) -> None:
        self._cursor = _DummyCursor()
        self.closed = False
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return self._cursor

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


def _store_with(conn: _DummyConn) -> PostgresSinkStore:
    store = PostgresSinkStore("postgresql://dummy")
    store._conn = conn
    return store


def test_upsert_sql_updates_every_non_key_column() -> None:
    sql = build_upsert_sql("stock", ["productId", "productOptionId", "branchId", "available"], ("productId", "productOptionId", "branchId"))
    assert sql.startswith('INSERT INTO "stock" ("productId", "productOptionId", "branchId", "available")')
    assert 'ON CONFLICT ("productId", "productOptionId", "branchId")' in sql
    assert 'DO UPDATE SET "available" = EXCLUDED."available"' in sql


def test_upsert_sql_with_only_key_columns_does_nothing_on_conflict() -> None:
    assert build_upsert_sql("t", ["id"], ("id",)).endswith('ON CONFLICT ("id") DO NOTHING')


def test_upsert_sql_requires_conflict_key_in_columns() -> None:
    with pytest.raises(ValueError):
        build_upsert_sql("sales", ["reference"], ("id",))


def test_quote_ident_rejects_quotes() -> None:
    with pytest.raises(ValueError):
        quote_ident('bad"name')


def test_upsert_commits_chunk_and_wraps_json_values() -> None:
    conn = _DummyConn()
    store = _store_with(conn)

    count = store.upsert("products", [{"id": 1, "option_id": 2, "images": ["a.png"]}], ("id", "option_id"))

    assert count == 1
    assert conn.commits == 1
    assert "ON CONFLICT" in (conn._cursor.executed_sql or "")
    (values,) = conn._cursor.executemany_values
    assert values[:2] == (1, 2)
    assert isinstance(values[2], Jsonb)


def test_upsert_rolls_back_failed_chunk() -> None:
    conn = _DummyConn()
    conn._cursor.fail = True
    store = _store_with(conn)

    with pytest.raises(RuntimeError):
        store.upsert("sales", [{"id": 1}], ("id",))
    assert conn.rollbacks == 1
    assert conn.commits == 0
