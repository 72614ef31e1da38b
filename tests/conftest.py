"""
Configuración de fixtures para pytest.

Dobles de prueba del pipeline:
- FakeSession: reemplaza requests.Session y responde según un handler.
- InMemorySinkStore: UPSERT por clave natural sobre dicts en memoria.
"""
from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Sequence

import pytest

from restock_sync.infrastructure.external.cin7_sync.cin7_client import Cin7Client
from restock_sync.infrastructure.external.cin7_sync.endpoints import Cin7Credentials, EndpointResolver
from restock_sync.infrastructure.external.cin7_sync.rate_limiter import RateLimiter
from restock_sync.infrastructure.external.cin7_sync.writer import UpsertSinkWriter

API_URL = "https://api.cin7.test/api"


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, *, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else repr(body)

    def json(self) -> Any:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    """
    Session falsa: `handler(url, params)` decide la respuesta (o lanza).
    Registra cada llamada en `calls`.
    """

    def __init__(self, handler: Callable[[str, dict[str, Any]], FakeResponse]) -> None:
        self._handler = handler
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.headers_seen: list[dict[str, str]] = []

    def request(self, method: str, url: str, params=None, headers=None, timeout=None) -> FakeResponse:
        assert method == "GET"
        self.calls.append((url, dict(params or {})))
        self.headers_seen.append(dict(headers or {}))
        return self._handler(url, dict(params or {}))

    def urls_called(self) -> list[str]:
        return [url for url, _ in self.calls]


def paged(records: Sequence[dict[str, Any]], page_size: int) -> Callable[[dict[str, Any]], FakeResponse]:
    """Sirve `records` paginados según el parámetro `page` (base 1)."""

    def _serve(params: dict[str, Any]) -> FakeResponse:
        page = int(params["page"])
        start = (page - 1) * page_size
        return FakeResponse(200, list(records[start : start + page_size]))

    return _serve


class InMemorySinkStore:
    """
    Store en memoria con semántica de UPSERT por clave natural.

    `fail_on_calls`: números de llamada a `upsert` (base 1) que lanzan error.
    """

    def __init__(self, fail_on_calls: Sequence[int] = ()) -> None:
        self.tables: dict[str, dict[tuple, dict[str, Any]]] = {}
        self.upsert_calls = 0
        self._fail_on_calls = set(fail_on_calls)
        self.closed = False

    def __enter__(self) -> "InMemorySinkStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.closed = True

    def upsert(self, table: str, rows: Sequence[Mapping[str, Any]], conflict_key: Sequence[str]) -> int:
        self.upsert_calls += 1
        if self.upsert_calls in self._fail_on_calls:
            raise RuntimeError(f"fallo simulado en la llamada {self.upsert_calls}")
        data = self.tables.setdefault(table, {})
        for row in rows:
            data[tuple(row[k] for k in conflict_key)] = dict(row)
        return len(rows)

    def select(self, table: str, where: Optional[Mapping[str, Any]] = None) -> list[dict[str, Any]]:
        rows = list(self.tables.get(table, {}).values())
        if where:
            rows = [r for r in rows if all(r.get(k) == v for k, v in where.items())]
        return rows

    def count(self, table: str) -> int:
        return len(self.tables.get(table, {}))


@pytest.fixture
def credentials() -> Cin7Credentials:
    return Cin7Credentials(api_url=API_URL, username="user", api_key="secret")


@pytest.fixture
def resolver(credentials: Cin7Credentials) -> EndpointResolver:
    return EndpointResolver(credentials, page_size=250)


@pytest.fixture
def no_wait_limiter() -> RateLimiter:
    return RateLimiter(0, sleep=lambda _s: None)


@pytest.fixture
def make_client(resolver: EndpointResolver, no_wait_limiter: RateLimiter):
    """Construye un Cin7Client sobre una FakeSession con el handler dado."""

    def _make(handler: Callable[[str, dict[str, Any]], FakeResponse]) -> tuple[Cin7Client, FakeSession]:
        session = FakeSession(handler)
        return Cin7Client(resolver, no_wait_limiter, session=session), session

    return _make


@pytest.fixture
def store() -> InMemorySinkStore:
    return InMemorySinkStore()


@pytest.fixture
def writer(store: InMemorySinkStore) -> UpsertSinkWriter:
    return UpsertSinkWriter(store, batch_size=100)
