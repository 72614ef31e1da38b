"""
Tests del relay HTTP.

Verifica el contrato:
- 200 con la salida del CLI cuando termina con codigo 0.
- 500 con error y codigo de salida cuando falla.
- 404 para comandos desconocidos (sin lanzar proceso).
"""
from __future__ import annotations

import subprocess
import sys

import pytest
from httpx import ASGITransport, AsyncClient

from restock_sync.api.v1.endpoints import sync as sync_endpoint
from restock_sync.main import create_application


class _Runner:
    def __init__(self, result=None, exc: Exception | None = None) -> None:
        self.result = result
        self.exc = exc
        self.calls: list[list[str]] = []

    def __call__(self, args):
        self.calls.append(list(args))
        if self.exc:
            raise self.exc
        return self.result


def _completed(code: int, out: str = "", err: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=code, stdout=out, stderr=err)


@pytest.fixture
def app():
    return create_application()


async def _post(app, path: str):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.post(path)


@pytest.mark.asyncio
async def test_health(app) -> None:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_successful_command_returns_output(app, monkeypatch) -> None:
    runner = _Runner(_completed(0, out="Resumen ventas: 3 sincronizados, 0 con error"))
    monkeypatch.setattr(sync_endpoint, "run_cli", runner)

    response = await _post(app, "/api/v1/sync/sales?date=2024-05-01&location=newtown")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert "3 sincronizados" in data["output"]
    (args,) = runner.calls
    assert args[:4] == [sys.executable, "-m", "restock_sync.cli", "sales"]
    assert "--date=2024-05-01" in args
    assert "--location=newtown" in args


@pytest.mark.asyncio
async def test_failed_command_returns_500_with_exit_code(app, monkeypatch) -> None:
    monkeypatch.setattr(sync_endpoint, "run_cli", _Runner(_completed(1, err="Configuración inválida")))

    response = await _post(app, "/api/v1/sync/products")

    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["code"] == 1
    assert "Configuración inválida" in data["error"]


@pytest.mark.asyncio
async def test_spawn_failure_returns_500(app, monkeypatch) -> None:
    monkeypatch.setattr(sync_endpoint, "run_cli", _Runner(exc=FileNotFoundError("python")))

    response = await _post(app, "/api/v1/sync/stock?codes=A,B")

    assert response.status_code == 500
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_unknown_command_is_404_without_spawning(app, monkeypatch) -> None:
    runner = _Runner(_completed(0))
    monkeypatch.setattr(sync_endpoint, "run_cli", runner)

    response = await _post(app, "/api/v1/sync/invoices")

    assert response.status_code == 404
    assert response.json()["error"] == "SYNC_COMMAND_NOT_FOUND"
    assert runner.calls == []


def test_build_cli_args_maps_flags() -> None:
    args = sync_endpoint.build_cli_args("stock", codes="A,B", from_sales=False, verify=True)
    assert args[3:] == ["stock", "--codes=A,B", "--verify"]
