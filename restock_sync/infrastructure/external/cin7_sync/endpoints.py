"""
Tabla versionada de endpoints candidatos de Cin7.

La forma/versión de los recursos de Cin7 no es estable entre cuentas, por lo
que cada recurso lógico tiene una lista ORDENADA de candidatos: el más
específico primero y el más permisivo al final. Para soportar una nueva
versión del API se agrega una fila aquí; la lógica de fetch no cambia.

Este módulo no realiza I/O: solo construye requests.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Cin7Credentials:
    api_url: str
    username: str
    api_key: str


@dataclass(frozen=True)
class EndpointCandidate:
    """
    Plantilla de un endpoint para un recurso lógico.

    - version: etiqueta de la versión del API (solo informativa para logs)
    - path: ruta relativa a CIN7_API_URL
    - result_keys: campos donde Cin7 puede envolver la lista cuando no
      responde un array plano
    """

    version: str
    path: str
    result_keys: tuple[str, ...]


ENDPOINT_CANDIDATES: dict[str, tuple[EndpointCandidate, ...]] = {
    "sales": (
        EndpointCandidate(version="v0", path="/Sales", result_keys=("Sales", "SalesOrders")),
        EndpointCandidate(version="v0", path="/SalesOrders", result_keys=("SalesOrders", "Sales")),
        EndpointCandidate(version="v1", path="/v1/SalesOrders", result_keys=("SalesOrders", "Sales")),
    ),
    "products": (
        EndpointCandidate(version="v0", path="/Products", result_keys=("Products",)),
        EndpointCandidate(version="v1", path="/v1/Products", result_keys=("Products",)),
    ),
    "stock": (
        EndpointCandidate(version="v0", path="/Stock", result_keys=("Stock",)),
        EndpointCandidate(version="v1", path="/v1/Stock", result_keys=("Stock",)),
    ),
}


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Request completamente armado para un candidato.

    `params` ya incluye filtros del recurso y `rows`; el número de página lo
    agrega el fetcher con `params_for_page`.
    """

    candidate: EndpointCandidate
    url: str
    headers: dict[str, str]
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def page_size(self) -> int:
        return int(self.params["rows"])

    def params_for_page(self, page: int) -> dict[str, Any]:
        # `page` siempre lo controla el fetcher.
        return {**self.params, "page": page}


def basic_auth_header(username: str, api_key: str) -> str:
    token = base64.b64encode(f"{username}:{api_key}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


class EndpointResolver:
    """
    Traduce (recurso, params) a la lista ordenada de requests candidatos.
    """

    def __init__(
        self,
        credentials: Cin7Credentials,
        *,
        page_size: int = 250,
        candidates: Optional[Mapping[str, tuple[EndpointCandidate, ...]]] = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size debe ser > 0")
        self._creds = credentials
        self._base_url = credentials.api_url.rstrip("/")
        self._page_size = page_size
        self._candidates = dict(candidates or ENDPOINT_CANDIDATES)

    @property
    def page_size(self) -> int:
        return self._page_size

    def candidates_for(self, resource: str, params: Optional[Mapping[str, Any]] = None) -> list[RequestDescriptor]:
        table = self._candidates.get(resource)
        if not table:
            raise ValueError(f"Recurso sin endpoints configurados: {resource}")

        headers = {
            "Authorization": basic_auth_header(self._creds.username, self._creds.api_key),
            "Content-Type": "application/json",
        }
        query = {
            "rows": self._page_size,
            **{k: v for k, v in (params or {}).items() if v is not None and k not in ("page", "rows")},
        }

        return [
            RequestDescriptor(
                candidate=candidate,
                url=f"{self._base_url}{candidate.path}",
                headers=dict(headers),
                params=dict(query),
            )
            for candidate in table
        ]
