"""
Cliente mínimo del REST API de Cin7 (sin SDKs externos).

Requisitos cubiertos:
- requests
- paginación por número de página (page/rows)
- rate-limit (espaciado mínimo entre llamadas)
- fallback entre endpoints candidatos cuando la forma del recurso no es estable
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import requests
from loguru import logger

from .endpoints import EndpointResolver, RequestDescriptor
from .rate_limiter import RateLimiter
from .types import Cin7ApiError


def extract_records(payload: Any, result_keys: tuple[str, ...]) -> list[dict[str, Any]]:
    """
    Extrae la lista de records de un body de Cin7.

    Cin7 a veces responde un array plano y a veces un objeto que envuelve la
    lista bajo un campo con el nombre del recurso.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in result_keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    return []


class Cin7Client:
    """
    Cliente HTTP de Cin7.

    Importante:
    - No interpreta los records: eso se decide en types/mappers.
    - Cada request pasa por el RateLimiter inyectado.
    """

    def __init__(
        self,
        resolver: EndpointResolver,
        rate_limiter: RateLimiter,
        *,
        session: Optional[requests.Session] = None,
        timeout_s: int = 30,
    ) -> None:
        self._resolver = resolver
        self._rate_limiter = rate_limiter
        self._session = session or requests.Session()
        self._timeout_s = timeout_s

    def fetch_all(self, resource: str, params: Optional[Mapping[str, Any]] = None) -> list[dict[str, Any]]:
        """
        Trae todos los records del recurso probando los candidatos en orden.

        - El primer candidato que responde 2xx con records no vacíos gana.
        - Sobre ese candidato se pagina hasta una página corta o vacía.
        - Si ningún candidato devuelve datos se retorna [] ("sin datos").
        """
        for descriptor in self._resolver.candidates_for(resource, params):
            first_page = self._probe(descriptor)
            if not first_page:
                continue

            logger.info(
                f"Cin7 '{resource}': usando {descriptor.url} ({descriptor.candidate.version}), "
                f"página 1 con {len(first_page)} records"
            )
            return self._paginate(descriptor, first_page)

        logger.warning(f"Cin7 '{resource}': ningún endpoint devolvió datos (params={dict(params or {})})")
        return []

    def _probe(self, descriptor: RequestDescriptor) -> list[dict[str, Any]]:
        """
        Primera página de un candidato. Cualquier falla descarta el candidato
        sin reintentos.
        """
        try:
            resp = self._get(descriptor, page=1)
        except requests.RequestException as e:
            logger.warning(f"Falló {descriptor.url}: {e}")
            return []

        if not (200 <= resp.status_code < 300):
            logger.warning(f"Falló {descriptor.url}: HTTP {resp.status_code}")
            return []

        try:
            payload = resp.json()
        except ValueError:
            logger.warning(f"Falló {descriptor.url}: body no es JSON")
            return []

        records = extract_records(payload, descriptor.candidate.result_keys)
        if not records:
            logger.info(f"Sin records en {descriptor.url}")
        return records

    def _paginate(self, descriptor: RequestDescriptor, first_page: list[dict[str, Any]]) -> list[dict[str, Any]]:
        page_size = descriptor.page_size
        records = list(first_page)
        last_page_len = len(first_page)
        page = 1

        while last_page_len >= page_size:
            page += 1
            try:
                resp = self._get(descriptor, page=page)
            except requests.RequestException as e:
                raise Cin7ApiError(f"Cin7 request falló en página {page} de {descriptor.url}: {e}") from e

            if not (200 <= resp.status_code < 300):
                raise Cin7ApiError(
                    f"Cin7 request falló {resp.status_code} en página {page} de {descriptor.url}: {resp.text}"
                )

            try:
                payload = resp.json()
            except ValueError as e:
                raise Cin7ApiError(f"Cin7 devolvió un body no JSON en página {page} de {descriptor.url}") from e

            batch = extract_records(payload, descriptor.candidate.result_keys)
            records.extend(batch)
            last_page_len = len(batch)
            logger.debug(f"Página {page}: {last_page_len} records (acumulado {len(records)})")

        return records

    def _get(self, descriptor: RequestDescriptor, *, page: int) -> requests.Response:
        self._rate_limiter.wait()
        return self._session.request(
            method="GET",
            url=descriptor.url,
            params=descriptor.params_for_page(page),
            headers=descriptor.headers,
            timeout=self._timeout_s,
        )
