"""Wrapper de httpx para el backend de administración.

Por qué un wrapper:
- Estandariza base URL, timeouts, headers y auth para todas las pantallas.
- Traduce respuestas no-2xx a `HttpError` con mensaje legible y datos crudos.
- Facilita testeo: se puede inyectar un `httpx.AsyncClient` con `MockTransport`.

No reintenta: si algo falla, el usuario relanza la acción.
"""

from __future__ import annotations

import json
import logging
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping

import httpx

from core.config import AppSettings
from core.domain.errors import HttpError

logger = logging.getLogger(__name__)

ADMIN_API_PREFIX = "/admin-api"

_DUPLICATE_SLASHES_RE = re.compile(r"(?<!:)/{2,}")


def normalize_base_url(base_url: str) -> str:
    """Quita barras finales y garantiza el sufijo `/admin-api`."""

    base = base_url.rstrip("/")
    if base.endswith(ADMIN_API_PREFIX):
        return base
    return f"{base}{ADMIN_API_PREFIX}"


def normalize_path(path: str) -> str:
    """Path relativo a la base: con `/` inicial y sin `/admin-api` duplicado."""

    with_slash = path if path.startswith("/") else f"/{path}"
    if with_slash.startswith(ADMIN_API_PREFIX):
        return with_slash[len(ADMIN_API_PREFIX):] or "/"
    return with_slash


def build_url(base_url: str, path: str) -> str:
    if path.startswith("http://") or path.startswith("https://"):
        target = path
    else:
        target = f"{normalize_base_url(base_url)}{normalize_path(path)}"
    return _DUPLICATE_SLASHES_RE.sub("/", target)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con los defaults del backend.

    `transport` permite inyectar `httpx.MockTransport` en tests.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if settings.api_token:
        headers["Authorization"] = f"Bearer {settings.api_token}"
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


def _is_json(response: httpx.Response) -> bool:
    return "application/json" in response.headers.get("content-type", "")


def error_from_response(response: httpx.Response) -> HttpError:
    """Construye `HttpError` a partir de una respuesta no-2xx."""

    status = response.status_code
    if _is_json(response):
        try:
            data = response.json()
        except ValueError:
            data = None
        if data is not None:
            message = None
            if isinstance(data, dict):
                message = data.get("message") or data.get("error") or data.get("detail")
            text = str(message) if message else json.dumps(data, ensure_ascii=False)
            return HttpError(status, text, data)

    text = response.text
    return HttpError(status, text or f"Request failed with status {status}")


class AdminApiClient:
    """Implementación httpx de `core.interfaces.admin_api.AdminApi`."""

    def __init__(self, client: httpx.AsyncClient, settings: AppSettings | None = None) -> None:
        self._client = client
        self._settings = settings or AppSettings()

    async def raw(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Any = None,
    ) -> Any:
        url = build_url(self._settings.api_base_url, path)
        kwargs: dict[str, Any] = {}
        if query:
            kwargs["params"] = dict(query)
        if body is not None:
            kwargs["content"] = body if isinstance(body, str) else json.dumps(body, ensure_ascii=False)

        logger.debug("%s %s query=%s", method.upper(), url, dict(query or {}))
        try:
            response = await self._client.request(method.upper(), url, **kwargs)
        except httpx.HTTPError as exc:
            raise HttpError(0, f"Request failed: {exc}") from exc

        if not response.is_success:
            raise error_from_response(response)
        if response.status_code == 204:
            return None
        if _is_json(response):
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text


@asynccontextmanager
async def open_admin_api(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[AdminApiClient]:
    """Cliente listo para usar; cierra el `AsyncClient` al salir."""

    settings = settings or AppSettings()
    async with build_async_client(settings, transport=transport) as client:
        yield AdminApiClient(client, settings)
