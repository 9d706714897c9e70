"""Contrato del cliente HTTP del backend de administración.

Por qué Protocol:
- La sesión CRUD solo necesita `raw(method, path, query=, body=)`.
- Transporte, cabeceras de auth y timeouts son cosa del adaptador; en tests
  basta un doble que cumpla la firma.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class AdminApi(Protocol):
    """Contrato mínimo del cliente.

    Reglas de diseño:
    - `raw` es asíncrono porque hace I/O.
    - Cualquier respuesta no-2xx se traduce a `core.domain.errors.HttpError`.
    - `body=None` significa "sin cuerpo".
    """

    async def raw(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, str] | None = None,
        body: Any = None,
    ) -> Any:
        """Ejecuta la petición y devuelve JSON decodificado, texto o None (204)."""

        ...
