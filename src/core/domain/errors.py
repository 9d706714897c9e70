"""Errores del dominio.

Por qué una jerarquía propia:
- La CLI y la sesión distinguen "catálogo roto", "JSON inválido del usuario"
  y "el backend respondió con error" sin inspeccionar mensajes.
- Ningún error es fatal para el proceso: cada uno se muestra en la pantalla activa.
"""

from __future__ import annotations

from typing import Any


class AdminExplorerError(Exception):
    """Base de todos los errores de admin-explorer."""


class CatalogError(AdminExplorerError):
    """El documento de catálogo falta, está vacío o es inválido (o el dominio no existe)."""


class ParseError(AdminExplorerError):
    """El cuerpo en modo texto no es JSON válido.

    El borrador no se toca: el usuario puede corregirlo y reenviar.
    """

    def __init__(self, message: str = "Body must be valid JSON.", *, text: str | None = None) -> None:
        super().__init__(message)
        self.text = text


class HttpError(AdminExplorerError):
    """Respuesta no-2xx (o fallo de transporte, status 0) del backend."""

    def __init__(self, status: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.data = data

    @property
    def code(self) -> str | None:
        """Código legible por máquina si el backend lo envía (`code` / `errorCode`)."""

        if not isinstance(self.data, dict):
            return None
        for key in ("code", "errorCode"):
            value = self.data.get(key)
            if value is not None and value != "":
                return str(value)
        return None

    def display(self) -> str:
        code = self.code
        return f"{self.message} ({code})" if code else self.message
