"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta en el borde (el documento de catálogo es JSON
  generado por otra herramienta) y documentación autocontenida (Field).
- Los alias camelCase permiten leer el catálogo tal cual lo escribe el generador.

Nota:
- Estos modelos describen *qué* es un endpoint o un borrador, no *cómo* se pinta.
- El orden de `Domain.operations` es significativo: la clasificación de roles
  elige "el primero que encaja".
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict


_PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")


def path_placeholders(path: str) -> list[str]:
    """Placeholders `{param}` presentes en `path`, en orden de aparición."""

    return _PLACEHOLDER_RE.findall(path)


class HttpMethod(str, Enum):
    """Métodos HTTP que el catálogo puede declarar."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class Operation(BaseModel):
    """Un endpoint HTTP declarado en el catálogo.

    Reglas:
    - `path_params` son exactamente los placeholders del `path` (si el catálogo
      no los trae, se derivan del path).
    - Inmutable: se carga una vez y solo se lee.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    key: str = Field(
        ...,
        min_length=1,
        description="Identificador único dentro del dominio (p.ej. 'get-widgets-id').",
    )
    method: HttpMethod = Field(
        default=HttpMethod.GET,
        description="Método HTTP.",
    )
    path: str = Field(
        default="/",
        min_length=1,
        description="Plantilla de path con placeholders `{param}`.",
    )
    path_params: list[str] = Field(
        default_factory=list,
        alias="pathParams",
        description="Parámetros de path, en el orden en que aparecen en `path`.",
    )
    query_params: list[str] = Field(
        default_factory=list,
        alias="queryParams",
        description="Nombres de parámetros de query aceptados (sin duplicados).",
    )
    sample_body: str | None = Field(
        default=None,
        alias="sampleBody",
        description="Payload de ejemplo (texto, normalmente JSON) si el endpoint acepta cuerpo.",
    )
    label: str | None = Field(
        default=None,
        description="Resumen legible (summary/operationId del OpenAPI).",
    )
    has_body: bool = Field(
        default=False,
        alias="hasBody",
        description="Indica si el endpoint declara un cuerpo JSON.",
    )

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        out = dict(data)
        # null en el JSON equivale a "no viene".
        for key in ("method", "path", "pathParams", "path_params", "queryParams", "query_params"):
            if key in out and out[key] is None:
                del out[key]
        if "pathParams" not in out and "path_params" not in out:
            out["pathParams"] = path_placeholders(out.get("path") or "/")
        return out

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper() or "GET"
        return value

    @field_validator("query_params")
    @classmethod
    def _dedupe_query(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @field_validator("sample_body")
    @classmethod
    def _empty_sample_is_none(cls, value: str | None) -> str | None:
        return value or None

    @model_validator(mode="after")
    def _check_path_params(self) -> "Operation":
        expected = path_placeholders(self.path)
        if list(self.path_params) != expected:
            raise ValueError(
                f"pathParams {self.path_params!r} do not match placeholders {expected!r} in {self.path!r}"
            )
        return self

    def display_label(self) -> str:
        return self.label or f"{self.method.value} {self.path}"

    def qualified_key(self, domain_key: str) -> str:
        """Clave global `<dominio>-<operación>` (única entre todos los dominios)."""

        return f"{domain_key}-{self.key}"


class Domain(BaseModel):
    """Grupo de operaciones relacionadas que se muestra como una pantalla."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    key: str = Field(..., min_length=1, description="Slug único del dominio.")
    label: str = Field(..., min_length=1, description="Nombre legible.")
    tag: str = Field(default="", description="Tag OpenAPI de origen.")
    operations: list[Operation] = Field(
        default_factory=list,
        description="Operaciones en orden de declaración (no reordenar).",
    )


class Catalog(BaseModel):
    """Documento de catálogo completo."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    generated_at: str | None = Field(
        default=None,
        alias="generatedAt",
        description="Marca temporal ISO-8601 de generación.",
    )
    domains: list[Domain] = Field(default_factory=list)


class RoleAssignment(BaseModel):
    """Qué operación cumple cada rol CRUD en un dominio.

    Derivado, nunca persistido. Se reemplaza entero al cambiar de dominio.
    """

    model_config = ConfigDict(frozen=True)

    list_op: Operation | None = None
    detail_op: Operation | None = None
    create_op: Operation | None = None
    update_op: Operation | None = None
    delete_op: Operation | None = None
    primary_param: str = "id"


class BodyDraft(BaseModel):
    """Borrador editable de un cuerpo de petición.

    Siempre está en exactamente un modo:
    - `fields`: mapa ordenado nombre -> texto (formulario plano).
    - `raw`: texto libre (JSON anidado o texto que no parsea).
    """

    mode: Literal["fields", "raw"]
    fields: dict[str, str] | None = None
    raw: str | None = None

    @model_validator(mode="after")
    def _one_mode(self) -> "BodyDraft":
        if self.mode == "fields":
            if self.fields is None or self.raw is not None:
                raise ValueError("fields drafts carry only `fields`")
        elif self.raw is None or self.fields is not None:
            raise ValueError("raw drafts carry only `raw`")
        return self

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> "BodyDraft":
        return cls(mode="fields", fields=dict(fields))

    @classmethod
    def from_raw(cls, text: str) -> "BodyDraft":
        return cls(mode="raw", raw=text)

    def set_field(self, name: str, value: str) -> None:
        if self.mode != "fields" or self.fields is None:
            raise ValueError("cannot set a field on a raw draft")
        self.fields[name] = value

    def set_raw(self, text: str) -> None:
        if self.mode != "raw":
            raise ValueError("cannot set raw text on a fields draft")
        self.raw = text


class ListPage(BaseModel):
    """Respuesta de listado normalizada (lista simple o sobre paginado)."""

    rows: list[Any] = Field(default_factory=list)
    total_elements: int | None = None
    total_pages: int | None = None
