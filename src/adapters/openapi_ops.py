"""Generador del catálogo de operaciones a partir de un documento OpenAPI 3.

Idea:
- En vez de escribir una pantalla por recurso, se agrupan los endpoints por tag
  y se escribe un JSON (admin-openapi-ops.json) que la sesión CRUD genérica lee.
- Cada operación lleva un `sampleBody` sintético construido desde su schema de
  request, que luego decide si el editor es un formulario o texto libre.

Orden de salida (importante para la clasificación de roles):
- Operaciones ordenadas por path y luego por método.
- Dominios ordenados por label (sin distinguir mayúsculas).
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from core.catalog import parse_catalog
from core.domain.errors import CatalogError
from core.domain.models import path_placeholders

logger = logging.getLogger(__name__)

ADMIN_API_PREFIX = "/admin-api"
SCHEMA_REF_PREFIX = "#/components/schemas/"

_HTTP_METHODS = ("get", "post", "put", "patch", "delete")
_MAX_SAMPLE_DEPTH = 3
_MAX_SAMPLE_PROPERTIES = 15


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "misc"


def title_case(tag: str) -> str:
    """`AdminWidgetController` -> `Widget`; `fee_configs` -> `fee configs`."""

    text = re.sub(r"([a-z])([A-Z])", r"\1 \2", tag)
    text = re.sub(r"Controller$", "", text)
    text = re.sub(r"^Admin", "", text)
    text = text.replace("_", " ")
    text = re.sub(r"\s+", " ", text).strip()
    return text or "Misc"


def _iso_now(now: datetime | None = None) -> str:
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _truthy(value: Any) -> bool:
    # Objetos y arrays vacíos cuentan como muestra válida ({} / []).
    if isinstance(value, (dict, list)):
        return True
    return bool(value)


class SampleBuilder:
    """Construye payloads de ejemplo desde schemas (subset práctico)."""

    def __init__(self, schemas: dict[str, Any], *, now: datetime | None = None) -> None:
        self._schemas = schemas
        self._timestamp = _iso_now(now)

    def resolve_ref(self, ref: str) -> Any:
        if not ref.startswith(SCHEMA_REF_PREFIX):
            return None
        return self._schemas.get(ref[len(SCHEMA_REF_PREFIX):])

    def sample(self, schema: Any, depth: int = 0) -> Any:
        if not isinstance(schema, dict) or depth > _MAX_SAMPLE_DEPTH:
            return None
        if "$ref" in schema:
            return self.sample(self.resolve_ref(str(schema["$ref"])), depth + 1)
        all_of = schema.get("allOf")
        if isinstance(all_of, list) and all_of:
            return self.sample(all_of[0], depth + 1)

        enum = schema.get("enum")
        if isinstance(enum, list) and enum:
            return enum[0]

        kind = schema.get("type")
        if kind == "object":
            props = schema.get("properties") or {}
            return {
                key: self.sample(props[key], depth + 1)
                for key in list(props)[:_MAX_SAMPLE_PROPERTIES]
            }
        if kind == "array":
            return [self.sample(schema.get("items"), depth + 1)]
        if kind in ("integer", "number"):
            return 0
        if kind == "boolean":
            return False
        if schema.get("format") == "date-time":
            return self._timestamp
        return ""


def _clean_path(path_name: str) -> str:
    if path_name.startswith(ADMIN_API_PREFIX):
        path_name = path_name.replace(ADMIN_API_PREFIX, "", 1)
    return path_name or "/"


def _dedupe_keys(ops: list[dict[str, Any]]) -> list[dict[str, Any]]:
    # `/a/{b}` y `/a/b` dan el mismo slug; el segundo pasa a `-2`, `-3`...
    used: set[str] = set()
    for op in ops:
        key, n = op["key"], 2
        while key in used:
            key = f"{op['key']}-{n}"
            n += 1
        op["key"] = key
        used.add(key)
    return ops


def build_catalog(spec: dict[str, Any], *, now: datetime | None = None) -> dict[str, Any]:
    """Documento de catálogo (dict listo para `json.dump`)."""

    schemas = (spec.get("components") or {}).get("schemas") or {}
    builder = SampleBuilder(schemas, now=now)
    operations_by_tag: dict[str, list[dict[str, Any]]] = {}

    for path_name, methods in (spec.get("paths") or {}).items():
        if not isinstance(methods, dict):
            continue
        for method, op in methods.items():
            # Un path item también trae `parameters`, `summary`, etc.
            if method.lower() not in _HTTP_METHODS or not isinstance(op, dict):
                continue
            tags = op.get("tags") or []
            tag = tags[0] if tags else "Admin"
            cleaned = _clean_path(path_name)
            upper = method.upper()

            request_schema = (
                ((op.get("requestBody") or {}).get("content") or {}).get("application/json") or {}
            ).get("schema")
            sample = builder.sample(request_schema) if request_schema is not None else None

            entry: dict[str, Any] = {
                "key": slugify(f"{method}-{cleaned.replace('{', '').replace('}', '')}"),
                "method": upper,
                "path": cleaned,
                "label": op.get("summary") or op.get("operationId") or f"{upper} {cleaned}",
                "hasBody": request_schema is not None,
                "queryParams": [
                    p.get("name")
                    for p in op.get("parameters") or []
                    if isinstance(p, dict) and p.get("in") == "query" and p.get("name")
                ],
                "pathParams": path_placeholders(cleaned),
            }
            if _truthy(sample):
                entry["sampleBody"] = json.dumps(sample, indent=2, ensure_ascii=False)
            operations_by_tag.setdefault(tag, []).append(entry)

    domains = [
        {
            "key": slugify(tag),
            "tag": tag,
            "label": title_case(tag),
            "operations": _dedupe_keys(sorted(ops, key=lambda o: (o["path"], o["method"]))),
        }
        for tag, ops in operations_by_tag.items()
    ]
    domains.sort(key=lambda d: d["label"].casefold())

    return {"generatedAt": _iso_now(now), "domains": domains}


def generate_catalog_file(spec_path: Path, output_path: Path, *, now: datetime | None = None) -> int:
    """Lee el OpenAPI, escribe el catálogo y devuelve cuántos dominios salieron.

    El resultado se valida con el mismo cargador que usa la CLI antes de escribirse.
    """

    try:
        spec = json.loads(spec_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f"Cannot read OpenAPI document {spec_path}: {exc}") from exc
    if not isinstance(spec, dict):
        raise CatalogError(f"OpenAPI document {spec_path} must be a JSON object.")

    output = build_catalog(spec, now=now)
    parse_catalog(output)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(output, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.debug("Wrote %d domains to %s", len(output["domains"]), output_path)
    return len(output["domains"])
