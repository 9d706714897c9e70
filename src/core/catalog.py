"""Catálogo de operaciones (admin-openapi-ops.json).

Este módulo vive en `core/` porque:
- centraliza *qué* endpoints existen sin acoplarse a la CLI ni a httpx
- es la única fuente de verdad para la sesión CRUD genérica.

Regla importante: el orden de declaración se conserva tal cual. La
clasificación de roles es "primero que encaja", así que reordenar aquí
cambiaría silenciosamente qué endpoint se usa.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

from pydantic import ValidationError

from core.config import AppSettings, get_user_config_dir
from core.domain.errors import CatalogError
from core.domain.models import Catalog, Domain

logger = logging.getLogger(__name__)

CATALOG_FILENAME = "admin-openapi-ops.json"


class OperationCatalog:
    """Vista de solo lectura sobre un `Catalog` ya validado."""

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog
        self._by_key = {d.key: d for d in catalog.domains}

    def __iter__(self) -> Iterator[Domain]:
        return iter(self._catalog.domains)

    def __len__(self) -> int:
        return len(self._catalog.domains)

    @property
    def domains(self) -> list[Domain]:
        return list(self._catalog.domains)

    @property
    def generated_at(self) -> str | None:
        return self._catalog.generated_at

    def get(self, key: str) -> Domain | None:
        return self._by_key.get(key)

    def require(self, key: str) -> Domain:
        domain = self.get(key)
        if domain is None:
            raise CatalogError(f"Domain not found: {key}")
        return domain

    def first(self) -> Domain | None:
        """Dominio de respaldo cuando se pide uno inexistente."""

        return self._catalog.domains[0] if self._catalog.domains else None

    def search(self, term: str | None) -> list[Domain]:
        """Filtra por subcadena (sin mayúsculas) en label o tag."""

        needle = (term or "").strip().lower()
        if not needle:
            return self.domains
        return [d for d in self._catalog.domains if needle in d.label.lower() or needle in d.tag.lower()]

    def generated_at_display(self) -> str | None:
        """Marca temporal en hora local; si no parsea, el texto tal cual."""

        raw = self._catalog.generated_at
        if not raw:
            return None
        try:
            dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return raw
        return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def parse_catalog(data: Any) -> OperationCatalog:
    """Valida y normaliza un documento ya decodificado.

    - Los dominios sin operaciones se descartan.
    - Las claves de dominio deben ser únicas, y las de operación dentro de cada dominio.
    """

    if not isinstance(data, dict) or not isinstance(data.get("domains"), list):
        raise CatalogError("Catalog document must be an object with a 'domains' list.")

    raw_domains = [
        d for d in data["domains"]
        if not (isinstance(d, dict) and not d.get("operations"))
    ]
    try:
        catalog = Catalog.model_validate({**data, "domains": raw_domains})
    except ValidationError as exc:
        raise CatalogError(f"Invalid catalog document: {exc}") from exc

    seen: set[str] = set()
    for domain in catalog.domains:
        if domain.key in seen:
            raise CatalogError(f"Duplicate domain key: {domain.key}")
        seen.add(domain.key)
        op_keys: set[str] = set()
        for op in domain.operations:
            if op.key in op_keys:
                raise CatalogError(f"Duplicate operation key in {domain.key}: {op.key}")
            op_keys.add(op.key)

    if not catalog.domains:
        logger.warning("Catalog has no domains with operations")
    return OperationCatalog(catalog)


def load_catalog(path: Path) -> OperationCatalog:
    """Carga el catálogo desde disco (UTF-8)."""

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc
    if not raw.strip():
        raise CatalogError(f"Catalog {path} is empty.")
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise CatalogError(f"Catalog {path} is not valid JSON: {exc}") from exc

    catalog = parse_catalog(data)
    logger.debug("Loaded %d domains from %s", len(catalog), path)
    return catalog


def default_catalog_path(settings: AppSettings | None = None) -> Path | None:
    """Busca el catálogo en ubicaciones comunes.

    Orden:
    1) `ADMIN_EXPLORER_CATALOG_PATH` (si está configurado)
    2) ./docs/admin-openapi-ops.json
    3) <user config>/admin-openapi-ops.json
    4) ./admin-openapi-ops.json
    """

    settings = settings or AppSettings()
    if settings.catalog_path is not None:
        return settings.catalog_path

    candidates = [
        Path.cwd() / "docs" / CATALOG_FILENAME,
        get_user_config_dir() / CATALOG_FILENAME,
        Path.cwd() / CATALOG_FILENAME,
    ]
    for p in candidates:
        if p.exists() and p.is_file():
            return p
    return None
