"""Sesión CRUD genérica (la "pantalla" sin UI).

Guarda el estado de una pantalla de dominio abierta: roles asignados, filas
listadas, registro seleccionado, borradores y mensajes inline de info/error.
La CLI solo pinta este estado y reenvía acciones; aquí no se imprime ni se
pregunta nada.

Modelo de concurrencia:
- Un único hilo lógico (asyncio). Cada petición se espera por separado.
- `submitting` bloquea envíos duplicados de alta/edición/baja y
  `list_loading` una recarga duplicada pedida por el usuario.
- No hay token de generación: una respuesta que llega después de una petición
  más nueva se aplica igualmente (carrera aceptada).
- Los fallos nunca se reintentan solos.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from core.catalog import OperationCatalog
from core.config import AppSettings
from core.domain.errors import HttpError, ParseError
from core.domain.models import BodyDraft, Domain, ListPage, Operation, RoleAssignment
from core.interfaces.admin_api import AdminApi
from core.services.body_shape import analyze, draft_from_record
from core.services.coercion import to_payload
from core.services.paths import bind
from core.services.roles import classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Column:
    """Columna del listado (clave del registro + etiqueta)."""

    key: str
    label: str


ACTIONS_COLUMN = Column(key="actions", label="Actions")


def normalize_list_response(response: Any) -> ListPage:
    """Lista simple o sobre `{content, totalElements, totalPages}` -> `ListPage`."""

    if isinstance(response, list):
        return ListPage(rows=response)
    if isinstance(response, dict):
        rows = response.get("content")
        return ListPage(
            rows=rows if isinstance(rows, list) else [],
            total_elements=_as_int(response.get("totalElements")),
            total_pages=_as_int(response.get("totalPages")),
        )
    return ListPage()


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def bind_operation(op: Operation, value: Any) -> str:
    """Path de `op` con su primer parámetro sustituido por `value`."""

    if not op.path_params:
        return op.path
    return bind(op.path, op.path_params[0], value)


class CrudSession:
    """Estado y acciones de una pantalla CRUD para un dominio del catálogo."""

    def __init__(
        self,
        catalog: OperationCatalog,
        domain_key: str,
        api: AdminApi,
        settings: AppSettings | None = None,
    ) -> None:
        self.catalog = catalog
        self.api = api
        self.settings = settings or AppSettings()

        self.domain: Domain | None = None
        self.roles = RoleAssignment()
        self.fallback_key: str | None = None

        self.page = 0
        self.size = self.settings.default_page_size

        self.rows: list[Any] = []
        self.total_elements: int | None = None
        self.total_pages: int | None = None
        self.list_error: str | None = None
        self.list_loading = False

        self.selected_id: Any = None
        self.detail: Any = None
        self.info: str | None = None
        self.action_error: str | None = None
        self.create_draft: BodyDraft | None = None
        self.update_draft: BodyDraft | None = None
        self.submitting = False

        self.switch_domain(domain_key)

    # ------------------------------------------------------------------
    # Dominio activo
    # ------------------------------------------------------------------

    @property
    def not_found(self) -> bool:
        return self.domain is None

    def switch_domain(self, domain_key: str) -> None:
        """Activa otro dominio: roles recalculados y estado de edición descartado."""

        self.domain = self.catalog.get(domain_key)
        if self.domain is None:
            first = self.catalog.first()
            self.fallback_key = first.key if first else None
            self.roles = RoleAssignment()
            logger.warning("Domain not found: %s (fallback: %s)", domain_key, self.fallback_key)
        else:
            self.fallback_key = None
            self.roles = classify(self.domain.operations)

        self.rows = []
        self.total_elements = None
        self.total_pages = None
        self.list_error = None
        self.selected_id = None
        self.detail = None
        self.info = None
        self.action_error = None
        self.create_draft = None
        self.update_draft = None

    def _reset_messages(self) -> None:
        self.info = None
        self.action_error = None

    def _fail(self, exc: HttpError | ParseError) -> None:
        if isinstance(exc, HttpError):
            logger.warning("Request failed (%s): %s", exc.status, exc.message)
            self.action_error = exc.display()
        else:
            self.action_error = str(exc)

    # ------------------------------------------------------------------
    # Listado
    # ------------------------------------------------------------------

    def list_query(self) -> dict[str, str] | None:
        """`page`/`size` solo si la operación de listado los declara."""

        op = self.roles.list_op
        if op is None:
            return None
        query: dict[str, str] = {}
        if "page" in op.query_params:
            query["page"] = str(self.page)
        if "size" in op.query_params:
            query["size"] = str(self.size)
        return query or None

    async def fetch_list(self) -> bool:
        op = self.roles.list_op
        if op is None:
            return False
        self.list_loading = True
        self.list_error = None
        self.info = None
        try:
            response = await self.api.raw(op.method.value, op.path, query=self.list_query())
        except HttpError as exc:
            logger.warning("List failed (%s): %s", exc.status, exc.message)
            self.list_error = exc.display()
            return False
        finally:
            self.list_loading = False

        page = normalize_list_response(response)
        self.rows = page.rows
        self.total_elements = page.total_elements
        self.total_pages = page.total_pages
        return True

    async def refresh(self) -> bool:
        """Recarga pedida por el usuario (ignorada si ya hay una en curso)."""

        if self.list_loading:
            return False
        return await self.fetch_list()

    def columns(self) -> list[Column]:
        if not self.rows or not isinstance(self.rows[0], Mapping):
            return []
        keys = list(self.rows[0].keys())[: self.settings.list_max_columns]
        return [Column(key=k, label=k) for k in keys] + [ACTIONS_COLUMN]

    def row_id(self, row: Mapping[str, Any]) -> Any:
        value = row.get(self.roles.primary_param)
        return value if value is not None else row.get("id")

    # ------------------------------------------------------------------
    # Detalle
    # ------------------------------------------------------------------

    async def view(self, row_or_id: Any) -> bool:
        op = self.roles.detail_op
        if op is None:
            return False
        self._reset_messages()
        record_id = self.row_id(row_or_id) if isinstance(row_or_id, Mapping) else row_or_id
        self.selected_id = record_id
        try:
            self.detail = await self.api.raw(op.method.value, bind_operation(op, record_id))
        except HttpError as exc:
            self._fail(exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Alta
    # ------------------------------------------------------------------

    def open_create(self) -> BodyDraft | None:
        op = self.roles.create_op
        if op is None:
            return None
        self.create_draft = analyze(op.sample_body)
        return self.create_draft

    async def submit_create(self) -> bool:
        op = self.roles.create_op
        if op is None or self.submitting:
            return False
        self._reset_messages()
        draft = self.create_draft if self.create_draft is not None else self.open_create()
        self.submitting = True
        try:
            body = to_payload(draft)
            await self.api.raw(op.method.value, op.path, body=body)
        except (ParseError, HttpError) as exc:
            self._fail(exc)
            return False
        finally:
            self.submitting = False

        await self.fetch_list()
        self.info = "Created successfully."
        return True

    # ------------------------------------------------------------------
    # Edición
    # ------------------------------------------------------------------

    def open_update(self, row: Mapping[str, Any]) -> BodyDraft | None:
        if self.roles.update_op is None:
            return None
        self.selected_id = self.row_id(row)
        self.update_draft = draft_from_record(row, self.roles.primary_param)
        return self.update_draft

    async def submit_update(self) -> bool:
        op = self.roles.update_op
        if op is None or self.submitting or self.update_draft is None:
            return False
        if self.selected_id is None or self.selected_id == "":
            return False
        self._reset_messages()
        record_id = self.selected_id
        self.submitting = True
        try:
            body = to_payload(self.update_draft)
            await self.api.raw(op.method.value, bind_operation(op, record_id), body=body)
        except (ParseError, HttpError) as exc:
            self._fail(exc)
            return False
        finally:
            self.submitting = False

        self.update_draft = None
        await self.fetch_list()
        if self.roles.detail_op is not None:
            await self.view(record_id)
        self.info = f"Updated {record_id}."
        return True

    # ------------------------------------------------------------------
    # Baja
    # ------------------------------------------------------------------

    async def delete(self, record_id: Any) -> bool:
        op = self.roles.delete_op
        if op is None or self.submitting:
            return False
        self._reset_messages()
        self.submitting = True
        try:
            await self.api.raw(op.method.value, bind_operation(op, record_id))
        except HttpError as exc:
            self._fail(exc)
            return False
        finally:
            self.submitting = False

        await self.fetch_list()
        self.info = f"Deleted {record_id}."
        if self.selected_id == record_id:
            self.detail = None
            self.selected_id = None
        return True
