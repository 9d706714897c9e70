"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

import json
from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.catalog import OperationCatalog
from core.domain.models import BodyDraft, Domain, Operation, RoleAssignment
from core.services.crud_session import ACTIONS_COLUMN, CrudSession

EMPTY = "—"
_CELL_MAX_CHARS = 60


def pretty(value: Any) -> str:
    """Texto para mostrar un valor arbitrario (strings tal cual, resto como JSON)."""

    if value is None:
        return EMPTY
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, indent=2, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def render_cell(value: Any) -> str:
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    else:
        text = str(value)
    if len(text) > _CELL_MAX_CHARS:
        return text[: _CELL_MAX_CHARS - 1] + "…"
    return text


def build_domains_table(catalog: OperationCatalog, domains: Sequence[Domain]) -> Table:
    """Tabla del explorador (equivalente a la página de aterrizaje)."""

    caption = f"{len(domains)} of {len(catalog)} categories"
    snapshot = catalog.generated_at_display()
    if snapshot:
        caption += f" • Schema snapshot: {snapshot}"

    table = Table(title="API Explorer", caption=caption)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Label", style="bold")
    table.add_column("Tag", style="dim")
    table.add_column("Endpoints", justify="right")
    for domain in domains:
        table.add_row(domain.key, escape(domain.label), escape(domain.tag), str(len(domain.operations)))
    return table


def _op_cell(op: Operation | None) -> str:
    if op is None:
        return "[dim]not available[/dim]"
    return f"{op.method.value} {op.path}"


def build_roles_table(roles: RoleAssignment) -> Table:
    table = Table(title="CRUD roles")
    table.add_column("Role", style="cyan", no_wrap=True)
    table.add_column("Endpoint")
    table.add_row("list", _op_cell(roles.list_op))
    table.add_row("detail", _op_cell(roles.detail_op))
    table.add_row("create", _op_cell(roles.create_op))
    table.add_row("update", _op_cell(roles.update_op))
    table.add_row("delete", _op_cell(roles.delete_op))
    table.caption = f"Identifier parameter: {roles.primary_param}"
    return table


def build_operations_table(domain: Domain) -> Table:
    table = Table(title=f"{domain.label} • {len(domain.operations)} endpoints")
    table.add_column("Method", style="magenta", no_wrap=True)
    table.add_column("Path", style="white")
    table.add_column("Query", style="dim")
    table.add_column("Body", style="green")
    table.add_column("Summary", style="dim")
    for op in domain.operations:
        table.add_row(
            op.method.value,
            op.path,
            ", ".join(op.query_params),
            "yes" if op.sample_body or op.has_body else "",
            op.display_label(),
        )
    return table


def _row_actions(session: CrudSession, row: Any) -> str:
    if not isinstance(row, dict) or session.row_id(row) is None:
        return EMPTY
    roles = session.roles
    actions = [
        name
        for name, op in (("view", roles.detail_op), ("update", roles.update_op), ("delete", roles.delete_op))
        if op is not None
    ]
    return ", ".join(actions) or EMPTY


def build_records_table(session: CrudSession) -> Table:
    """Listado: primeras columnas de la primera fila + acciones disponibles."""

    title = session.domain.label if session.domain else "Records"
    table = Table(title=title)
    columns = session.columns()
    if not columns:
        table.add_column("No records found", style="dim")
        return table

    for column in columns:
        style = "yellow" if column is ACTIONS_COLUMN else None
        table.add_column(column.label, style=style, overflow="fold")
    for row in session.rows:
        cells = []
        for column in columns:
            if column is ACTIONS_COLUMN:
                cells.append(Text(_row_actions(session, row)))
            elif isinstance(row, dict):
                cells.append(Text(render_cell(row.get(column.key))))
            else:
                cells.append(Text(render_cell(row)))
        table.add_row(*cells)

    parts = [f"page {session.page}"]
    if session.total_pages is not None:
        parts[0] += f" of {session.total_pages}"
    if session.total_elements is not None:
        parts.append(f"{session.total_elements} total")
    table.caption = " • ".join(parts)
    return table


def build_detail_panel(detail: Any, title: str) -> Panel:
    return Panel(Text(pretty(detail)), title=Text(title, style="bold"), border_style="blue")


def build_draft_panel(draft: BodyDraft, title: str) -> Panel:
    """Vista previa del borrador antes de enviarlo."""

    if draft.mode == "raw":
        body = Text(draft.raw or "", style="white")
        subtitle = "raw JSON"
    else:
        body = Text()
        for name, value in (draft.fields or {}).items():
            body.append(f"{name}", style="cyan")
            body.append(f" = {value!r}\n")
        if not draft.fields:
            body.append("(no fields)", style="dim")
        subtitle = "fields"
    return Panel(body, title=Text(title, style="bold"), subtitle=subtitle, border_style="green")


def print_messages(console: Console, session: CrudSession) -> None:
    """Mensajes inline de la sesión (éxito en verde, errores en rojo)."""

    if session.list_error:
        console.print(f"[bold red]{escape(session.list_error)}[/bold red]")
    if session.info:
        console.print(f"[bold green]{escape(session.info)}[/bold green]")
    if session.action_error:
        console.print(f"[bold red]{escape(session.action_error)}[/bold red]")
