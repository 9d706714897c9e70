"""CLI principal (Typer).

Por qué la CLI es delgada:
- Toda la lógica de roles, borradores y peticiones vive en `CrudSession`.
- Aquí solo se traducen flags/prompts a acciones de la sesión y se pinta su
  estado con Rich. Los errores se convierten en códigos de salida.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.http_client import open_admin_api
from adapters.json_exporter import export_records_json
from adapters.openapi_ops import generate_catalog_file
from cli import doctor
from cli.ui_components import (
    build_detail_panel,
    build_domains_table,
    build_draft_panel,
    build_operations_table,
    build_records_table,
    build_roles_table,
    print_messages,
)
from core.catalog import CATALOG_FILENAME, OperationCatalog, default_catalog_path, load_catalog
from core.config import AppSettings
from core.domain.errors import CatalogError, ParseError
from core.domain.models import BodyDraft
from core.services.coercion import to_payload
from core.services.crud_session import CrudSession
from core.services.roles import classify

app = typer.Typer(no_args_is_help=True, help="Generic CRUD explorer for the admin API catalog.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

T = TypeVar("T")


@dataclass
class CliState:
    settings: AppSettings
    catalog_path: Path | None = None


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    catalog: Path | None = typer.Option(
        None,
        "--catalog",
        "-c",
        help=f"Path to {CATALOG_FILENAME} (defaults to ADMIN_EXPLORER_CATALOG_PATH or ./docs).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    _configure_logging(verbose)
    ctx.obj = CliState(settings=AppSettings(), catalog_path=catalog)


def _state(ctx: typer.Context) -> CliState:
    if isinstance(ctx.obj, CliState):
        return ctx.obj
    return CliState(settings=AppSettings())


def _load_catalog(state: CliState) -> OperationCatalog:
    path = state.catalog_path or default_catalog_path(state.settings)
    try:
        if path is None:
            raise CatalogError(
                f"No catalog found. Pass --catalog or run `admin-explorer generate` to create {CATALOG_FILENAME}."
            )
        return load_catalog(path)
    except CatalogError as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc


def _run_session(
    state: CliState,
    domain_key: str,
    action: Callable[[CrudSession], Awaitable[T]],
) -> T:
    """Abre el cliente HTTP, crea la sesión del dominio y ejecuta `action`."""

    catalog = _load_catalog(state)

    async def _go() -> T:
        async with open_admin_api(state.settings) as api:
            session = CrudSession(catalog, domain_key, api, state.settings)
            if session.not_found:
                hint = f" Try `{session.fallback_key}`." if session.fallback_key else ""
                _console.print(f"[red]Domain not found: {domain_key}.[/red]{hint}")
                raise typer.Exit(code=1)
            return await action(session)

    return asyncio.run(_go())


def _parse_assignments(values: list[str] | None) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for item in values or []:
        if "=" not in item:
            raise typer.BadParameter(f"expected NAME=VALUE, got {item!r}", param_hint="--set")
        name, value = item.split("=", 1)
        pairs.append((name.strip(), value))
    return pairs


def _apply_edits(
    draft: BodyDraft,
    *,
    assignments: list[tuple[str, str]],
    body: str | None,
    edit: bool,
) -> BodyDraft:
    """Aplica las ediciones del usuario al borrador abierto.

    `--body` sustituye el borrador por texto libre (la forma de enviar literales
    como el string "true", que en modo formulario se convertirían a booleano).
    """

    if body is not None:
        draft = BodyDraft.from_raw(body)
    if assignments:
        if draft.mode != "fields":
            raise typer.BadParameter("this body is edited as raw JSON; use --body or --edit", param_hint="--set")
        for name, value in assignments:
            draft.set_field(name, value)
    if edit:
        if draft.mode == "fields":
            for name, value in list((draft.fields or {}).items()):
                draft.set_field(name, typer.prompt(name, default=value, show_default=True))
        else:
            _edit_raw_until_valid(draft)
    return draft


def _edit_raw_until_valid(draft: BodyDraft) -> None:
    while True:
        edited = typer.edit(draft.raw or "", extension=".json")
        if edited is not None:
            draft.set_raw(edited)
        try:
            to_payload(draft)
            return
        except ParseError as exc:
            _console.print(f"[red]{exc}[/red]")
            if not typer.confirm("Edit again?", default=True):
                raise typer.Exit(code=1) from exc


def _finish(session: CrudSession) -> None:
    print_messages(_console, session)
    if session.action_error or session.list_error:
        raise typer.Exit(code=1)


@app.command()
def domains(
    ctx: typer.Context,
    search: str | None = typer.Option(None, "--search", "-s", help="Filter by label or tag."),
) -> None:
    """List catalog domains (categories)."""

    catalog = _load_catalog(_state(ctx))
    matches = catalog.search(search)
    _console.print(build_domains_table(catalog, matches))
    if not matches:
        _console.print("[dim]No categories match your search.[/dim]")


@app.command()
def show(ctx: typer.Context, domain: str = typer.Argument(..., help="Domain key.")) -> None:
    """Show a domain's endpoints and the CRUD roles inferred from them."""

    catalog = _load_catalog(_state(ctx))
    active = catalog.get(domain)
    if active is None:
        _console.print(f"[red]Domain not found: {domain}.[/red]")
        raise typer.Exit(code=1)

    _console.print(build_operations_table(active))
    _console.print(build_roles_table(classify(active.operations)))


@app.command(name="list")
def list_records(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="Domain key."),
    page: int = typer.Option(0, "--page", min=0, help="Page number (when the endpoint supports it)."),
    size: int | None = typer.Option(None, "--size", min=1, help="Page size (when the endpoint supports it)."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Also write the rows to a JSON file."),
) -> None:
    """List records through the domain's list endpoint."""

    state = _state(ctx)

    async def _action(session: CrudSession) -> None:
        if session.roles.list_op is None:
            _console.print("[red]No list endpoint available for this category.[/red]")
            raise typer.Exit(code=1)
        session.page = page
        if size is not None:
            session.size = size
        await session.fetch_list()
        if session.list_error is None:
            _console.print(build_records_table(session))
            if output is not None:
                path = export_records_json(rows=session.rows, output_path=output)
                _console.print(f"[green]Saved {len(session.rows)} rows to:[/green] {path}")
        _finish(session)

    _run_session(state, domain, _action)


@app.command()
def get(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="Domain key."),
    record_id: str = typer.Argument(..., metavar="ID", help="Identifier value."),
) -> None:
    """Fetch one record through the domain's detail endpoint."""

    async def _action(session: CrudSession) -> None:
        if session.roles.detail_op is None:
            _console.print("[red]No detail endpoint available for this category.[/red]")
            raise typer.Exit(code=1)
        if await session.view(record_id):
            _console.print(build_detail_panel(session.detail, f"Details ({record_id})"))
        _finish(session)

    _run_session(_state(ctx), domain, _action)


@app.command()
def create(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="Domain key."),
    assign: list[str] | None = typer.Option(None, "--set", help="Field value as NAME=VALUE (repeatable)."),
    body: str | None = typer.Option(None, "--body", help="Raw JSON body (replaces the form)."),
    edit: bool = typer.Option(False, "--edit", "-e", help="Edit the body interactively before sending."),
) -> None:
    """Create a record from the endpoint's sample body plus your edits."""

    assignments = _parse_assignments(assign)

    async def _action(session: CrudSession) -> None:
        draft = session.open_create()
        if draft is None:
            _console.print("[red]No create endpoint available for this category.[/red]")
            raise typer.Exit(code=1)
        session.create_draft = _apply_edits(draft, assignments=assignments, body=body, edit=edit)
        label = session.domain.label if session.domain else domain
        _console.print(build_draft_panel(session.create_draft, f"Add {label}"))
        await session.submit_create()
        if session.action_error is None and session.roles.list_op is not None:
            _console.print(build_records_table(session))
        _finish(session)

    _run_session(_state(ctx), domain, _action)


async def _find_record(session: CrudSession, record_id: str) -> dict[str, Any] | None:
    """Registro a editar: detalle si existe, si no se busca en el listado."""

    if session.roles.detail_op is not None:
        if await session.view(record_id) and isinstance(session.detail, dict):
            return session.detail
        return None
    if await session.fetch_list():
        for row in session.rows:
            if isinstance(row, dict) and str(session.row_id(row)) == record_id:
                return row
    return None


@app.command()
def update(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="Domain key."),
    record_id: str = typer.Argument(..., metavar="ID", help="Identifier value."),
    assign: list[str] | None = typer.Option(None, "--set", help="Field value as NAME=VALUE (repeatable)."),
    body: str | None = typer.Option(None, "--body", help="Raw JSON body (replaces the form)."),
    edit: bool = typer.Option(False, "--edit", "-e", help="Edit the body interactively before sending."),
) -> None:
    """Update a record: the form starts from its current values."""

    assignments = _parse_assignments(assign)

    async def _action(session: CrudSession) -> None:
        if session.roles.update_op is None:
            _console.print("[red]No update endpoint available for this category.[/red]")
            raise typer.Exit(code=1)
        record = await _find_record(session, record_id)
        if record is None:
            if session.action_error or session.list_error:
                _finish(session)
            _console.print(f"[red]Record not found: {record_id}.[/red]")
            raise typer.Exit(code=1)

        draft = session.open_update(record)
        if draft is None:
            raise typer.Exit(code=1)
        # El path usa el identificador pedido, no el que venga (o falte) en el registro.
        session.selected_id = record_id
        session.update_draft = _apply_edits(draft, assignments=assignments, body=body, edit=edit)
        _console.print(f"[dim]Editing ID: {record_id}[/dim]")
        _console.print(build_draft_panel(session.update_draft, "Update"))
        await session.submit_update()
        if session.action_error is None and session.detail is not None:
            _console.print(build_detail_panel(session.detail, f"Details ({record_id})"))
        _finish(session)

    _run_session(_state(ctx), domain, _action)


@app.command()
def delete(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="Domain key."),
    record_id: str = typer.Argument(..., metavar="ID", help="Identifier value."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Delete a record through the domain's delete endpoint."""

    async def _action(session: CrudSession) -> None:
        if session.roles.delete_op is None:
            _console.print("[red]No delete endpoint available for this category.[/red]")
            raise typer.Exit(code=1)
        if not yes and not typer.confirm(f"Delete {record_id}?", default=False):
            raise typer.Exit(code=1)
        await session.delete(record_id)
        _finish(session)

    _run_session(_state(ctx), domain, _action)


@app.command()
def generate(
    openapi: Path = typer.Argument(..., exists=True, dir_okay=False, help="OpenAPI 3 JSON document."),
    output: Path = typer.Option(
        Path("docs") / CATALOG_FILENAME,
        "--output",
        "-o",
        help="Where to write the catalog.",
    ),
) -> None:
    """Build the operations catalog from an OpenAPI document."""

    try:
        count = generate_catalog_file(openapi, output)
    except CatalogError as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    _console.print(f"[green]Wrote {count} domains to[/green] {output}")


def run() -> None:
    app()
