"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client, normalize_base_url
from core.catalog import default_catalog_path, load_catalog
from core.config import AppSettings, write_user_env_vars
from core.domain.errors import CatalogError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    # Cualquier respuesta HTTP (incluido 401/404) prueba que el backend es alcanzable.
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, str(exc)


def _check_catalog(settings: AppSettings) -> tuple[bool, str]:
    path = default_catalog_path(settings)
    if path is None:
        return False, "not found (run `admin-explorer generate`)"
    try:
        catalog = load_catalog(path)
    except CatalogError as exc:
        return False, str(exc)
    return True, f"{len(catalog)} domains • {path}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    base_url = normalize_base_url(settings.api_base_url)

    table = Table(title="admin-explorer Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("API base URL", "OK", base_url)
    if settings.api_token:
        table.add_row("API token", "OK", "Bearer token configured")
    else:
        table.add_row("API token", "OPTIONAL", "No token set -> requests go unauthenticated")

    ok_catalog, detail_catalog = _check_catalog(settings)
    table.add_row("Catalog", "OK" if ok_catalog else "FAIL", detail_catalog)

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(base_url, settings))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_catalog:
        _console.print(
            "\n[yellow]Note:[/yellow] Generate the catalog from the backend OpenAPI document with "
            "`admin-explorer generate admin-openapi.json`."
        )


@app.command(name="setup")
def setup() -> None:
    """Interactive backend setup (stores config in the user config .env)."""

    settings = AppSettings()
    base_url = typer.prompt("API base URL", default=settings.api_base_url, show_default=True).strip()
    token = typer.prompt("API token (empty for none)", default="", hide_input=True, show_default=False).strip()
    catalog = typer.prompt(
        "Catalog path (empty to auto-detect)",
        default=str(settings.catalog_path or ""),
        show_default=False,
    ).strip()

    if not base_url:
        raise typer.BadParameter("base URL is required")

    env_path = write_user_env_vars(
        {
            "ADMIN_EXPLORER_API_BASE_URL": base_url,
            "ADMIN_EXPLORER_API_TOKEN": token or None,
            "ADMIN_EXPLORER_CATALOG_PATH": catalog or None,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
