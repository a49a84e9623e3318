"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from cli.ui_components import apply_log_level
from core.config import AppSettings, get_user_env_file, load_settings
from core.domain.errors import ConfigurationError

app = typer.Typer(no_args_is_help=False, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_endpoint(settings: AppSettings) -> tuple[bool, str]:
    """POST a trivial query; any HTTP answer means the server is reachable."""

    try:
        async with build_async_client(settings) as client:
            response = await client.post(settings.graphql_url, json={"query": "{ __typename }"})
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, f"{exc.__class__.__name__}: {exc}"


@app.callback(invoke_without_command=True)
def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    table = Table(title="HeartBeat Live Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        table.add_row("Configuration", "FAIL", str(exc))
        _console.print(table)
        _console.print(
            f"\n[yellow]Note:[/yellow] set HBL_SERVER_HOST and HBL_SERVER_SCHEME "
            f"(environment, ./.env or {get_user_env_file()})."
        )
        raise typer.Exit(code=1)

    apply_log_level(ctx, settings)
    table.add_row("Server host", "OK", settings.server_host)
    table.add_row("Server scheme", "OK", settings.server_scheme)
    table.add_row("GraphQL URL", "OK", settings.graphql_url)
    table.add_row(
        "Persisted queries",
        "ON" if settings.persisted_queries_enabled else "OFF",
        "hash first, full text on server miss",
    )
    table.add_row("Transport retries", "OK", str(settings.http_max_retries))
    table.add_row("Log level", "OK", settings.log_level)

    ok_http, detail_http = asyncio.run(_check_endpoint(settings))
    table.add_row("Endpoint connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)
    if not ok_http:
        raise typer.Exit(code=1)
