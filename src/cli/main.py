"""CLI de HeartBeat Live (Typer).

Expone `fetch`/`perform` sobre las operaciones del catálogo para probar el
backend sin la app: comprobar si un email está reservado y pedir el email de
recuperación de contraseña.
"""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console

from adapters.graphql_client import GraphQLClient, build_graphql_client
from cli import doctor
from cli.ui_components import (
    apply_log_level,
    build_errors_table,
    build_recovery_panel,
    configure_logging,
    print_banner,
)
from core.config import AppSettings, load_settings
from core.domain.errors import ConfigurationError
from core.domain.login import RecoveryPresentation, Severity
from core.domain.models import CachePolicy, GraphQLResponse, Result
from core.domain.operations import (
    CHECK_EMAIL_RESERVED_FIELD,
    check_email_reserved,
    send_reset_password_email,
)
from core.services.login_flow import recovery_presentation

app = typer.Typer(no_args_is_help=True, help="HeartBeat Live GraphQL client.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


def _settings_or_exit(ctx: typer.Context) -> AppSettings:
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        _console.print(f"[red]Fatal:[/red] {exc}")
        raise typer.Exit(code=2)
    apply_log_level(ctx, settings)
    return settings


async def _fetch_email_reserved(client: GraphQLClient, email: str) -> Result[GraphQLResponse]:
    async with client:
        return await client.fetch(
            check_email_reserved(email),
            cache_policy=CachePolicy.FETCH_IGNORING_CACHE_COMPLETELY,
        )


async def _perform_reset(client: GraphQLClient, email: str) -> Result[GraphQLResponse]:
    async with client:
        return await client.perform(send_reset_password_email(email))


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging for the request chain."),
    banner: bool = typer.Option(False, "--banner", help="Print the banner before running."),
) -> None:
    ctx.ensure_object(dict)["verbose"] = verbose
    configure_logging(logging.DEBUG if verbose else logging.WARNING)
    if banner:
        print_banner(_console)


@app.command("check-email")
def check_email(
    ctx: typer.Context,
    email: str = typer.Argument(..., help="Email address to look up."),
) -> None:
    """Check whether an email address already has an account."""

    client = build_graphql_client(_settings_or_exit(ctx))
    result = asyncio.run(_fetch_email_reserved(client, email))
    if not result.ok:
        _console.print(f"[red]Request failed:[/red] {result.error}")
        raise typer.Exit(code=1)

    response = result.value
    if response.errors:
        _console.print(build_errors_table(response))
    reserved = (response.data or {}).get(CHECK_EMAIL_RESERVED_FIELD)
    if not isinstance(reserved, bool):
        _console.print("[yellow]The server did not say whether the email is reserved.[/yellow]")
        raise typer.Exit(code=1)
    _console.print("Email is reserved" if reserved else "Email is not reserved")


@app.command("reset-password")
def reset_password(
    ctx: typer.Context,
    email: str = typer.Argument(..., help="Account email address."),
) -> None:
    """Request a password reset email."""

    client = build_graphql_client(_settings_or_exit(ctx))
    result = asyncio.run(_perform_reset(client, email))
    presentation: RecoveryPresentation = recovery_presentation(result, email)
    _console.print(build_recovery_panel(presentation))
    if presentation.severity is Severity.DANGER:
        raise typer.Exit(code=1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
