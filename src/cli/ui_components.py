"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

import logging

import typer
from rich.align import Align
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import AppSettings
from core.domain.login import RecoveryPresentation, Severity
from core.domain.models import GraphQLResponse


def configure_logging(level: str | int = logging.WARNING, console: Console | None = None) -> None:
    """Instala un `RichHandler` en el logger raíz (idempotente)."""

    root = logging.getLogger()
    root.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=console or Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        root.addHandler(handler)


def apply_log_level(ctx: typer.Context, settings: AppSettings) -> None:
    """`--verbose` manda; si no, el nivel configurado en `settings.log_level`."""

    verbose = bool((ctx.obj or {}).get("verbose"))
    configure_logging(logging.DEBUG if verbose else settings.log_level)


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("HeartBeat Live", style="bold red")
    subtitle = Text("GraphQL client • Sign in", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="red", padding=(1, 4)))


def build_errors_table(response: GraphQLResponse) -> Table:
    """Tabla con los errores GraphQL por path (si los hay)."""

    table = Table(title="GraphQL errors")
    table.add_column("Path", style="cyan", no_wrap=True)
    table.add_column("Code", style="yellow")
    table.add_column("Message", style="white")
    for error in response.errors:
        path = ".".join(str(p) for p in error.path or [])
        table.add_row(path or "-", error.code or "-", error.message)
    return table


def build_recovery_panel(presentation: RecoveryPresentation) -> Panel:
    style = "green" if presentation.severity is Severity.INFO else "red"
    body = Text(presentation.message)
    if presentation.can_retry:
        body.append("\n\nYou can retry this request.", style="dim")
    return Panel(body, title=Text("Password recovery", style=f"bold {style}"), border_style=style)
