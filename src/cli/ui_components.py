"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.envelope import Envelope
from core.domain.models import Model


def build_models_table(models: Iterable[Model], *, title: str = "Models") -> Table:
    """Crea una tabla Rich con un modelo por fila."""

    table = Table(title=title)
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Owner", style="white")
    table.add_column("Created (UTC)", style="green")
    table.add_column("Root", style="magenta")
    table.add_column("Parent", style="dim")
    for model in models:
        table.add_row(
            str(model.id),
            str(model.owned_by),
            model.created.strftime("%Y-%m-%d %H:%M:%S"),
            str(model.root) if model.root is not None else "-",
            str(model.parent) if model.parent is not None else "-",
        )
    return table


def build_failure_panel(envelope: Envelope[object], *, verbose: bool = False) -> Panel:
    """Panel para un `Envelope` fallido: status, correlation id y diagnóstico."""

    body = Text()
    status = envelope.status_message or (
        f"HTTP {envelope.status_code}" if envelope.status_code is not None else "Request failed"
    )
    body.append(status + "\n", style="bold")
    if envelope.request_id is not None:
        body.append(f"request id: {envelope.request_id}\n", style="dim")
    if envelope.diagnostic and verbose:
        body.append("\n" + envelope.diagnostic.strip())
    return Panel(body, title=Text("Error", style="bold red"), border_style="red")


def build_partial_panel(diagnostic: str) -> Panel:
    """Panel de aviso para elementos de una lista que no se pudieron leer."""

    lines = [line for line in diagnostic.splitlines() if line.strip()]
    body = Text()
    body.append(f"{len(lines)} item(s) skipped:\n", style="bold")
    for line in lines:
        body.append(f"- {line}\n")
    return Panel(body, title=Text("Warnings", style="bold yellow"), border_style="yellow")
