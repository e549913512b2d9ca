"""CLI principal (Typer).

Por qué Typer:
- Comandos tipados con help automático; la salida se delega en Rich.
- Los comandos solo orquestan: toda la lógica vive en `core`/`adapters`.
"""

from __future__ import annotations

import asyncio
import json
from typing import NoReturn

import typer
from rich.console import Console

from adapters.openai_client import OpenAIClient
from cli import doctor
from cli.ui_components import build_failure_panel, build_models_table, build_partial_panel
from core.config import AppSettings
from core.domain.envelope import Envelope
from core.domain.errors import IdentifierError
from core.domain.identifiers import ModelId, OwnerId, RequestId
from core.domain.models import Model
from core.logging import configure_logging

app = typer.Typer(no_args_is_help=True, help="List and inspect remote AI models.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_state: dict[str, bool] = {"verbose": False}


def _client(timeout: float | None) -> OpenAIClient:
    try:
        return OpenAIClient.from_settings(AppSettings(), request_timeout=timeout)
    except ValueError as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc


def _fail(envelope: Envelope[object]) -> NoReturn:
    _console.print(build_failure_panel(envelope, verbose=_state["verbose"]))
    raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logs and full diagnostics."),
    log_json: bool = typer.Option(False, "--log-json", help="Emit logs as JSON lines."),
) -> None:
    settings = AppSettings()
    _state["verbose"] = verbose or settings.verbose
    configure_logging(verbose=_state["verbose"], log_json=log_json or settings.log_json)


@app.command("list")
def list_models(
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of a table."),
    owner: str | None = typer.Option(None, "--owner", help="Only models owned by this owner."),
    timeout: float | None = typer.Option(None, "--timeout", help="Request timeout (seconds)."),
) -> None:
    """List all models."""

    async def _run() -> Envelope[tuple[Model, ...]]:
        async with _client(timeout) as client:
            return await client.get_models()

    envelope = asyncio.run(_run())
    if not envelope.ok:
        _fail(envelope)

    models = sorted(envelope.data or ())
    if owner:
        owner_id = OwnerId.try_parse(owner)
        models = [m for m in models if m.owned_by == owner_id]

    if as_json:
        typer.echo(json.dumps([m.to_json() for m in models], ensure_ascii=False, indent=2))
    else:
        _console.print(build_models_table(models))
    if envelope.diagnostic:
        _console.print(build_partial_panel(envelope.diagnostic))


@app.command("get")
def get_model(
    model_id: str = typer.Argument(..., help="Model identification, e.g. 'text-curie-001'."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of a table."),
    request_id: str | None = typer.Option(None, "--request-id", help="Correlation id to send along."),
    timeout: float | None = typer.Option(None, "--timeout", help="Request timeout (seconds)."),
) -> None:
    """Show a single model."""

    try:
        parsed_id = ModelId.parse(model_id)
    except IdentifierError as exc:
        raise typer.BadParameter(str(exc)) from exc

    async def _run() -> Envelope[Model]:
        async with _client(timeout) as client:
            return await client.get_model(parsed_id, request_id=RequestId.try_parse(request_id))

    envelope = asyncio.run(_run())
    if not envelope.ok or envelope.data is None:
        _fail(envelope)

    if as_json:
        typer.echo(json.dumps(envelope.data.to_json(), ensure_ascii=False, indent=2))
    else:
        _console.print(build_models_table([envelope.data], title=str(envelope.data.id)))


def run() -> None:
    app()
