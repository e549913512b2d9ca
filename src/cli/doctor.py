"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.openai_client import OpenAIClient
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_api(settings: AppSettings) -> tuple[bool, str]:
    async with OpenAIClient.from_settings(settings) as client:
        envelope = await client.get_models()
    if envelope.ok:
        return True, f"HTTP {envelope.status_code} ({len(envelope.data or ())} models)"
    return False, envelope.status_message or f"HTTP {envelope.status_code}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="openai-models Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Base URL", "OK", settings.base_url)
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    if settings.organization_id:
        table.add_row("Organization", "OK", settings.organization_id)
    else:
        table.add_row("Organization", "OPTIONAL", "Not set")

    if not settings.api_key:
        table.add_row("API key", "FAIL", "No key set -> run `openai-models doctor setup`")
        _console.print(table)
        raise typer.Exit(code=1)
    table.add_row("API key", "OK", "Configured")

    ok_api, detail_api = asyncio.run(_check_api(settings))
    table.add_row("API connectivity", "OK" if ok_api else "FAIL", detail_api)

    _console.print(table)
    if not ok_api:
        raise typer.Exit(code=1)


@app.command()
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    defaults = AppSettings()
    base_url = typer.prompt("API base URL", default=defaults.base_url, show_default=True).strip()
    api_key = typer.prompt("API key", hide_input=True, confirmation_prompt=False).strip()
    organization = typer.prompt("Organization id (optional)", default="", show_default=False).strip()

    if not base_url or not api_key:
        raise typer.BadParameter("base_url and api_key are required")

    env_path = write_user_env_vars(
        {
            "OPENAI_CLIENT_BASE_URL": base_url,
            "OPENAI_CLIENT_API_KEY": api_key,
            "OPENAI_CLIENT_ORGANIZATION_ID": organization or None,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
