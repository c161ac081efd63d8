"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import shutil

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


def _check_command(name: str) -> tuple[bool, str]:
    path = shutil.which(name)
    if path is None:
        return False, f"'{name}' not found on PATH"
    return True, path


@app.command()
def run() -> None:
    """Check registry reachability, the npm executable and the active settings."""

    settings = AppSettings()

    table = Table(title="deploy-check doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Internal prefix", "OK", settings.internal_prefix)
    table.add_row(
        "Liveness budget",
        "OK",
        f"{settings.liveness_max_attempts} x {settings.liveness_delay_ms} ms",
    )
    table.add_row(
        "Registry budget",
        "OK",
        f"{settings.registry_max_attempts} x {settings.registry_delay_ms} ms",
    )

    ok_http, detail_http = asyncio.run(_check_http(settings.registry_base_url, settings))
    table.add_row("Registry", "OK" if ok_http else "FAIL", f"{settings.registry_base_url} ({detail_http})")

    ok_npm, detail_npm = _check_command(settings.npm_command)
    table.add_row("Test runner", "OK" if ok_npm else "FAIL", detail_npm)

    _console.print(table)

    if not (ok_http and ok_npm):
        raise typer.Exit(code=1)
