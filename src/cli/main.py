"""deploy-check CLI (Typer + Rich).

Each command maps a core failure to exit code 1 with a message that says
which gate failed, so CI logs point at the right stage.
"""

from __future__ import annotations

import asyncio
import subprocess
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from adapters.app_names import get_app_directory, get_app_name
from adapters.json_exporter import export_report_json
from adapters.manifest import add_test_runner
from cli import doctor
from cli.ui_components import build_probes_table, build_report_panel, print_banner
from core.config import AppSettings
from core.domain.errors import (
    AvailabilityError,
    DeployCheckError,
    LivenessTimeout,
    ManifestError,
    TestRunFailure,
)
from core.domain.models import GateReport
from core.logging_utils import configure_logging
from core.services.gate import GateHooks, GateRequest, run_gate
from core.services.liveness import check_up
from core.services.registry import validate_manifest_versions
from core.services.test_runner import run_tests

app = typer.Typer(
    no_args_is_help=True,
    help="Verify a generated/deployed app before running its e2e browser tests.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def _settings() -> AppSettings:
    settings = AppSettings()
    configure_logging(settings.log_level, json_format=settings.log_json)
    return settings


def _fail(stage: str, exc: DeployCheckError) -> typer.Exit:
    _err_console.print(f"[bold red]{stage} failed:[/bold red] {escape(str(exc))}")
    return typer.Exit(code=1)


def _describe(exc: DeployCheckError) -> str:
    if isinstance(exc, AvailabilityError):
        return "Registry availability"
    if isinstance(exc, LivenessTimeout):
        return "Liveness"
    if isinstance(exc, ManifestError):
        return "Manifest"
    if isinstance(exc, TestRunFailure):
        return f"E2E tests ({exc.mode})"
    return "Gate"


@app.command()
def packages(
    directory: Path = typer.Argument(..., exists=True, file_okay=False, help="Generated app directory."),
) -> None:
    """Check that every internal dependency in package.json is on the registry."""

    settings = _settings()
    try:
        results = asyncio.run(validate_manifest_versions(directory, settings=settings))
    except AvailabilityError as exc:
        for failure in exc.failures:
            _err_console.print(f"[red]-[/red] {escape(str(failure))}")
        raise _fail(_describe(exc), exc) from exc
    except DeployCheckError as exc:
        raise _fail(_describe(exc), exc) from exc

    _console.print(build_probes_table("Registry availability", results))


@app.command()
def wait(url: str = typer.Argument(..., help="URL of the deployed app.")) -> None:
    """Poll the app server until it answers with a 2xx/3xx status."""

    settings = _settings()
    try:
        result = asyncio.run(check_up(url, settings=settings))
    except LivenessTimeout as exc:
        raise _fail(_describe(exc), exc) from exc
    _console.print(f"[green]App server is up[/green] ({result.attempts} attempt(s))")


@app.command(name="test")
def test_command(
    directory: Path = typer.Argument(..., exists=True, file_okay=False),
    url: str = typer.Option(..., "--url", help="URL the browser tests run against."),
    dev: bool = typer.Option(False, "--dev", help="Start the dev server and test against it."),
) -> None:
    """Run the e2e browser tests only (no registry or liveness checks)."""

    settings = _settings()
    try:
        run_tests(directory, dev, url, settings=settings)
    except TestRunFailure as exc:
        raise _fail(_describe(exc), exc) from exc


@app.command()
def gate(
    directory: Path = typer.Argument(..., exists=True, file_okay=False),
    url: str = typer.Option(..., "--url", help="URL of the deployed app."),
    dev: bool = typer.Option(False, "--dev", help="Run the development test variant."),
    skip_packages: bool = typer.Option(False, "--skip-packages", help="Skip the registry check."),
    skip_tests: bool = typer.Option(False, "--skip-tests", help="Stop after the liveness check."),
    report_path: Optional[Path] = typer.Option(None, "--report", help="Write a JSON report to this path."),
    quiet: bool = typer.Option(False, "--quiet", help="No banner."),
) -> None:
    """Registry check, then liveness check, then the e2e browser tests."""

    settings = _settings()
    if not quiet:
        print_banner(_console)

    hooks = GateHooks(
        stage_started=lambda stage: _console.print(f"[cyan]>[/cyan] {stage}..."),
        stage_finished=lambda stage, ok: _console.print(
            f"  {stage}: " + ("[green]ok[/green]" if ok else "[red]failed[/red]")
        ),
    )
    request = GateRequest(
        directory=directory,
        target_url=url,
        is_development_mode=dev,
        check_packages=not skip_packages,
        run_tests=not skip_tests,
    )
    report = GateReport(target_url=url)

    failure: DeployCheckError | None = None
    try:
        run_gate(request, settings=settings, hooks=hooks, report=report)
    except DeployCheckError as exc:
        failure = exc
    finally:
        if report.packages:
            _console.print(build_probes_table("Registry availability", report.packages))
        _console.print(build_report_panel(report))
        if report_path is not None:
            export_report_json(report=report, output_path=report_path)
            _console.print(f"[dim]Report written to {report_path}[/dim]")

    if failure is not None:
        raise _fail(_describe(failure), failure) from failure


@app.command()
def prepare(
    directory: Path = typer.Argument(..., exists=True, file_okay=False),
    url: str = typer.Option(..., "--url", help="URL baked into the start-server-and-test scripts."),
    shared_manifest: Path = typer.Option(
        ...,
        "--shared-manifest",
        exists=True,
        dir_okay=False,
        help="package.json that pins the test-runner versions.",
    ),
) -> None:
    """Add Cypress, start-server-and-test and the e2e scripts to a generated app."""

    try:
        path = add_test_runner(directory, url, shared_manifest)
    except KeyError as exc:
        _err_console.print(f"[bold red]Cannot prepare app:[/bold red] {exc.args[0]}")
        raise typer.Exit(code=1) from exc
    except ManifestError as exc:
        raise _fail(_describe(exc), exc) from exc
    _console.print(f"[green]Updated[/green] {path}")


@app.command(name="app-name")
def app_name(
    target: str = typer.Argument(..., help="Deployment target (e.g. 'fly', 'vercel')."),
    show_path: bool = typer.Option(False, "--path", help="Print the app directory instead of the name."),
) -> None:
    """Print a unique name for a freshly generated app."""

    try:
        name = get_app_name(target)
    except (subprocess.CalledProcessError, OSError) as exc:
        _err_console.print(f"[bold red]Cannot read the git commit:[/bold red] {escape(str(exc))}")
        _err_console.print("Run `app-name` inside a git checkout with `git` on PATH.")
        raise typer.Exit(code=1) from exc
    if show_path:
        settings = AppSettings()
        typer.echo(str(get_app_directory(name, apps_dir=settings.apps_dir)))
        return
    typer.echo(name)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
