"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `gate`, `packages` y `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import GateReport, ProbeResult


def print_banner(console: Console) -> None:
    """Print the banner (skipped in JSON/non-interactive modes)."""

    title = Text("deploy-check", style="bold cyan")
    subtitle = Text("Registry • Liveness • E2E handoff", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_probes_table(title: str, probes: list[ProbeResult]) -> Table:
    table = Table(title=title)
    table.add_column("Target", style="cyan", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Attempts", style="dim", justify="right")
    table.add_column("Error", style="red")
    for probe in probes:
        status = "[green]OK[/green]" if probe.ok else "[red]FAIL[/red]"
        table.add_row(probe.target, status, str(probe.attempts), probe.error or "")
    return table


def build_report_panel(report: GateReport) -> Panel:
    """Summary panel for a full gate run."""

    def mark(value: bool | None) -> str:
        if value is None:
            return "skipped"
        return "passed" if value else "failed"

    packages_ok: bool | None = None
    if report.packages:
        packages_ok = all(p.ok for p in report.packages)
    liveness_ok = report.liveness.ok if report.liveness else None

    body = Text()
    body.append(f"Target: {report.target_url}\n\n", style="bold")
    body.append(f"Packages: {mark(packages_ok)} ({len(report.packages)} checked)\n")
    body.append(f"Liveness: {mark(liveness_ok)}\n")
    body.append(f"Tests:    {mark(report.tests_passed)}")

    failed = packages_ok is False or liveness_ok is False or report.tests_passed is False
    return Panel(body, title=Text("Gate", style="bold yellow"), border_style="red" if failed else "green")
