"""Deployment gate orchestration.

Runs the three stages in order and stops at the first failure:

1. registry availability of the app's internal dependencies,
2. liveness of the deployed app server,
3. the browser test run against that server.

Printing and progress bars stay in the CLI; this module only reports
through `GateHooks` and the `GateReport` it fills in.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import httpx
import structlog

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import AvailabilityError, LivenessTimeout, TestRunFailure
from core.domain.models import GateReport, ProbeResult
from core.interfaces.process import ProcessRunner
from core.retry import Sleep
from core.services.liveness import check_up
from core.services.registry import validate_manifest_versions
from core.services.test_runner import run_tests

logger = structlog.get_logger(__name__)

STAGE_PACKAGES = "packages"
STAGE_LIVENESS = "liveness"
STAGE_TESTS = "tests"


@dataclass
class GateRequest:
    """Parameters of one gate run."""

    directory: Path
    target_url: str
    is_development_mode: bool = False
    check_packages: bool = True
    run_tests: bool = True


@dataclass
class GateHooks:
    """Optional callbacks for UI layers (progress)."""

    stage_started: Callable[[str], None] | None = None
    stage_finished: Callable[[str, bool], None] | None = None

    def started(self, stage: str) -> None:
        if self.stage_started:
            self.stage_started(stage)

    def finished(self, stage: str, ok: bool) -> None:
        if self.stage_finished:
            self.stage_finished(stage, ok)


@dataclass
class _Stage:
    hooks: GateHooks
    name: str

    def __enter__(self) -> "_Stage":
        logger.info("stage_started", stage=self.name)
        self.hooks.started(self.name)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        ok = exc_type is None
        logger.info("stage_finished", stage=self.name, ok=ok)
        self.hooks.finished(self.name, ok)


def _failed_package_results(exc: AvailabilityError) -> list[ProbeResult]:
    return [
        ProbeResult(
            target=f"{failure.name}@{failure.version}",
            ok=False,
            attempts=failure.attempts,
            error=str(failure.last_error),
        )
        for failure in exc.failures
    ]


async def verify_deployment(
    request: GateRequest,
    *,
    settings: AppSettings | None = None,
    client: httpx.AsyncClient | None = None,
    sleep: Sleep = asyncio.sleep,
    hooks: GateHooks | None = None,
    report: GateReport | None = None,
) -> GateReport:
    """Run the registry and liveness stages.

    `report` is filled in as stages complete, so a caller that passes one in
    keeps the partial results when a stage raises.
    """

    settings = settings or AppSettings()
    hooks = hooks or GateHooks()
    if report is None:
        report = GateReport(target_url=request.target_url)

    if client is None:
        async with build_async_client(settings) as owned:
            return await verify_deployment(
                request, settings=settings, client=owned, sleep=sleep, hooks=hooks, report=report
            )

    if request.check_packages:
        with _Stage(hooks, STAGE_PACKAGES):
            try:
                report.packages = await validate_manifest_versions(
                    request.directory, settings=settings, client=client, sleep=sleep
                )
            except AvailabilityError as exc:
                report.packages = [*exc.available, *_failed_package_results(exc)]
                raise

    with _Stage(hooks, STAGE_LIVENESS):
        try:
            report.liveness = await check_up(request.target_url, settings=settings, client=client, sleep=sleep)
        except LivenessTimeout as exc:
            report.liveness = ProbeResult(
                target=request.target_url,
                ok=False,
                attempts=exc.attempts,
                error=str(exc.last_error),
            )
            raise

    return report


def run_gate(
    request: GateRequest,
    *,
    settings: AppSettings | None = None,
    runner: ProcessRunner | None = None,
    sleep: Sleep = asyncio.sleep,
    hooks: GateHooks | None = None,
    report: GateReport | None = None,
) -> GateReport:
    """Verify the deployment, then hand it over to the test runner.

    The test run is a blocking subprocess call and only starts once the
    async checks have finished; it never overlaps with them.
    """

    settings = settings or AppSettings()
    hooks = hooks or GateHooks()
    if report is None:
        report = GateReport(target_url=request.target_url)

    asyncio.run(verify_deployment(request, settings=settings, sleep=sleep, hooks=hooks, report=report))

    if request.run_tests:
        with _Stage(hooks, STAGE_TESTS):
            try:
                run_tests(
                    request.directory,
                    request.is_development_mode,
                    request.target_url,
                    runner=runner,
                    settings=settings,
                )
            except TestRunFailure:
                report.tests_passed = False
                raise
        report.tests_passed = True

    return report
