"""Exception types raised by the deployment checks."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from core.domain.models import ProbeResult


class DeployCheckError(RuntimeError):
    """Base class for every failure the gate reports."""


class UnexpectedStatus(DeployCheckError):
    """Raised for one attempt whose HTTP status is outside [200, 400)."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"{url} answered with HTTP {status_code}")
        self.url = url
        self.status_code = status_code


class InvalidVersionRange(DeployCheckError):
    """Raised when a manifest version range has no concrete version in it."""

    def __init__(self, version_range: str) -> None:
        super().__init__(f"Cannot coerce version range {version_range!r} to a concrete version")
        self.version_range = version_range


class ManifestError(DeployCheckError):
    """Raised when an app's `package.json` is missing, unreadable or malformed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read manifest {path}: {reason}")
        self.path = path
        self.reason = reason


class LivenessTimeout(DeployCheckError):
    """Raised when the app server never answered within its retry budget."""

    def __init__(self, url: str, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"App server at {url} is not up after {attempts} attempts: {last_error}")
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


class PackageUnavailable(DeployCheckError):
    """One package version that could not be resolved on the registry."""

    def __init__(self, name: str, version: str, last_error: BaseException, attempts: int = 0) -> None:
        super().__init__(f"Package {name}@{version} is not available: {last_error}")
        self.name = name
        self.version = version
        self.last_error = last_error
        self.attempts = attempts


class AvailabilityError(DeployCheckError):
    """Raised when at least one internal dependency is not on the registry.

    Carries every failed package, not only the first one observed.
    """

    def __init__(self, failures: Sequence[PackageUnavailable], available: Sequence[ProbeResult] = ()) -> None:
        names = ", ".join(f"{f.name}@{f.version}" for f in failures)
        super().__init__(f"{len(failures)} package(s) not available on the registry: {names}")
        self.failures = list(failures)
        self.available = list(available)


class TestRunFailure(DeployCheckError):
    """Raised when the browser test run exits with a non-zero status."""

    __test__ = False  # not a pytest test class

    def __init__(self, mode: str, returncode: int | None = None) -> None:
        super().__init__(f"Cypress tests failed in {mode}")
        self.mode = mode
        self.returncode = returncode
