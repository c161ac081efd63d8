"""Registry availability checks for a generated app's internal dependencies.

A freshly released package can take a while to show up on the registry, so
every `name@version` lookup is polled with its own retry budget. All lookups
run concurrently and each one runs to completion: a failure is collected,
never used to cancel its siblings, and the caller gets every unavailable
package in a single `AvailabilityError`.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from urllib.parse import quote

import httpx
import semver
import structlog

from adapters.http_client import build_async_client, get_available
from adapters.manifest import read_manifest
from core.config import AppSettings
from core.domain.errors import AvailabilityError, InvalidVersionRange, PackageUnavailable
from core.domain.models import DependencySpec, ProbeResult
from core.retry import Sleep, retry_with_policy

logger = structlog.get_logger(__name__)

_COERCE_RE = re.compile(r"(?<!\d)(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?(?!\d)")


def coerce_version(version_range: str) -> semver.Version:
    """Pull a concrete `MAJOR.MINOR.PATCH` out of a version range.

    `^1.2.3` -> 1.2.3, `~2.0` -> 2.0.0, `>=3` -> 3.0.0, `v4.1.0-beta.1` -> 4.1.0.
    Prerelease and build metadata are dropped, missing parts are zero-filled.
    """

    match = _COERCE_RE.search(version_range)
    if match is None:
        raise InvalidVersionRange(version_range)
    major, minor, patch = (int(part or 0) for part in match.groups())
    return semver.Version(major=major, minor=minor, patch=patch)


def internal_dependencies(dependencies: Mapping[str, str], prefix: str) -> list[DependencySpec]:
    """Keep the entries whose name starts with the internal namespace prefix."""

    return [
        DependencySpec(name=name, version_range=version)
        for name, version in dependencies.items()
        if name.startswith(prefix)
    ]


def package_url(base_url: str, name: str, version: str) -> str:
    # Scoped names keep their slash: registry.npmjs.org/@scope/pkg/1.0.0
    return f"{base_url.rstrip('/')}/{quote(name, safe='@/')}/{version}"


async def verify_package_is_available(
    spec: DependencySpec,
    *,
    client: httpx.AsyncClient,
    settings: AppSettings,
    sleep: Sleep = asyncio.sleep,
) -> ProbeResult:
    """Poll the registry for one package version.

    Raises `PackageUnavailable` when the per-package budget is spent.
    """

    version = str(coerce_version(spec.version_range))
    url = package_url(settings.registry_base_url, spec.name, version)
    attempts = 0

    async def get_package() -> None:
        nonlocal attempts
        attempts += 1
        await get_available(client, url)

    try:
        await retry_with_policy(get_package, settings.registry_policy(), sleep=sleep)
    except Exception as exc:
        raise PackageUnavailable(spec.name, version, exc, attempts) from exc

    logger.info("Package is available", package=spec.name, version=version, attempts=attempts)
    return ProbeResult(target=f"{spec.name}@{version}", ok=True, attempts=attempts)


async def validate_package_versions(
    specs: Iterable[DependencySpec],
    *,
    settings: AppSettings | None = None,
    client: httpx.AsyncClient | None = None,
    sleep: Sleep = asyncio.sleep,
) -> list[ProbeResult]:
    """Check every dependency concurrently and report all failures together.

    Returns one `ProbeResult` per available package. Raises
    `AvailabilityError` listing every package that could not be resolved.
    """

    settings = settings or AppSettings()
    specs = list(specs)
    if not specs:
        return []
    if client is None:
        async with build_async_client(settings) as owned:
            return await _validate_all(specs, owned, settings, sleep)
    return await _validate_all(specs, client, settings, sleep)


async def _validate_all(
    specs: list[DependencySpec],
    client: httpx.AsyncClient,
    settings: AppSettings,
    sleep: Sleep,
) -> list[ProbeResult]:
    max_concurrency = settings.registry_max_concurrency
    sem = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def check_one(spec: DependencySpec) -> ProbeResult | PackageUnavailable:
        try:
            if sem is None:
                return await verify_package_is_available(spec, client=client, settings=settings, sleep=sleep)
            async with sem:
                return await verify_package_is_available(spec, client=client, settings=settings, sleep=sleep)
        except PackageUnavailable as exc:
            logger.error("package_unavailable", package=exc.name, version=exc.version, error=str(exc.last_error))
            return exc
        except InvalidVersionRange as exc:
            logger.error("invalid_version_range", package=spec.name, version_range=spec.version_range)
            return PackageUnavailable(spec.name, spec.version_range, exc)

    outcomes = await asyncio.gather(*(check_one(spec) for spec in specs))

    failures = [o for o in outcomes if isinstance(o, PackageUnavailable)]
    if failures:
        raise AvailabilityError(failures, [o for o in outcomes if isinstance(o, ProbeResult)])
    return [o for o in outcomes if isinstance(o, ProbeResult)]


async def validate_manifest_versions(
    directory: Path,
    *,
    settings: AppSettings | None = None,
    client: httpx.AsyncClient | None = None,
    sleep: Sleep = asyncio.sleep,
) -> list[ProbeResult]:
    """Validate the internal dependencies declared in `<directory>/package.json`."""

    settings = settings or AppSettings()
    manifest = read_manifest(directory)
    specs = internal_dependencies(manifest.all_dependencies(), settings.internal_prefix)
    logger.info("validating_package_versions", directory=str(directory), packages=len(specs))
    return await validate_package_versions(specs, settings=settings, client=client, sleep=sleep)
