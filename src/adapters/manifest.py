"""`package.json` helpers for generated apps.

Reads the dependency maps the registry check needs and injects the e2e
test-runner scripts into a scaffolded app.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from core.domain.errors import ManifestError
from core.domain.models import PackageManifest

MANIFEST_FILENAME = "package.json"

# Versions copied from the shared manifest into the app's devDependencies.
TEST_RUNNER_PACKAGES: tuple[str, ...] = (
    "start-server-and-test",
    "cypress",
    "@testing-library/cypress",
)


def manifest_path(directory: Path) -> Path:
    return Path(directory) / MANIFEST_FILENAME


def read_manifest_dict(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise ManifestError(Path(path), exc.strerror or str(exc)) from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ManifestError(Path(path), f"invalid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise ManifestError(Path(path), "top-level value is not an object")
    return data


def write_manifest_dict(path: Path, data: dict[str, Any]) -> Path:
    Path(path).write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return Path(path)


def read_manifest(directory: Path) -> PackageManifest:
    """Load and validate `<directory>/package.json`."""

    path = manifest_path(directory)
    try:
        return PackageManifest.model_validate(read_manifest_dict(path))
    except ValidationError as exc:
        raise ManifestError(path, f"{exc.error_count()} invalid field(s)") from exc


def update_package_config(directory: Path, transform: Callable[[dict[str, Any]], None]) -> Path:
    """Apply `transform` in place to the app's manifest and write it back."""

    path = manifest_path(directory)
    data = read_manifest_dict(path)
    transform(data)
    return write_manifest_dict(path, data)


def add_test_runner(directory: Path, url: str, shared_manifest: Path) -> Path:
    """Add Cypress and its scripts to a generated app.

    Tool versions come from the shared manifest's `dependencies`, so every
    generated app tests with the same runner versions as the harness itself.
    """

    shared = read_manifest_dict(shared_manifest)
    shared_deps = shared.get("dependencies") or {}
    missing = [name for name in TEST_RUNNER_PACKAGES if name not in shared_deps]
    if missing:
        raise KeyError(f"Shared manifest {shared_manifest} does not pin: {', '.join(missing)}")

    def transform(config: dict[str, Any]) -> None:
        dev_deps = config.setdefault("devDependencies", {})
        for name in TEST_RUNNER_PACKAGES:
            dev_deps[name] = shared_deps[name]

        scripts = config.setdefault("scripts", {})
        scripts["cy:run"] = "cypress run"
        scripts["cy:open"] = "cypress open"
        scripts["test:e2e:dev"] = f"start-server-and-test dev {url} cy:open"
        scripts["test:e2e:run"] = f"start-server-and-test dev {url} cy:run"

    return update_package_config(directory, transform)
