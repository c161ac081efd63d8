"""Shared fixtures for deploy-check tests."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest

from core.config import AppSettings

REGISTRY = "https://registry.test"
APP_URL = "http://app.test/"


class RecordingSleep:
    """Stands in for `asyncio.sleep`: records the delay and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeRunner:
    """`ProcessRunner` that records invocations and returns a fixed status."""

    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.calls: list[dict[str, Any]] = []

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
    ) -> int:
        self.calls.append({"command": command, "args": list(args), "cwd": cwd, "env": dict(env)})
        return self.returncode


@pytest.fixture
def settings() -> AppSettings:
    """Default retry budgets, test registry and an `@internal` namespace."""
    return AppSettings(registry_base_url=REGISTRY, internal_prefix="@internal")


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


def write_manifest(directory: Path, data: dict[str, Any]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "package.json"
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """A generated app whose manifest mixes internal and third-party deps."""
    directory = tmp_path / "remix-fly-abc1234-beef"
    write_manifest(
        directory,
        {
            "name": "remix-fly-abc1234-beef",
            "private": True,
            "dependencies": {"@internal/a": "^1.0.0", "lodash": "^4.0.0"},
            "devDependencies": {"@internal/b": "^2.0.0"},
            "scripts": {"dev": "remix dev"},
        },
    )
    return directory
