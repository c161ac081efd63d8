"""Tests for the browser test-run handoff."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from adapters.process_runner import SubprocessRunner
from conftest import FakeRunner
from core.config import AppSettings
from core.domain.errors import TestRunFailure
from core.services.test_runner import build_test_env, run_tests

URL = "https://remix-fly-abc1234-beef.fly.dev"


class TestRunTests:
    def test_development_failure_names_mode(self, tmp_path: Path, settings: AppSettings) -> None:
        runner = FakeRunner(returncode=1)

        with pytest.raises(TestRunFailure, match="development") as exc_info:
            run_tests(tmp_path, True, URL, runner=runner, settings=settings)

        assert exc_info.value.mode == "development"
        assert exc_info.value.returncode == 1
        assert len(runner.calls) == 1

    def test_development_success_runs_dev_script(self, tmp_path: Path, settings: AppSettings) -> None:
        runner = FakeRunner(returncode=0)

        run_tests(tmp_path, True, URL, runner=runner, settings=settings)

        call = runner.calls[0]
        assert call["command"] == "npm"
        assert call["args"] == ["run", "test:e2e:run"]
        assert call["cwd"] == tmp_path

    def test_production_runs_prod_script(self, tmp_path: Path, settings: AppSettings) -> None:
        runner = FakeRunner(returncode=0)

        run_tests(tmp_path, False, URL, runner=runner, settings=settings)

        assert runner.calls[0]["args"] == ["run", "cy:run"]

    def test_production_failure_names_mode(self, tmp_path: Path, settings: AppSettings) -> None:
        runner = FakeRunner(returncode=2)

        with pytest.raises(TestRunFailure, match="Cypress tests failed in production"):
            run_tests(tmp_path, False, URL, runner=runner, settings=settings)

    def test_url_injected_and_environment_inherited(
        self, tmp_path: Path, settings: AppSettings, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CI", "true")
        runner = FakeRunner(returncode=0)

        run_tests(tmp_path, False, URL, runner=runner, settings=settings)

        env = runner.calls[0]["env"]
        assert env["CYPRESS_BASE_URL"] == URL
        assert env["CI"] == "true"

    def test_spawn_error_becomes_test_run_failure(self, tmp_path: Path, settings: AppSettings) -> None:
        class MissingExecutable(FakeRunner):
            def run(self, command, args, *, cwd, env):  # type: ignore[override]
                raise FileNotFoundError(command)

        with pytest.raises(TestRunFailure) as exc_info:
            run_tests(tmp_path, False, URL, runner=MissingExecutable(), settings=settings)

        assert isinstance(exc_info.value.__cause__, FileNotFoundError)


def test_build_test_env_overrides_existing_value(settings: AppSettings) -> None:
    env = build_test_env(URL, settings=settings, base_env={"CYPRESS_BASE_URL": "http://old", "HOME": "/root"})

    assert env == {"CYPRESS_BASE_URL": URL, "HOME": "/root"}


def test_custom_env_var_name() -> None:
    settings = AppSettings(base_url_env_var="PLAYWRIGHT_BASE_URL")

    env = build_test_env(URL, settings=settings, base_env={})

    assert env == {"PLAYWRIGHT_BASE_URL": URL}


def test_subprocess_runner_returns_exit_status(tmp_path: Path) -> None:
    runner = SubprocessRunner()

    code = runner.run(
        sys.executable,
        ["-c", "import os, sys; sys.exit(0 if os.environ['CYPRESS_BASE_URL'] == 'x' else 3)"],
        cwd=tmp_path,
        env={"CYPRESS_BASE_URL": "x"},
    )

    assert code == 0
