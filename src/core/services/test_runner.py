"""Hands a verified deployment over to the browser test runner."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import structlog

from adapters.process_runner import SubprocessRunner
from core.config import AppSettings
from core.domain.errors import TestRunFailure
from core.domain.models import RunConfig
from core.interfaces.process import ProcessRunner

logger = structlog.get_logger(__name__)


def build_test_env(
    target_url: str,
    *,
    settings: AppSettings,
    base_env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Inherited environment plus the target URL under the runner's variable."""

    env = dict(os.environ if base_env is None else base_env)
    env[settings.base_url_env_var] = target_url
    return env


def run_tests(
    working_directory: Path,
    is_development_mode: bool,
    target_url: str,
    *,
    runner: ProcessRunner | None = None,
    settings: AppSettings | None = None,
) -> None:
    """Run the e2e suite against `target_url` and block until it finishes.

    Development mode runs the script that starts the dev server and waits
    for it; production mode runs the suite against the deployed target.
    Any non-zero exit raises `TestRunFailure` naming the mode. No retries.
    """

    settings = settings or AppSettings()
    runner = runner or SubprocessRunner()
    config = RunConfig(target_url=target_url, is_development_mode=is_development_mode)

    script = settings.dev_test_script if config.is_development_mode else settings.prod_test_script
    env = build_test_env(config.target_url, settings=settings)

    logger.info("running_tests", mode=config.mode, script=script, url=config.target_url)
    try:
        returncode = runner.run(
            settings.npm_command,
            ["run", script],
            cwd=Path(working_directory),
            env=env,
        )
    except OSError as exc:
        raise TestRunFailure(config.mode) from exc

    if returncode != 0:
        logger.error("tests_failed", mode=config.mode, returncode=returncode)
        raise TestRunFailure(config.mode, returncode)
    logger.info("tests_passed", mode=config.mode)
