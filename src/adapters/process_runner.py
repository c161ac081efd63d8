"""Subprocess-backed `ProcessRunner`."""

from __future__ import annotations

import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

import structlog

from core.interfaces.process import ProcessRunner

logger = structlog.get_logger(__name__)


class SubprocessRunner(ProcessRunner):
    """Runs the command with inherited stdio and returns its exit status."""

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
    ) -> int:
        argv = [command, *args]
        logger.info("spawning", argv=argv, cwd=str(cwd))
        completed = subprocess.run(argv, cwd=cwd, env=dict(env), check=False)
        return completed.returncode
