"""Unique names and paths for generated apps."""

from __future__ import annotations

import secrets
import subprocess
from pathlib import Path


def current_git_sha(cwd: Path | None = None) -> str:
    completed = subprocess.run(
        ["git", "rev-parse", "HEAD"],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout.strip()


def get_app_name(target: str, *, sha: str | None = None) -> str:
    """`remix-<target>-<short sha>-<4 hex chars>`.

    The random suffix keeps concurrent CI runs on the same commit apart.
    """

    sha = sha if sha is not None else current_git_sha()
    unique = secrets.token_hex(2)
    return f"remix-{target}-{sha[:7]}-{unique}"


def get_app_directory(name: str, *, apps_dir: Path) -> Path:
    return Path(apps_dir) / name
