"""Contrato de ejecución de procesos.

Por qué Protocol:
- El runner real (subprocess) y los fakes de los tests son intercambiables
  sin herencia.
- El Core lanza la suite de Cypress sin importar `subprocess`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ProcessRunner(Protocol):
    """Runs a command to completion and returns its exit status.

    Rules:
    - The call is synchronous and blocks until the child exits.
    - stdio is inherited so the child's output reaches the caller's terminal.
    """

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str],
    ) -> int:
        ...
