"""Exportación JSON del reporte del gate.

Por qué JSON:
- CI guarda el fichero como artefacto junto a los resultados de Cypress.
- Permite leer qué etapa falló sin parsear la salida de consola.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import GateReport


def export_report_json(*, report: GateReport, output_path: Path) -> Path:
    """Write `GateReport` as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = report.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
