"""Exportación JSON de registros listados.

Por qué JSON:
- Interoperabilidad con otras herramientas (jq, hojas de cálculo, scripts).
- Permite guardar lo que se vio en pantalla sin depender del render de Rich.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence


def export_records_json(*, rows: Sequence[Any], output_path: Path) -> Path:
    """Exporta las filas a JSON UTF-8 (orden de claves y de filas intacto)."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(list(rows), ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
    return output_path
