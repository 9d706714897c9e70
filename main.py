"""Lanzador local de admin-explorer desde el checkout.

Uso: `python main.py domains` (equivale al script `admin-explorer`).
Añade `src/` al path de importación porque el paquete no está instalado.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def main() -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
