"""Lanzador de la CLI cuando `src/` ya está en el path (`python src/main.py`)."""

from __future__ import annotations

import sys

from cli.main import run


def main() -> None:
    # Las consolas de Windows (cp1252) no pueden pintar las tablas de Rich.
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    run()


if __name__ == "__main__":
    main()
