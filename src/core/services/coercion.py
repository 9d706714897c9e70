"""Conversión del borrador editado a payload JSON tipado.

Precedencia en modo `fields` (contrato, no "mejor esfuerzo"):

1. `""` se envía como `""` (borrado explícito, no se omite ni pasa a null).
2. `"true"` / `"false"` exactos pasan a booleano.
3. Si el texto (sin espacios) es un número finito completo, pasa a número.
4. En otro caso, el texto original sin tocar.

Es con pérdida a propósito: un campo que debía ser el string `"true"` o `"42"`
acaba como booleano/número. Para literales así hay que usar el modo `raw`.
"""

from __future__ import annotations

import math
import re
from typing import Any

from core.domain.errors import ParseError
from core.domain.models import BodyDraft
from core.services.body_shape import loads_strict

# Grafías aceptadas como número: decimal con signo,
# exponente y punto inicial/final, más literales hex/octal/binario sin signo.
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_RADIX_RE = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")

# Enteros por encima de esto ya no son exactos en el backend (doble precisión).
_MAX_SAFE_INTEGER = 2**53 - 1


def parse_number(text: str) -> int | float | None:
    """Número finito si `text` (recortado) lo es en su totalidad; si no, None."""

    candidate = text.strip()
    if not candidate:
        return None
    if _RADIX_RE.fullmatch(candidate):
        return int(candidate, 0)
    if not _DECIMAL_RE.fullmatch(candidate):
        return None
    number = float(candidate)
    if not math.isfinite(number):
        return None
    if number.is_integer() and abs(number) <= _MAX_SAFE_INTEGER:
        return int(number)
    return number


def coerce_field(value: str) -> Any:
    if value == "":
        return ""
    if value == "true":
        return True
    if value == "false":
        return False
    number = parse_number(value)
    if number is not None:
        return number
    return value


def to_payload(draft: BodyDraft) -> Any:
    """Payload listo para enviar; `None` significa "sin cuerpo".

    Lanza `ParseError` si el texto libre no es JSON. El borrador no se modifica.
    """

    if draft.mode == "raw":
        text = draft.raw or ""
        if not text.strip():
            return None
        try:
            return loads_strict(text)
        except ValueError as exc:
            raise ParseError("Body must be valid JSON.", text=text) from exc

    return {name: coerce_field(value) for name, value in (draft.fields or {}).items()}
