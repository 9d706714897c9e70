"""Decide cómo se edita un cuerpo: formulario plano o texto libre.

Por qué dos modos:
- Un conjunto fijo de inputs etiquetados solo representa bien un registro
  plano (todas las claves con valores primitivos).
- Cualquier anidamiento o aridad variable (arrays) se edita como texto para no
  truncar ni deformar el payload en silencio.
"""

from __future__ import annotations

import json
import math
from typing import Any, Mapping

from core.domain.models import BodyDraft


def is_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def is_flat_object(value: Any) -> bool:
    return isinstance(value, dict) and all(is_primitive(v) for v in value.values())


def stringify_primitive(value: Any) -> str:
    """Texto que vería el usuario en el input (`null` -> vacío)."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def pretty_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def loads_strict(text: str) -> Any:
    """`json.loads` sin `NaN`/`Infinity` y con el anidamiento excesivo como `ValueError`."""

    try:
        return json.loads(text, parse_constant=_reject_constant)
    except RecursionError as exc:
        raise ValueError("JSON nesting is too deep") from exc


def _draft_from_value(value: Any) -> BodyDraft:
    if is_flat_object(value):
        return BodyDraft.from_fields({k: stringify_primitive(v) for k, v in value.items()})
    return BodyDraft.from_raw(pretty_json(value))


def analyze(sample_body_text: str | None) -> BodyDraft:
    """Construye el borrador inicial a partir del payload de ejemplo."""

    if not sample_body_text:
        return BodyDraft.from_fields({})
    try:
        parsed = loads_strict(sample_body_text)
    except ValueError:
        return BodyDraft.from_raw(sample_body_text)
    return _draft_from_value(parsed)


def draft_from_record(record: Mapping[str, Any], primary_param: str) -> BodyDraft:
    """Borrador de edición a partir de una fila listada.

    Se quitan el identificador (`primary_param` e `id`): van en el path, no en el cuerpo.
    """

    remaining = {k: v for k, v in record.items() if k not in (primary_param, "id")}
    return _draft_from_value(remaining)
