"""Sustitución de un identificador en una plantilla de path."""

from __future__ import annotations


def bind(path_template: str, param_name: str, value: str | int | float) -> str:
    """Reemplaza la primera aparición de `{param_name}` por `str(value)`.

    Solo se enlaza un parámetro; si el placeholder no está, el path vuelve
    intacto. Los nombres deben salir de los `path_params` de la propia operación.
    """

    return path_template.replace("{" + param_name + "}", str(value), 1)
