"""Inferencia de roles CRUD a partir de las operaciones de un dominio.

La regla es "primera operación que encaja", en orden de catálogo. No es un
"mejor candidato": si el catálogo se reordena, cambia el endpoint elegido.
"""

from __future__ import annotations

from typing import Callable, Iterable, Sequence

from core.domain.models import HttpMethod, Operation, RoleAssignment

_UPDATE_METHODS = (HttpMethod.PUT, HttpMethod.PATCH)


def _first(operations: Sequence[Operation], predicate: Callable[[Operation], bool]) -> Operation | None:
    return next((op for op in operations if predicate(op)), None)


def classify(operations: Iterable[Operation]) -> RoleAssignment:
    """Asigna list/detail/create/update/delete y el parámetro identificador.

    Total: un rol ausente es un resultado válido (la UI deshabilita la acción).
    """

    ops = list(operations)

    list_op = _first(ops, lambda op: op.method is HttpMethod.GET and not op.path_params)
    detail_op = _first(ops, lambda op: op.method is HttpMethod.GET and bool(op.path_params))
    create_op = _first(ops, lambda op: op.method is HttpMethod.POST and not op.path_params)
    update_op = _first(ops, lambda op: op.method in _UPDATE_METHODS and bool(op.path_params))
    delete_op = _first(ops, lambda op: op.method is HttpMethod.DELETE and bool(op.path_params))

    primary_param = "id"
    for op in (detail_op, update_op, delete_op):
        if op is not None and op.path_params:
            primary_param = op.path_params[0]
            break

    return RoleAssignment(
        list_op=list_op,
        detail_op=detail_op,
        create_op=create_op,
        update_op=update_op,
        delete_op=delete_op,
        primary_param=primary_param,
    )
