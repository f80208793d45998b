from __future__ import annotations

from typing import Any, Iterable

import structlog

from .model import UNRESOLVED, Diagnostic, derive_operation_id
from .store import OperationStore

logger = structlog.get_logger(__name__)


def resolve_routes(store: OperationStore, routes: Iterable[Any]) -> list[Diagnostic]:
    """Fill method, path and operation id of every stored operation.

    The first route bound to an operation's handler id wins; later routes for
    the same handler are ignored. Operations with no route are reset to an
    unresolved state and reported. Safe to run repeatedly.
    """
    route_table = list(routes)
    diagnostics: list[Diagnostic] = []
    resolved = 0

    for op in store:
        route = _first_route(route_table, op.handler_id)
        if route is None:
            op.method = ""
            op.path = ""
            op.operation_id = op.id
            diagnostics.append(
                Diagnostic(
                    kind=UNRESOLVED,
                    handler_id=op.handler_id,
                    message=f"handler {op.handler_id!r} is not bound to any route",
                )
            )
            logger.warning("operation_unresolved", handler_id=op.handler_id, operation_id=op.id or None)
            continue

        op.method = str(route.method).upper()
        op.path = str(route.path)
        op.operation_id = op.id or derive_operation_id(op.method, op.path)
        resolved += 1

    logger.info(
        "operations_resolved",
        routes=len(route_table),
        resolved=resolved,
        unresolved=len(diagnostics),
    )
    return diagnostics


def _first_route(route_table: list[Any], handler_id: str) -> Any | None:
    for route in route_table:
        if route.handler_id == handler_id:
            return route
    return None
