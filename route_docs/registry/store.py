from __future__ import annotations

import dataclasses
import threading
from typing import Iterable, Iterator

import structlog

from .errors import OptionError
from .model import Operation
from .options import OperationOption

logger = structlog.get_logger(__name__)


class OperationStore:
    """Ordered, append-only collection of operations keyed by handler id."""

    def __init__(self) -> None:
        self._operations: list[Operation] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._operations)

    def capture(self, handler_id: str, options: Iterable[OperationOption] = ()) -> Operation:
        if not isinstance(handler_id, str) or not handler_id:
            raise OptionError(f"handler id must be a non-empty string, got {handler_id!r}")

        op = Operation(handler_id=handler_id)
        for option in options:
            if not callable(option):
                raise OptionError(f"{handler_id}: option {option!r} is not callable")
            option(op)

        with self._lock:
            if any(existing.handler_id == handler_id for existing in self._operations):
                raise OptionError(f"handler {handler_id!r} is already registered")
            self._operations.append(op)

        logger.debug(
            "operation_captured",
            handler_id=handler_id,
            operation_id=op.id or None,
            requests=len(op.requests),
            responses=len(op.responses),
        )
        return op

    def snapshot(self) -> tuple[Operation, ...]:
        with self._lock:
            return tuple(_copy(op) for op in self._operations)

    def __iter__(self) -> Iterator[Operation]:
        # live objects; only the resolver mutates them
        with self._lock:
            return iter(list(self._operations))


def _copy(op: Operation) -> Operation:
    # Request/Response/Parameter are frozen, so copying the containers is enough
    return dataclasses.replace(
        op,
        tags=list(op.tags),
        requests=dict(op.requests),
        responses=dict(op.responses),
        parameters=list(op.parameters),
        security=[{scheme: list(scopes) for scheme, scopes in item.items()} for item in op.security],
    )
