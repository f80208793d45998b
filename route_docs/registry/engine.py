from __future__ import annotations

import threading
from typing import Any, Callable, Iterable, TypeVar

from .document import Document, DocumentMeta
from .errors import OptionError
from .model import Diagnostic, Operation
from .options import OperationOption
from .render import render_document
from .resolve import resolve_routes
from .store import OperationStore

HandlerT = TypeVar("HandlerT", bound=Callable[..., Any])


class Registry:
    """Captures handler metadata at registration and renders it once routes are bound.

    Typical use::

        registry = Registry()
        router.add("GET", "/", registry.register(hello, with_tags("hello"), handler_id="hello"))
        registry.resolve(router.routes())
        document = registry.render(DocumentMeta(title="Hello", version="1.0.0"))
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict
        self._store = OperationStore()
        self._lock = threading.RLock()
        self._diagnostics: list[Diagnostic] = []

    def register(
        self,
        handler: HandlerT,
        *options: OperationOption,
        handler_id: str | None = None,
    ) -> HandlerT:
        key = handler_id or handler_identity(handler)
        with self._lock:
            self._store.capture(key, options)
        return handler

    def operation(self, *options: OperationOption, handler_id: str | None = None) -> Callable[[HandlerT], HandlerT]:
        def decorator(handler: HandlerT) -> HandlerT:
            return self.register(handler, *options, handler_id=handler_id)

        return decorator

    def resolve(self, routes: Iterable[Any]) -> list[Diagnostic]:
        with self._lock:
            self._diagnostics = resolve_routes(self._store, routes)
            return list(self._diagnostics)

    def unresolved(self) -> list[Diagnostic]:
        with self._lock:
            return list(self._diagnostics)

    def operations(self) -> tuple[Operation, ...]:
        with self._lock:
            return self._store.snapshot()

    def render(self, meta: DocumentMeta) -> Document:
        with self._lock:
            operations = self._store.snapshot()
        return render_document(operations, meta, strict=self.strict)


def handler_identity(handler: Any) -> str:
    module = getattr(handler, "__module__", None)
    qualname = getattr(handler, "__qualname__", None)
    if not module or not qualname:
        raise OptionError(f"cannot derive a handler id for {handler!r}; pass handler_id explicitly")
    return f"{module}.{qualname}"
