from __future__ import annotations

from typing import Any


class RegistryError(RuntimeError):
    pass


class OptionError(RegistryError):
    pass


class SchemaError(RegistryError):
    pass


class UnsupportedTypeError(RegistryError):
    def __init__(self, tp: Any, location: str = "", reason: str | None = None) -> None:
        self.type = tp
        self.location = location
        self.reason = reason
        message = f"cannot describe type {_type_name(tp)}"
        if location:
            message += f" at {location}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DuplicateOperationError(RegistryError):
    def __init__(self, method: str, path: str, operation_id: str) -> None:
        self.method = method
        self.path = path
        self.operation_id = operation_id
        super().__init__(f"duplicate operation {operation_id!r} for {method.upper()} {path}")


def _type_name(tp: Any) -> str:
    if isinstance(tp, type):
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)
