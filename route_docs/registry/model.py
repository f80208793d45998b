from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

UNRESOLVED = "unresolved"
DUPLICATE = "duplicate"
UNSUPPORTED_METHOD = "unsupported_method"


@dataclass(frozen=True)
class Request:
    body_type: Any
    example: Any = None


@dataclass(frozen=True)
class Response:
    body_type: Any
    description: str
    content_type: str
    example: Any = None


@dataclass(frozen=True)
class Parameter:
    name: str
    location: str
    param_type: Any = str
    description: str | None = None
    required: bool = False


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    handler_id: str
    name: str = ""


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    handler_id: str
    message: str
    method: str = ""
    path: str = ""


@dataclass
class Operation:
    handler_id: str
    id: str = ""
    operation_id: str = ""
    method: str = ""
    path: str = ""
    summary: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    requests: dict[str, Request] = field(default_factory=dict)
    responses: dict[int, Response] = field(default_factory=dict)
    parameters: list[Parameter] = field(default_factory=list)
    deprecated: bool = False
    security: list[dict[str, list[str]]] = field(default_factory=list)

    @property
    def is_resolved(self) -> bool:
        return bool(self.method and self.path)

    def __str__(self) -> str:
        lines = [
            f"Operation ID: {self.operation_id}",
            f"Method: {self.method}",
            f"Path: {self.path}",
            f"Handler: {self.handler_id}",
        ]
        if self.summary:
            lines.append(f"Summary: {self.summary}")
        if self.description:
            lines.append(f"Description: {self.description}")
        if self.tags:
            lines.append(f"Tags: {', '.join(self.tags)}")
        if self.requests:
            lines.append("Requests:")
            for content_type, request in self.requests.items():
                lines.append(f"  - Content-Type: {content_type}, Body Type: {_type_label(request.body_type)}")
        if self.responses:
            lines.append("Responses:")
            for status_code, response in self.responses.items():
                lines.append(
                    f"  - Status Code: {status_code}, Body Type: {_type_label(response.body_type)}, "
                    f"Content-Type: {response.content_type}, Description: {response.description}"
                )
        return "\n".join(lines) + "\n"


def derive_operation_id(method: str, path: str) -> str:
    # "/" trims to "" and keeps the trailing hyphen, e.g. "get-"
    return f"{method.lower()}-{'-'.join(path.strip('/').split('/'))}"


def _type_label(tp: Any) -> str:
    if tp is None:
        return "<nil>"
    if isinstance(tp, type):
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)
