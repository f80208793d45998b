"""Options applied to an operation when its handler is registered.

Each option sets one logical field. Options for the same field applied later
win. Invalid arguments raise ``OptionError`` when the option is built, so
mistakes surface at startup.
"""

from __future__ import annotations

from typing import Any, Callable

from .errors import OptionError
from .model import Operation, Parameter, Request, Response

OperationOption = Callable[[Operation], None]

JSON = "application/json"

PARAMETER_LOCATIONS = ("path", "query", "header", "cookie")


def with_id(operation_id: str) -> OperationOption:
    if not isinstance(operation_id, str):
        raise OptionError(f"operation id must be a string, got {operation_id!r}")

    def apply(op: Operation) -> None:
        op.id = operation_id

    return apply


def with_summary(summary: str) -> OperationOption:
    def apply(op: Operation) -> None:
        op.summary = summary

    return apply


def with_description(description: str) -> OperationOption:
    def apply(op: Operation) -> None:
        op.description = description

    return apply


def with_tags(*tags: str) -> OperationOption:
    for tag in tags:
        if not isinstance(tag, str) or not tag:
            raise OptionError(f"tags must be non-empty strings, got {tag!r}")
    ordered = list(dict.fromkeys(tags))

    def apply(op: Operation) -> None:
        op.tags = list(ordered)

    return apply


def with_request(body_type: Any, content_type: str = JSON, example: Any = None) -> OperationOption:
    _check_content_type(content_type)

    def apply(op: Operation) -> None:
        op.requests[content_type] = Request(body_type=body_type, example=example)

    return apply


def with_response(
    status_code: int,
    body_type: Any = None,
    description: str = "",
    content_type: str = JSON,
    example: Any = None,
) -> OperationOption:
    if isinstance(status_code, bool) or not isinstance(status_code, int) or not 100 <= status_code <= 599:
        raise OptionError(f"invalid HTTP status code {status_code!r}")
    _check_content_type(content_type)

    def apply(op: Operation) -> None:
        op.responses[status_code] = Response(
            body_type=body_type,
            description=description,
            content_type=content_type,
            example=example,
        )

    return apply


def with_parameter(
    name: str,
    location: str,
    param_type: Any = str,
    description: str | None = None,
    required: bool = False,
) -> OperationOption:
    if not name:
        raise OptionError("parameter name must not be empty")
    if location not in PARAMETER_LOCATIONS:
        raise OptionError(f"parameter {name!r}: location must be one of {', '.join(PARAMETER_LOCATIONS)}")
    parameter = Parameter(
        name=name,
        location=location,
        param_type=param_type,
        description=description,
        required=required or location == "path",
    )

    def apply(op: Operation) -> None:
        op.parameters = [
            item for item in op.parameters if (item.name, item.location) != (name, location)
        ]
        op.parameters.append(parameter)

    return apply


def with_security(scheme: str, *scopes: str) -> OperationOption:
    if not scheme:
        raise OptionError("security scheme name must not be empty")

    def apply(op: Operation) -> None:
        op.security.append({scheme: list(scopes)})

    return apply


def deprecated(flag: bool = True) -> OperationOption:
    def apply(op: Operation) -> None:
        op.deprecated = flag

    return apply


def _check_content_type(content_type: str) -> None:
    if not isinstance(content_type, str) or "/" not in content_type:
        raise OptionError(f"invalid content type {content_type!r}")
