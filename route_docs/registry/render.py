from __future__ import annotations

import re
from http import HTTPStatus
from typing import Iterable

import structlog

from .describe import TypeDescriber
from .document import (
    HTTP_METHODS,
    Components,
    Document,
    DocumentMeta,
    MediaType,
    OperationNode,
    ParameterObject,
    RequestBody,
    ResponseObject,
)
from .errors import DuplicateOperationError
from .model import DUPLICATE, UNRESOLVED, UNSUPPORTED_METHOD, Diagnostic, Operation
from .schema import COMPONENT_SCHEMA_PREFIX, TYPE_STRING, SchemaFragment

logger = structlog.get_logger(__name__)

_PATH_PARAM = re.compile(r"^:([A-Za-z0-9_.\-]+)$")
_TEMPLATE_PARAM = re.compile(r"\{([^{}/]+)\}")


def render_document(
    operations: Iterable[Operation],
    meta: DocumentMeta,
    strict: bool = False,
) -> Document:
    """Render resolved operations into an OpenAPI document.

    Unresolved operations are skipped and reported in ``document.diagnostics``.
    When two operations share a method and path the later one replaces the
    earlier one, unless ``strict`` is set, in which case
    ``DuplicateOperationError`` is raised. Payload types that cannot be
    described raise ``UnsupportedTypeError``.
    """
    describer = TypeDescriber()
    document = Document(info=meta.info(), servers=list(meta.servers))
    owners: dict[tuple[str, str], str] = {}

    for op in operations:
        if not op.is_resolved:
            document.diagnostics.append(
                Diagnostic(
                    kind=UNRESOLVED,
                    handler_id=op.handler_id,
                    message=f"handler {op.handler_id!r} has no route and was left out of the document",
                )
            )
            continue

        method = op.method.lower()
        if method not in HTTP_METHODS:
            document.diagnostics.append(
                Diagnostic(
                    kind=UNSUPPORTED_METHOD,
                    handler_id=op.handler_id,
                    message=f"method {op.method!r} cannot be described in OpenAPI",
                    method=op.method,
                    path=op.path,
                )
            )
            logger.warning("operation_method_unsupported", handler_id=op.handler_id, method=op.method)
            continue

        path = openapi_path(op.path)
        node = _render_operation(op, path, describer)

        key = (method, path)
        if key in owners:
            if strict:
                raise DuplicateOperationError(op.method, path, node.operation_id)
            document.diagnostics.append(
                Diagnostic(
                    kind=DUPLICATE,
                    handler_id=op.handler_id,
                    message=f"replaces handler {owners[key]!r} for {op.method} {path}",
                    method=op.method,
                    path=path,
                )
            )
            logger.warning(
                "operation_duplicate",
                handler_id=op.handler_id,
                replaced=owners[key],
                method=op.method,
                path=path,
            )
        owners[key] = op.handler_id
        document.path_item(path).set_operation(method, node)
        for tag in op.tags:
            document.add_tag(tag)

    _apply_path_meta(document, meta)
    document.components = _render_components(meta, describer)

    logger.info(
        "document_rendered",
        title=meta.title,
        paths=len(document.paths),
        operations=len(owners),
        diagnostics=len(document.diagnostics),
    )
    return document


def openapi_path(path: str) -> str:
    """Rewrite router-style ``:name`` segments as OpenAPI ``{name}`` templates."""
    segments = []
    for segment in path.split("/"):
        match = _PATH_PARAM.match(segment)
        segments.append(f"{{{match.group(1)}}}" if match else segment)
    return "/".join(segments)


def _render_operation(op: Operation, path: str, describer: TypeDescriber) -> OperationNode:
    operation_id = op.operation_id
    return OperationNode(
        operation_id=operation_id,
        tags=list(op.tags),
        summary=op.summary or "",
        description=op.description or "",
        parameters=_render_parameters(op, path, describer),
        request_body=_render_request_body(op, describer),
        responses=_render_responses(op, describer),
        deprecated=op.deprecated,
        security=[dict(item) for item in op.security],
    )


def _render_parameters(op: Operation, path: str, describer: TypeDescriber) -> list[ParameterObject]:
    parameters: list[ParameterObject] = []
    declared = set()
    for param in op.parameters:
        declared.add((param.name, param.location))
        parameters.append(
            ParameterObject(
                name=param.name,
                location=param.location,
                description=param.description or "",
                required=param.required,
                schema=describer.describe(
                    param.param_type,
                    f"{op.operation_id}.parameters[{param.location}:{param.name}]",
                ),
            )
        )

    for name in _TEMPLATE_PARAM.findall(path):
        if (name, "path") not in declared:
            parameters.append(
                ParameterObject(
                    name=name,
                    location="path",
                    required=True,
                    schema=SchemaFragment(type=TYPE_STRING),
                )
            )
    return parameters


def _render_request_body(op: Operation, describer: TypeDescriber) -> RequestBody | None:
    content: dict[str, MediaType] = {}
    for content_type, request in op.requests.items():
        schema = describer.describe(request.body_type, f"{op.operation_id}.requestBody[{content_type}]")
        if schema is not None or request.example is not None:
            content[content_type] = MediaType(schema=schema, example=request.example)
    if not content:
        return None
    return RequestBody(content=content)


def _render_responses(op: Operation, describer: TypeDescriber) -> dict[str, ResponseObject]:
    responses: dict[str, ResponseObject] = {}
    for status_code, response in op.responses.items():
        rendered = ResponseObject(description=response.description or _reason(status_code))
        schema = describer.describe(response.body_type, f"{op.operation_id}.responses[{status_code}]")
        if schema is not None or response.example is not None:
            rendered.content = {response.content_type: MediaType(schema=schema, example=response.example)}
        responses[str(status_code)] = rendered
    return responses


def _render_components(meta: DocumentMeta, describer: TypeDescriber) -> Components:
    # user-supplied reusable objects first, generated schemas override same-named entries
    base = meta.components or Components()
    components = Components(
        schemas=dict(base.schemas),
        parameters=dict(base.parameters),
        security_schemes={**base.security_schemes, **meta.security_schemes},
        responses=dict(base.responses),
        headers=dict(base.headers),
        request_bodies=dict(base.request_bodies),
        examples=dict(base.examples),
        links=dict(base.links),
        callbacks={name: dict(callback) for name, callback in base.callbacks.items()},
    )
    components.schemas.update(_component_schemas(describer))
    return components


def _apply_path_meta(document: Document, meta: DocumentMeta) -> None:
    for path, servers in meta.path_servers.items():
        item = document.paths.get(openapi_path(path))
        if item is not None:
            item.servers = list(servers)
    for path, parameters in meta.path_parameters.items():
        item = document.paths.get(openapi_path(path))
        if item is not None:
            item.parameters = list(parameters)


def _component_schemas(describer: TypeDescriber) -> dict[str, SchemaFragment]:
    schemas: dict[str, SchemaFragment] = {}
    while True:
        pending = [name for name in describer.references if name not in schemas]
        if not pending:
            break
        for name in pending:
            schemas[name] = describer.schema(describer.references[name], COMPONENT_SCHEMA_PREFIX + name)
    return dict(sorted(schemas.items()))


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"HTTP {status_code}"
