"""OpenAPI 3.1 document model.

Every node renders itself with ``to_dict``; optional fields are omitted when
empty, following the OpenAPI conventions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .model import Diagnostic
from .schema import SchemaFragment

OPENAPI_VERSION = "3.1.0"

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def _compact(value: dict[str, Any]) -> dict[str, Any]:
    return {key: item for key, item in value.items() if not _is_empty(item)}


def _is_empty(item: Any) -> bool:
    # 0 and 0.0 are values, only None, False and empty containers are absent
    if item is None or item is False:
        return True
    return isinstance(item, (str, list, dict)) and not item


def _render_map(value: dict[str, Any]) -> dict[str, Any]:
    return {key: item.to_dict() if hasattr(item, "to_dict") else item for key, item in value.items()}


@dataclass(frozen=True)
class Contact:
    name: str = ""
    url: str = ""
    email: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _compact({"name": self.name, "url": self.url, "email": self.email})


@dataclass(frozen=True)
class License:
    name: str
    identifier: str = ""
    url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _compact({"name": self.name, "identifier": self.identifier, "url": self.url})


@dataclass(frozen=True)
class Info:
    title: str
    version: str
    description: str = ""
    terms_of_service: str = ""
    contact: Contact | None = None
    license: License | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"title": self.title}
        out.update(
            _compact(
                {
                    "description": self.description,
                    "termsOfService": self.terms_of_service,
                    "contact": self.contact.to_dict() if self.contact else None,
                    "license": self.license.to_dict() if self.license else None,
                }
            )
        )
        out["version"] = self.version
        return out


@dataclass(frozen=True)
class Server:
    url: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"url": self.url}
        if self.description:
            out["description"] = self.description
        return out


@dataclass
class MediaType:
    schema: SchemaFragment | None = None
    example: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.schema is not None:
            out["schema"] = self.schema.to_dict()
        if self.example is not None:
            out["example"] = self.example
        return out


@dataclass
class RequestBody:
    content: dict[str, MediaType] = field(default_factory=dict)
    description: str = ""
    required: bool = False

    def to_dict(self) -> dict[str, Any]:
        out = _compact({"description": self.description})
        out["content"] = _render_map(self.content)
        if self.required:
            out["required"] = True
        return out


@dataclass
class Header:
    description: str = ""
    required: bool = False
    schema: SchemaFragment | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "description": self.description,
                "required": self.required,
                "schema": self.schema.to_dict() if self.schema else None,
            }
        )


@dataclass
class ResponseObject:
    description: str = ""
    content: dict[str, MediaType] = field(default_factory=dict)
    headers: dict[str, Header] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"description": self.description}
        if self.content:
            out["content"] = _render_map(self.content)
        if self.headers:
            out["headers"] = _render_map(self.headers)
        return out


@dataclass
class ParameterObject:
    name: str
    location: str
    description: str = ""
    required: bool = False
    schema: SchemaFragment | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "in": self.location}
        out.update(
            _compact(
                {
                    "description": self.description,
                    "required": self.required,
                    "schema": self.schema.to_dict() if self.schema else None,
                }
            )
        )
        return out


@dataclass(frozen=True)
class OAuthFlow:
    authorization_url: str = ""
    token_url: str = ""
    refresh_url: str = ""
    scopes: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out = _compact(
            {
                "authorizationUrl": self.authorization_url,
                "tokenUrl": self.token_url,
                "refreshUrl": self.refresh_url,
            }
        )
        out["scopes"] = dict(self.scopes)
        return out


@dataclass(frozen=True)
class OAuthFlows:
    implicit: OAuthFlow | None = None
    password: OAuthFlow | None = None
    client_credentials: OAuthFlow | None = None
    authorization_code: OAuthFlow | None = None

    def to_dict(self) -> dict[str, Any]:
        flows = {
            "implicit": self.implicit,
            "password": self.password,
            "clientCredentials": self.client_credentials,
            "authorizationCode": self.authorization_code,
        }
        return {name: flow.to_dict() for name, flow in flows.items() if flow is not None}


@dataclass(frozen=True)
class SecurityScheme:
    type: str
    description: str = ""
    name: str = ""
    location: str = ""
    scheme: str = ""
    bearer_format: str = ""
    open_id_connect_url: str = ""
    flows: OAuthFlows | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type}
        out.update(
            _compact(
                {
                    "description": self.description,
                    "name": self.name,
                    "in": self.location,
                    "scheme": self.scheme,
                    "bearerFormat": self.bearer_format,
                    "openIdConnectUrl": self.open_id_connect_url,
                    "flows": self.flows.to_dict() if self.flows else None,
                }
            )
        )
        return out


@dataclass(frozen=True)
class Link:
    operation_id: str = ""
    description: str = ""
    parameters: dict[str, str] = field(default_factory=dict)
    request_body: Any = None
    server: Server | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "operationId": self.operation_id,
                "description": self.description,
                "parameters": dict(self.parameters),
                "requestBody": self.request_body,
                "server": self.server.to_dict() if self.server else None,
            }
        )


@dataclass
class OperationNode:
    operation_id: str = ""
    tags: list[str] = field(default_factory=list)
    summary: str = ""
    description: str = ""
    parameters: list[ParameterObject] = field(default_factory=list)
    request_body: RequestBody | None = None
    responses: dict[str, ResponseObject] = field(default_factory=dict)
    deprecated: bool = False
    security: list[dict[str, list[str]]] = field(default_factory=list)
    servers: list[Server] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out = _compact(
            {
                "tags": list(self.tags),
                "summary": self.summary,
                "description": self.description,
                "operationId": self.operation_id,
                "parameters": [param.to_dict() for param in self.parameters],
                "requestBody": self.request_body.to_dict() if self.request_body else None,
            }
        )
        out["responses"] = _render_map(self.responses)
        out.update(
            _compact(
                {
                    "deprecated": self.deprecated,
                    "security": [dict(item) for item in self.security],
                    "servers": [server.to_dict() for server in self.servers],
                }
            )
        )
        return out


@dataclass
class PathItem:
    summary: str = ""
    description: str = ""
    operations: dict[str, OperationNode] = field(default_factory=dict)
    servers: list[Server] = field(default_factory=list)
    parameters: list[ParameterObject] = field(default_factory=list)

    def set_operation(self, method: str, node: OperationNode) -> OperationNode | None:
        method = method.lower()
        if method not in HTTP_METHODS:
            raise ValueError(f"unsupported HTTP method {method!r}")
        previous = self.operations.get(method)
        self.operations[method] = node
        return previous

    def to_dict(self) -> dict[str, Any]:
        out = _compact({"summary": self.summary, "description": self.description})
        for method in HTTP_METHODS:
            node = self.operations.get(method)
            if node is not None:
                out[method] = node.to_dict()
        out.update(
            _compact(
                {
                    "servers": [server.to_dict() for server in self.servers],
                    "parameters": [param.to_dict() for param in self.parameters],
                }
            )
        )
        return out


@dataclass
class Components:
    schemas: dict[str, SchemaFragment] = field(default_factory=dict)
    parameters: dict[str, ParameterObject] = field(default_factory=dict)
    security_schemes: dict[str, SecurityScheme] = field(default_factory=dict)
    responses: dict[str, ResponseObject] = field(default_factory=dict)
    headers: dict[str, Header] = field(default_factory=dict)
    request_bodies: dict[str, RequestBody] = field(default_factory=dict)
    examples: dict[str, Any] = field(default_factory=dict)
    links: dict[str, Link] = field(default_factory=dict)
    callbacks: dict[str, dict[str, PathItem]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "schemas": _render_map(self.schemas),
                "parameters": _render_map(self.parameters),
                "securitySchemes": _render_map(self.security_schemes),
                "responses": _render_map(self.responses),
                "headers": _render_map(self.headers),
                "requestBodies": _render_map(self.request_bodies),
                "examples": dict(self.examples),
                "links": _render_map(self.links),
                "callbacks": {name: _render_map(callback) for name, callback in self.callbacks.items()},
            }
        )


@dataclass(frozen=True)
class DocumentMeta:
    title: str
    version: str
    description: str = ""
    terms_of_service: str = ""
    contact: Contact | None = None
    license: License | None = None
    servers: tuple[Server, ...] = ()
    security_schemes: dict[str, SecurityScheme] = field(default_factory=dict)
    components: Components | None = None
    path_servers: dict[str, tuple[Server, ...]] = field(default_factory=dict)
    path_parameters: dict[str, tuple[ParameterObject, ...]] = field(default_factory=dict)

    def info(self) -> Info:
        return Info(
            title=self.title,
            version=self.version,
            description=self.description,
            terms_of_service=self.terms_of_service,
            contact=self.contact,
            license=self.license,
        )


@dataclass
class Document:
    info: Info
    servers: list[Server] = field(default_factory=list)
    paths: dict[str, PathItem] = field(default_factory=dict)
    components: Components | None = None
    tags: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    openapi: str = OPENAPI_VERSION

    def add_tag(self, tag: str) -> None:
        if tag not in self.tags:
            self.tags.append(tag)

    def path_item(self, path: str) -> PathItem:
        item = self.paths.get(path)
        if item is None:
            item = self.paths[path] = PathItem()
        return item

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"openapi": self.openapi, "info": self.info.to_dict()}
        if self.servers:
            out["servers"] = [server.to_dict() for server in self.servers]
        out["paths"] = _render_map(self.paths)
        if self.components is not None:
            components = self.components.to_dict()
            if components:
                out["components"] = components
        if self.tags:
            out["tags"] = [{"name": tag} for tag in self.tags]
        return out
