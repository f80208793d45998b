from .document import (
    Components,
    Contact,
    Document,
    DocumentMeta,
    Header,
    License,
    Link,
    MediaType,
    OAuthFlow,
    OAuthFlows,
    ParameterObject,
    PathItem,
    RequestBody,
    ResponseObject,
    SecurityScheme,
    Server,
)
from .engine import Registry, handler_identity
from .errors import (
    DuplicateOperationError,
    OptionError,
    RegistryError,
    SchemaError,
    UnsupportedTypeError,
)
from .model import Diagnostic, Operation, Route
from .options import (
    deprecated,
    with_description,
    with_id,
    with_parameter,
    with_request,
    with_response,
    with_security,
    with_summary,
    with_tags,
)
from .schema import SchemaFragment

__all__ = [
    "Components",
    "Contact",
    "Diagnostic",
    "Document",
    "DocumentMeta",
    "DuplicateOperationError",
    "Header",
    "License",
    "Link",
    "MediaType",
    "OAuthFlow",
    "OAuthFlows",
    "Operation",
    "OptionError",
    "ParameterObject",
    "PathItem",
    "Registry",
    "RegistryError",
    "RequestBody",
    "ResponseObject",
    "Route",
    "SchemaError",
    "SchemaFragment",
    "SecurityScheme",
    "Server",
    "UnsupportedTypeError",
    "deprecated",
    "handler_identity",
    "with_description",
    "with_id",
    "with_parameter",
    "with_request",
    "with_response",
    "with_security",
    "with_summary",
    "with_tags",
]
