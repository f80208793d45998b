from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import SchemaError

TYPE_STRING = "string"
TYPE_NUMBER = "number"
TYPE_INTEGER = "integer"
TYPE_BOOLEAN = "boolean"
TYPE_ARRAY = "array"
TYPE_OBJECT = "object"

SCHEMA_TYPES = (TYPE_STRING, TYPE_NUMBER, TYPE_INTEGER, TYPE_BOOLEAN, TYPE_ARRAY, TYPE_OBJECT)

SCHEMA_FORMATS = (
    "int32",
    "int64",
    "float",
    "double",
    "byte",
    "binary",
    "date",
    "date-time",
    "password",
    "email",
    "uuid",
)

COMPONENT_SCHEMA_PREFIX = "#/components/schemas/"


@dataclass
class SchemaFragment:
    """Recursive description of a payload type.

    A fragment is either a reference (``ref`` set, nothing else besides
    ``nullable`` and ``description``) or an inline definition.
    """

    type: str | None = None
    format: str | None = None
    properties: dict[str, SchemaFragment] = field(default_factory=dict)
    items: SchemaFragment | None = None
    additional_properties: SchemaFragment | None = None
    one_of: list[SchemaFragment] = field(default_factory=list)
    any_of: list[SchemaFragment] = field(default_factory=list)
    all_of: list[SchemaFragment] = field(default_factory=list)
    ref: str | None = None
    nullable: bool = False
    required: list[str] = field(default_factory=list)
    enum: list[Any] = field(default_factory=list)
    unique_items: bool = False
    examples: list[Any] = field(default_factory=list)
    description: str | None = None

    def __post_init__(self) -> None:
        if self.type is not None and self.type not in SCHEMA_TYPES:
            raise SchemaError(f"unknown schema type {self.type!r}")
        if self.format is not None and self.format not in SCHEMA_FORMATS:
            raise SchemaError(f"unknown schema format {self.format!r}")
        if self.ref is not None and self._has_inline_definition():
            raise SchemaError(f"$ref {self.ref!r} cannot be combined with an inline definition")

    @classmethod
    def reference(cls, name: str) -> SchemaFragment:
        return cls(ref=COMPONENT_SCHEMA_PREFIX + name)

    def _has_inline_definition(self) -> bool:
        return bool(
            self.type
            or self.format
            or self.properties
            or self.items is not None
            or self.additional_properties is not None
            or self.one_of
            or self.any_of
            or self.all_of
            or self.required
            or self.enum
            or self.unique_items
            or self.examples
        )

    def to_dict(self) -> dict[str, Any]:
        if self.ref is not None:
            ref: dict[str, Any] = {"$ref": self.ref}
            if self.description:
                ref["description"] = self.description
            if self.nullable:
                return {"anyOf": [ref, {"type": "null"}]}
            return ref

        out: dict[str, Any] = {}
        if self.type is not None:
            out["type"] = [self.type, "null"] if self.nullable else self.type
        if self.format:
            out["format"] = self.format
        if self.description:
            out["description"] = self.description
        if self.properties:
            out["properties"] = {name: prop.to_dict() for name, prop in self.properties.items()}
        if self.required:
            out["required"] = list(self.required)
        if self.items is not None:
            out["items"] = self.items.to_dict()
        if self.unique_items:
            out["uniqueItems"] = True
        if self.additional_properties is not None:
            out["additionalProperties"] = self.additional_properties.to_dict()
        if self.enum:
            out["enum"] = list(self.enum)
            if self.nullable and None not in self.enum:
                out["enum"].append(None)
        if self.one_of:
            out["oneOf"] = [item.to_dict() for item in self.one_of]
        if self.all_of:
            out["allOf"] = [item.to_dict() for item in self.all_of]
        if self.any_of:
            any_of = [item.to_dict() for item in self.any_of]
            if self.nullable and self.type is None:
                any_of.append({"type": "null"})
            out["anyOf"] = any_of
        elif self.nullable and self.type is None and (self.one_of or self.all_of):
            out = {"anyOf": [out, {"type": "null"}]}
        if self.examples:
            out["examples"] = list(self.examples)
        return out
