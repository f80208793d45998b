from __future__ import annotations

import dataclasses
from typing import Any, Iterator, Optional, Sequence, Union

import pytest

from route_docs.registry.describe import TypeDescriber, describe
from route_docs.registry.errors import SchemaError, UnsupportedTypeError
from route_docs.registry.schema import SchemaFragment

from .payloads import BadMapping, Customer, Employee, Item, Profile, Settings, TreeNode, WithHandler


def _schema(tp: Any) -> dict[str, Any]:
    schema = describe(tp)
    assert schema is not None
    return schema.to_dict()


def test_primitives_use_narrowest_format():
    assert _schema(str) == {"type": "string"}
    assert _schema(bool) == {"type": "boolean"}
    assert _schema(int) == {"type": "integer", "format": "int64"}
    assert _schema(float) == {"type": "number", "format": "double"}
    assert _schema(bytes) == {"type": "string", "format": "byte"}


def test_void_type_has_no_schema():
    assert describe(None) is None
    assert describe(type(None)) is None


def test_any_is_an_empty_schema():
    assert _schema(Any) == {}


def test_optional_marks_nullable():
    assert _schema(Optional[int]) == {"type": ["integer", "null"], "format": "int64"}


def test_union_renders_any_of():
    assert _schema(Union[int, str, None]) == {
        "anyOf": [{"type": "integer", "format": "int64"}, {"type": "string"}, {"type": "null"}]
    }


def test_sequences_render_items():
    assert _schema(list[int]) == {"type": "array", "items": {"type": "integer", "format": "int64"}}
    assert _schema(Sequence[str]) == {"type": "array", "items": {"type": "string"}}
    assert _schema(tuple[bool, ...]) == {"type": "array", "items": {"type": "boolean"}}
    assert _schema(frozenset[str]) == {"type": "array", "items": {"type": "string"}, "uniqueItems": True}


def test_record_fields_and_required_set():
    schema = _schema(Item)

    assert schema["type"] == "object"
    assert schema["description"] == "An item in the catalog."
    assert schema["required"] == [
        "id",
        "title",
        "price",
        "quantity",
        "released",
        "color",
        "priority",
        "status",
        "thumbnail",
    ]
    props = schema["properties"]
    assert props["id"] == {"type": "string", "format": "uuid"}
    assert props["title"] == {"type": "string", "description": "Display title"}
    assert props["released"] == {"type": "string", "format": "date"}
    assert props["color"] == {"type": "string", "enum": ["red", "green"]}
    assert props["priority"] == {"type": "integer", "enum": [1, 2]}
    assert props["status"] == {"type": "string", "enum": ["draft", "published"]}
    assert props["labels"] == {"type": "array", "items": {"type": "string"}, "uniqueItems": True}
    assert props["attributes"] == {
        "type": "object",
        "additionalProperties": {"type": "integer", "format": "int64"},
    }
    assert props["note"] == {"type": ["string", "null"]}
    assert "secret" not in schema["required"]


def test_typeddict_required_keys():
    schema = _schema(Customer)

    assert schema["required"] == ["name", "address"]
    address = schema["properties"]["address"]
    assert address["type"] == "object"
    assert "required" not in address
    assert set(address["properties"]) == {"street", "city"}


def test_typeddict_requiredness_markers_are_unwrapped():
    profile = _schema(Profile)

    assert profile["required"] == ["name"]
    assert profile["properties"]["nickname"] == {"type": "string"}
    assert profile["properties"]["tags"] == {"type": "array", "items": {"type": "string"}}

    settings = _schema(Settings)

    assert settings["required"] == ["theme"]
    assert settings["properties"]["theme"] == {"type": "string"}
    assert settings["properties"]["font_size"] == {"type": "integer", "format": "int64"}


def test_unresolvable_annotation_is_rejected_with_location():
    @dataclasses.dataclass
    class Local:
        child: Local | None = None

    with pytest.raises(UnsupportedTypeError) as excinfo:
        TypeDescriber().schema(Local, "body")

    assert excinfo.value.location == "body"
    assert "unresolvable annotation" in str(excinfo.value)


def test_self_reference_emits_ref_at_recursion_point():
    describer = TypeDescriber()
    schema = describer.describe(TreeNode)
    assert schema is not None
    rendered = schema.to_dict()

    assert rendered["properties"]["children"] == {
        "type": "array",
        "items": {"$ref": "#/components/schemas/TreeNode"},
    }
    assert rendered["properties"]["parent"] == {
        "anyOf": [{"$ref": "#/components/schemas/TreeNode"}, {"type": "null"}]
    }
    assert describer.references == {"TreeNode": TreeNode}


def test_mutual_recursion_references_outer_type():
    describer = TypeDescriber()
    schema = describer.describe(Employee)
    assert schema is not None

    manager = schema.to_dict()["properties"]["manager"]
    assert manager["type"] == ["object", "null"]
    assert manager["properties"]["reports"]["items"] == {"$ref": "#/components/schemas/Employee"}
    assert list(describer.references) == ["Employee"]


def test_callable_field_is_rejected_with_location():
    with pytest.raises(UnsupportedTypeError) as excinfo:
        describe(WithHandler, "post-hooks.requestBody[application/json]")

    assert excinfo.value.location == "post-hooks.requestBody[application/json].handler"
    assert "post-hooks.requestBody[application/json].handler" in str(excinfo.value)


def test_stream_type_is_rejected():
    with pytest.raises(UnsupportedTypeError):
        describe(Iterator[int], "get-stream.responses[200]")


def test_plain_class_is_rejected():
    class Opaque:
        pass

    with pytest.raises(UnsupportedTypeError) as excinfo:
        describe(Opaque, "get-opaque.responses[200]")
    assert excinfo.value.type is Opaque


def test_non_string_mapping_keys_are_rejected():
    with pytest.raises(UnsupportedTypeError) as excinfo:
        describe(BadMapping)
    assert excinfo.value.location == "counts"


def test_reference_cannot_carry_inline_definition():
    with pytest.raises(SchemaError):
        SchemaFragment(ref="#/components/schemas/TreeNode", type="object")


def test_unknown_format_is_rejected():
    with pytest.raises(SchemaError):
        SchemaFragment(type="string", format="ipv4")
