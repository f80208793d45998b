"""Map Python payload types to schema fragments.

Types are inspected statically with ``typing.get_type_hints``. Each provider
either claims a type and returns a fragment or returns ``None`` to let the
next one try; a type nobody claims is an error.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import enum
import types
import typing
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Optional
from uuid import UUID

from .errors import UnsupportedTypeError
from .schema import (
    TYPE_ARRAY,
    TYPE_BOOLEAN,
    TYPE_INTEGER,
    TYPE_NUMBER,
    TYPE_OBJECT,
    TYPE_STRING,
    SchemaFragment,
)

NoneType = type(None)

Provider = Callable[..., Optional[SchemaFragment]]

providers: list[Provider] = []

_UNSUPPORTED_ORIGINS = (
    collections.abc.Callable,
    collections.abc.Iterator,
    collections.abc.AsyncIterator,
    collections.abc.AsyncIterable,
    collections.abc.Generator,
    collections.abc.AsyncGenerator,
    collections.abc.Coroutine,
    collections.abc.Awaitable,
)

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, collections.abc.Sequence, collections.abc.Set)

_REQUIREDNESS_MARKERS = tuple(
    marker for marker in (getattr(typing, "Required", None), getattr(typing, "NotRequired", None)) if marker is not None
)


def _provider(func: Provider) -> Provider:
    providers.append(func)
    return func


def _simple_schema(pytype: type, schema_type: str, schema_format: str | None = None) -> None:
    @_provider
    def simple(*, python_type: Any, **_: Any) -> SchemaFragment | None:
        if python_type is pytype:
            return SchemaFragment(type=schema_type, format=schema_format)
        return None


@_provider
def _unsupported_schema(*, python_type: Any, origin: Any, location: str, **_: Any) -> SchemaFragment | None:
    if origin in _UNSUPPORTED_ORIGINS:
        raise UnsupportedTypeError(python_type, location, "callables and streams have no schema")
    if isinstance(python_type, (types.FunctionType, types.BuiltinFunctionType, types.MethodType)):
        raise UnsupportedTypeError(python_type, location, "expected a type, got a function")
    if _is_subclass(python_type, _UNSUPPORTED_ORIGINS):
        raise UnsupportedTypeError(python_type, location, "callables and streams have no schema")
    return None


@_provider
def _any_schema(*, python_type: Any, **_: Any) -> SchemaFragment | None:
    if python_type is Any or python_type is object or python_type is NoneType:
        return SchemaFragment()
    return None


@_provider
def _enum_schema(*, python_type: Any, **_: Any) -> SchemaFragment | None:
    if not _is_subclass(python_type, enum.Enum):
        return None
    values = [member.value for member in python_type]
    return SchemaFragment(type=_literal_kind(values), enum=values)


_simple_schema(bool, TYPE_BOOLEAN)
_simple_schema(datetime, TYPE_STRING, "date-time")
_simple_schema(date, TYPE_STRING, "date")  # after datetime
_simple_schema(UUID, TYPE_STRING, "uuid")
_simple_schema(Decimal, TYPE_NUMBER, "double")


@_provider
def _str_schema(*, python_type: Any, **_: Any) -> SchemaFragment | None:
    if _is_subclass(python_type, str):
        return SchemaFragment(type=TYPE_STRING)
    return None


@_provider
def _bytes_schema(*, python_type: Any, **_: Any) -> SchemaFragment | None:
    if _is_subclass(python_type, (bytes, bytearray)):
        return SchemaFragment(type=TYPE_STRING, format="byte")
    return None


@_provider
def _int_schema(*, python_type: Any, **_: Any) -> SchemaFragment | None:
    if _is_subclass(python_type, int) and not _is_subclass(python_type, bool):
        return SchemaFragment(type=TYPE_INTEGER, format="int64")
    return None


@_provider
def _float_schema(*, python_type: Any, **_: Any) -> SchemaFragment | None:
    if _is_subclass(python_type, float):
        return SchemaFragment(type=TYPE_NUMBER, format="double")
    return None


@_provider
def _literal_schema(*, origin: Any, args: tuple[Any, ...], **_: Any) -> SchemaFragment | None:
    if origin is not typing.Literal:
        return None
    values = [value for value in args if value is not None]
    return SchemaFragment(type=_literal_kind(values), enum=values, nullable=None in args)


@_provider
def _union_schema(
    *, origin: Any, args: tuple[Any, ...], location: str, describer: TypeDescriber, **_: Any
) -> SchemaFragment | None:
    if origin is not typing.Union and origin is not types.UnionType:
        return None
    nullable = NoneType in args
    members = [arg for arg in args if arg is not NoneType]
    if len(members) == 1:
        schema = describer.schema(members[0], location)
        schema.nullable = schema.nullable or nullable
        return schema
    return SchemaFragment(
        any_of=[describer.schema(arg, f"{location}|{index}") for index, arg in enumerate(members)],
        nullable=nullable,
    )


@_provider
def _mapping_schema(
    *, python_type: Any, origin: Any, args: tuple[Any, ...], location: str, describer: TypeDescriber, **_: Any
) -> SchemaFragment | None:
    if python_type is dict:
        return SchemaFragment(type=TYPE_OBJECT)
    if not _is_subclass(origin, collections.abc.Mapping):
        return None
    if not args:
        return SchemaFragment(type=TYPE_OBJECT)
    key_type, value_type = args
    if key_type is not str:
        raise UnsupportedTypeError(python_type, location, "mapping keys must be str")
    return SchemaFragment(
        type=TYPE_OBJECT,
        additional_properties=describer.schema(value_type, f"{location}{{}}"),
    )


@_provider
def _sequence_schema(
    *, python_type: Any, origin: Any, args: tuple[Any, ...], location: str, describer: TypeDescriber, **_: Any
) -> SchemaFragment | None:
    if python_type in (list, tuple, set, frozenset):
        return SchemaFragment(type=TYPE_ARRAY, items=SchemaFragment(), unique_items=python_type in (set, frozenset))
    if origin not in _SEQUENCE_ORIGINS:
        return None
    unique = origin in (set, frozenset, collections.abc.Set)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            args = args[:1]
        elif len(set(args)) != 1:
            raise UnsupportedTypeError(python_type, location, "only homogeneous tuples are supported")
    item_type = args[0] if args else Any
    return SchemaFragment(
        type=TYPE_ARRAY,
        items=describer.schema(item_type, f"{location}[]"),
        unique_items=unique,
    )


@_provider
def _typeddict_schema(*, python_type: Any, location: str, describer: TypeDescriber, **_: Any) -> SchemaFragment | None:
    if not typing.is_typeddict(python_type):
        return None
    return describer.record(python_type, location, _typeddict_fields)


@_provider
def _dataclass_schema(*, python_type: Any, location: str, describer: TypeDescriber, **_: Any) -> SchemaFragment | None:
    if not (isinstance(python_type, type) and dataclasses.is_dataclass(python_type)):
        return None
    return describer.record(python_type, location, _dataclass_fields)


def _dataclass_fields(cls: type, location: str) -> list[tuple[str, Any, bool]]:
    hints = _type_hints(cls, location)
    fields: list[tuple[str, Any, bool]] = []
    for item in dataclasses.fields(cls):
        name = item.metadata.get("json", item.name)
        if name == "-":
            continue
        omit = (
            item.default is not dataclasses.MISSING
            or item.default_factory is not dataclasses.MISSING
            or bool(item.metadata.get("omitempty", False))
        )
        fields.append((name, hints[item.name], not omit))
    return fields


def _typeddict_fields(cls: type, location: str) -> list[tuple[str, Any, bool]]:
    hints = _type_hints(cls, location)
    required_keys = getattr(cls, "__required_keys__", frozenset(hints))
    return [(name, _strip_requiredness(hint), name in required_keys) for name, hint in hints.items()]


def _type_hints(cls: type, location: str) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as exc:
        raise UnsupportedTypeError(cls, location, f"unresolvable annotation: {exc}") from exc


def _strip_requiredness(hint: Any) -> Any:
    # Required[...] / NotRequired[...] only affect __required_keys__
    while typing.get_origin(hint) in _REQUIREDNESS_MARKERS:
        hint = typing.get_args(hint)[0]
    return hint


class TypeDescriber:
    """Describes payload types, tracking record types that must become components.

    One describer is used per render so that ``$ref`` names stay consistent
    across the whole document.
    """

    def __init__(self) -> None:
        self._stack: list[type] = []
        self._names: dict[type, str] = {}
        self.references: dict[str, type] = {}

    def describe(self, tp: Any, location: str = "") -> SchemaFragment | None:
        if tp is None or tp is NoneType:
            return None
        return self.schema(tp, location)

    def schema(self, tp: Any, location: str = "") -> SchemaFragment:
        python_type, description = _split_annotated(tp)
        origin = typing.get_origin(python_type)
        args = typing.get_args(python_type)
        for provider in providers:
            schema = provider(
                python_type=python_type,
                origin=origin,
                args=args,
                location=location,
                describer=self,
            )
            if schema is not None:
                if description and not schema.description:
                    schema.description = description
                return schema
        raise UnsupportedTypeError(python_type, location)

    def record(
        self,
        cls: type,
        location: str,
        fields: Callable[[type, str], list[tuple[str, Any, bool]]],
    ) -> SchemaFragment:
        if cls in self._stack:
            name = self.component_name(cls)
            self.references[name] = cls
            return SchemaFragment.reference(name)

        self._stack.append(cls)
        try:
            properties: dict[str, SchemaFragment] = {}
            required: list[str] = []
            for name, hint, is_required in fields(cls, location):
                properties[name] = self.schema(hint, f"{location}.{name}" if location else name)
                if is_required:
                    required.append(name)
        finally:
            self._stack.pop()
        return SchemaFragment(
            type=TYPE_OBJECT,
            properties=properties,
            required=required,
            description=_doc(cls),
        )

    def component_name(self, cls: type) -> str:
        name = self._names.get(cls)
        if name is not None:
            return name
        name = cls.__name__
        taken = set(self._names.values())
        while name in taken:
            name = f"{name}_"
        self._names[cls] = name
        return name


def describe(tp: Any, location: str = "") -> SchemaFragment | None:
    return TypeDescriber().describe(tp, location)


def _split_annotated(tp: Any) -> tuple[Any, str | None]:
    if typing.get_origin(tp) is typing.Annotated:
        base, *extras = typing.get_args(tp)
        description = next((extra for extra in extras if isinstance(extra, str)), None)
        return base, description
    return tp, None


def _literal_kind(values: list[Any]) -> str | None:
    kinds = {type(value) for value in values}
    if kinds == {bool}:
        return TYPE_BOOLEAN
    if kinds == {int}:
        return TYPE_INTEGER
    if kinds and kinds <= {int, float}:
        return TYPE_NUMBER
    if kinds == {str}:
        return TYPE_STRING
    return None


def _doc(cls: type) -> str | None:
    doc = cls.__doc__
    # dataclasses synthesise "Name(field: type, ...)" when no docstring is given
    if not doc or doc.startswith(f"{cls.__name__}("):
        return None
    return " ".join(doc.split())


def _is_subclass(value: Any, classinfo: Any) -> bool:
    try:
        return isinstance(value, type) and issubclass(value, classinfo)
    except TypeError:
        return False
