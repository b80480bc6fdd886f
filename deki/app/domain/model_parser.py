"""Schema-driven normalization of XML-shaped JSON payloads.

A schema is an ordered sequence of ``PropertyRule`` (optionally wrapped in a
``Schema`` with a pre-processor). Each rule reads a value at a key path,
optionally coerces it to a list, converts it and stores it under an output
name. Absent source values are left out of the result, never set to ``None``.

Transforms are one of:

* ``Primitive(name)``: ``boolean``, ``number``, ``date`` or ``apiDate``
* ``Nested(schema)``: recurse into another schema
* ``Function(fn)``: any unary callable

Plain strings, schemas, rule lists and callables are accepted as shorthand.
``lazy(lambda: SCHEMA)`` references a schema by handle so schemas can embed
themselves or each other.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Mapping, Sequence, Union

from deki.app.errors import SchemaError

TEXT_KEY = "#text"


class _Absent:
    def __repr__(self) -> str:
        return "<absent>"


ABSENT = _Absent()


# ---- primitives ----

def to_boolean(value: Any) -> bool:
    return value is True or value in ("true", "True")


# ASCII digits only; int() and float() would also take other scripts' digits.
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_RADIX = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")
_INFINITY = re.compile(r"[+-]?Infinity")


def to_number(value: Any) -> int | float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str) or value == "":
        return None
    text = value.strip()
    if not text:
        return 0
    if _RADIX.fullmatch(text):
        return int(text, 0)
    if _DECIMAL.fullmatch(text):
        try:
            return int(text)
        except ValueError:
            return float(text)
    if _INFINITY.fullmatch(text):
        return float(text.replace("Infinity", "inf"))
    raise SchemaError(f"Failed converting {value!r} to a number")


def to_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
        try:
            return parsedate_to_datetime(value)
        except (TypeError, ValueError):
            pass
    raise SchemaError(f"Failed converting {value!r} to a date")


_API_DATE = re.compile(r"[0-9]{8}|[0-9]{14}")
_API_DATE_PARTS = ((0, 4), (4, 6), (6, 8), (8, 10), (10, 12), (12, 14))


def to_api_date(value: Any) -> datetime:
    """Parse ``YYYYMMDD`` or ``YYYYMMDDhhmmss``."""
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not _API_DATE.fullmatch(value):
        raise SchemaError(
            "Failed converting an API date: the raw value must be a string of digits and of length 8 or 14"
        )
    # Wire months are 1-based, as are datetime's.
    parts = [int(value[start:end]) for start, end in _API_DATE_PARTS if end <= len(value)]
    try:
        return datetime(*parts)
    except ValueError as exc:
        raise SchemaError(f"Failed converting an API date: {exc}") from exc


PRIMITIVES: dict[str, Callable[[Any], Any]] = {
    "boolean": to_boolean,
    "number": to_number,
    "date": to_date,
    "apiDate": to_api_date,
}


# ---- schema vocabulary ----

class Transform:
    """Base of the transform variants."""


@dataclass(frozen=True)
class Primitive(Transform):
    name: str


@dataclass(frozen=True)
class Nested(Transform):
    schema: "SchemaLike"


@dataclass(frozen=True)
class Function(Transform):
    fn: Callable[[Any], Any]


@dataclass(frozen=True)
class PropertyRule:
    """How to extract, coerce and rename one field.

    ``field`` is a key or a key path; a trailing ``"#text"`` returns the parent
    when it is already a plain string. ``name`` defaults to the last path key
    (ignoring ``"#text"``). ``construct_transform`` receives the raw value (or
    ``None`` when absent) and returns the transform to use, overriding
    ``transform``.
    """

    field: Union[str, Sequence[str]]
    name: str | None = None
    is_array: bool = False
    transform: "TransformLike" = None
    construct_transform: Callable[[Any], "TransformLike"] | None = None

    def __post_init__(self) -> None:
        path = (self.field,) if isinstance(self.field, str) else tuple(self.field)
        if not path or not all(isinstance(key, str) and key for key in path):
            raise SchemaError(f"invalid field path in parsing model: {self.field!r}")
        object.__setattr__(self, "field", path)

    @property
    def path(self) -> tuple[str, ...]:
        return self.field  # type: ignore[return-value]

    @property
    def output_name(self) -> str:
        if self.name:
            return self.name
        keys = [key for key in self.path if key != TEXT_KEY]
        return keys[-1] if keys else TEXT_KEY


@dataclass(frozen=True)
class Schema:
    rules: tuple[PropertyRule, ...]
    pre_processor: Callable[[Any], Any] | None = None

    def __post_init__(self) -> None:
        rules = tuple(self.rules)
        for rule in rules:
            if not isinstance(rule, PropertyRule):
                raise SchemaError(f"schema entries must be PropertyRule, got {type(rule).__name__}")
        object.__setattr__(self, "rules", rules)


@dataclass(frozen=True)
class SchemaRef:
    """Deferred schema handle; resolved each time it is applied."""

    getter: Callable[[], "SchemaLike"]


def lazy(getter: Callable[[], "SchemaLike"]) -> SchemaRef:
    return SchemaRef(getter)


SchemaLike = Union[Schema, SchemaRef, Sequence[PropertyRule]]
TransformLike = Union[Transform, str, SchemaLike, Callable[[Any], Any], None]


def is_object(value: Any) -> bool:
    """Predicate for construct selectors: the raw value is object-shaped."""
    return isinstance(value, Mapping)


def as_schema(value: Any) -> Schema:
    while isinstance(value, SchemaRef):
        value = value.getter()
    if isinstance(value, Schema):
        return value
    if isinstance(value, (list, tuple)):
        return Schema(tuple(value))
    raise SchemaError(f"invalid schema: {value!r}")


def as_transform(value: TransformLike) -> Transform | None:
    if value is None or isinstance(value, Transform):
        return value
    if isinstance(value, str):
        return Primitive(value)
    if isinstance(value, (Schema, SchemaRef, list, tuple)):
        return Nested(value)
    if callable(value):
        return Function(value)
    raise SchemaError(f"Invalid value used for the transform parameter: {value!r}")


# ---- interpreter ----

def get_value(data: Any, path: Sequence[str]) -> Any:
    current = data
    for index, key in enumerate(path):
        if not isinstance(current, Mapping) or key not in current:
            return ABSENT
        value = current[key]
        if tuple(path[index + 1:]) == (TEXT_KEY,) and isinstance(value, str):
            return value
        current = value
    return current


def force_list(value: Any) -> list[Any]:
    if value is ABSENT or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def transform_value(value: Any, transform: Transform) -> Any:
    if isinstance(transform, Primitive):
        converter = PRIMITIVES.get(transform.name)
        if converter is None:
            raise SchemaError(f"unknown primitive transform: {transform.name!r}")
        return converter(value)
    if isinstance(transform, Nested):
        return apply_schema(transform.schema, value)
    if isinstance(transform, Function):
        return transform.fn(value)
    raise SchemaError(f"Invalid value used for the transform parameter while trying to convert {value!r}")


def parse_property(data: Mapping[str, Any], rule: PropertyRule) -> Any:
    value = get_value(data, rule.path)
    transform = as_transform(rule.transform)
    if rule.construct_transform is not None:
        transform = as_transform(rule.construct_transform(None if value is ABSENT else value))
    if rule.is_array:
        value = force_list(value)
    if value is ABSENT:
        if isinstance(transform, Function):
            result = transform.fn(None)
            return ABSENT if result is None else result
        return ABSENT
    if transform is None:
        return value
    if rule.is_array:
        return [transform_value(item, transform) for item in value]
    return transform_value(value, transform)


def apply_schema(schema: SchemaLike, data: Any) -> dict[str, Any]:
    resolved = as_schema(schema)
    if isinstance(data, str) and data == "":
        data = {}
    if resolved.pre_processor is not None:
        data = resolved.pre_processor(data)
    if not isinstance(data, Mapping):
        raise SchemaError(f"Cannot parse a non-object: {data!r}")
    parsed: dict[str, Any] = {}
    seen: set[str] = set()
    for rule in resolved.rules:
        name = rule.output_name
        if name in seen:
            raise SchemaError(f'Duplicate "{name}" in parsing model')
        seen.add(name)
        value = parse_property(data, rule)
        if value is not ABSENT:
            parsed[name] = value
    return parsed


class ModelParser:
    """Callable parser bound to one schema: ``ModelParser(USER_SCHEMA)(payload)``."""

    def __init__(self, schema: SchemaLike) -> None:
        self._schema = schema

    def __call__(self, data: Any) -> dict[str, Any]:
        return apply_schema(self._schema, data)

    parse = __call__
