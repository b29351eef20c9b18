"""
Primitive codec definitions for the heisenberg library.

This module defines the scalar codecs a model field can be declared with.
Each SerializableType subclass handles one family of JSON values:

- BooleanType: lenient booleans ("yes", "t", 1, ...)
- DateType: ISO-8601 strings <-> timezone-aware datetimes
- NumberType: ints and floats, with numeric coercion of strings
- RawType: untouched passthrough
- StringType: anything coerced to str

Each codec provides two class methods:
- serialize(): typed value -> JSON-compatible value, or OMIT
- deserialize(): raw JSON value -> typed value, or None

OMIT is returned by serialize() when the value should not appear in the
output at all (the key is dropped from the enclosing object). None from
deserialize() is the canonical "absent" typed value.

Codecs are also addressable by name through the `Type` namespace:

    >>> from heisenberg.stypes import Type
    >>> Type.Boolean.deserialize("yes")
    True
"""

from __future__ import annotations

import math
import re
from collections.abc import Sized
from datetime import date, datetime, timezone
from typing import Any, ClassVar

from dateutil import parser as date_parser


# =============================================================================
# Sentinels and helpers
# =============================================================================


class _Omit:
    """Marker returned by a serializer for values that must not be emitted."""

    _instance: ClassVar[_Omit | None] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "OMIT"

    def __bool__(self) -> bool:
        return False


OMIT = _Omit()

_TRUTHY_STRING = re.compile(r"^(true|yes|y|t|1)$", re.IGNORECASE)


def is_none(value: Any) -> bool:
    """True for None and OMIT."""
    return value is None or value is OMIT


def is_empty(value: Any) -> bool:
    """
    True for None, OMIT and zero-length sized values ("", [], {}).

    Numbers, including 0, are never empty.
    """
    if is_none(value):
        return True
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def _to_number(raw: Any) -> int | float:
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, (int, float)):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


# =============================================================================
# Base Class
# =============================================================================


class SerializableType:
    """
    Abstract base class for primitive codecs.

    Subclasses are used as classes, never instantiated. Model classes
    expose the same serialize/deserialize class-method pair, so a field
    type is always "something with serialize and deserialize".
    """

    name: ClassVar[str] = "type"

    @classmethod
    def serialize(cls, value: Any, include_transient: bool = False) -> Any:
        """Convert a typed value to its JSON form, or OMIT."""
        raise NotImplementedError

    @classmethod
    def deserialize(cls, raw: Any) -> Any:
        """Convert a raw JSON value to its typed form, or None."""
        raise NotImplementedError


# =============================================================================
# Primitive Types
# =============================================================================


class BooleanType(SerializableType):
    """
    Codec for booleans.

    Deserialization is lenient: the strings true/yes/y/t/1 (any case) and
    the number 1 are true; any other string, number or value is false.
    """

    name: ClassVar[str] = "boolean"

    @classmethod
    def serialize(cls, value: Any, include_transient: bool = False) -> Any:
        return OMIT if is_none(value) else value

    @classmethod
    def deserialize(cls, raw: Any) -> bool | None:
        if is_none(raw):
            return None
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str):
            return _TRUTHY_STRING.match(raw) is not None
        if isinstance(raw, (int, float)):
            return raw == 1
        return False


class DateType(SerializableType):
    """
    Codec for dates.

    Datetimes serialize to ISO-8601 with a UTC offset; naive datetimes are
    taken to be local time. Numbers deserialize as epoch milliseconds.
    Blank or unparseable input deserializes to None.
    """

    name: ClassVar[str] = "date"

    @classmethod
    def serialize(cls, value: Any, include_transient: bool = False) -> Any:
        if is_none(value):
            return OMIT
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.astimezone()
            return value.isoformat()
        if isinstance(value, date):
            return value.isoformat()
        return cls.serialize(cls.deserialize(value))

    @classmethod
    def deserialize(cls, raw: Any) -> datetime | date | None:
        if is_none(raw):
            return None
        if isinstance(raw, (datetime, date)):
            return raw
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            try:
                return datetime.fromtimestamp(raw / 1000, tz=timezone.utc)
            except (ValueError, OverflowError, OSError):
                return None
        text = str(raw).strip()
        if not text:
            return None
        try:
            return date_parser.parse(text)
        except (ValueError, OverflowError):
            return None


class NumberType(SerializableType):
    """
    Codec for numbers.

    Empty values ("" and other zero-length values as well as None) are
    absent in both directions; 0 is a number and is emitted. Strings are
    coerced, with unparseable text becoming NaN; NaN and the infinities
    are not valid JSON and serialize as absent.
    """

    name: ClassVar[str] = "number"

    @classmethod
    def serialize(cls, value: Any, include_transient: bool = False) -> Any:
        if is_empty(value):
            return OMIT
        if isinstance(value, float) and not math.isfinite(value):
            return OMIT
        return value

    @classmethod
    def deserialize(cls, raw: Any) -> int | float | None:
        return None if is_empty(raw) else _to_number(raw)


class RawType(SerializableType):
    """Identity codec. None passes through in both directions."""

    name: ClassVar[str] = "raw"

    @classmethod
    def serialize(cls, value: Any, include_transient: bool = False) -> Any:
        return value

    @classmethod
    def deserialize(cls, raw: Any) -> Any:
        return raw


class StringType(SerializableType):
    """Codec for strings. Non-string raw values are converted with str()."""

    name: ClassVar[str] = "string"

    @classmethod
    def serialize(cls, value: Any, include_transient: bool = False) -> Any:
        return OMIT if is_none(value) else value

    @classmethod
    def deserialize(cls, raw: Any) -> str | None:
        if is_none(raw):
            return None
        if isinstance(raw, bool):
            return "true" if raw else "false"
        return str(raw)


# =============================================================================
# Registry
# =============================================================================

_TYPE_REGISTRY: dict[str, type[SerializableType]] = {
    codec.name: codec
    for codec in (BooleanType, DateType, NumberType, RawType, StringType)
}


def is_primitive_type(typ: Any) -> bool:
    """True if typ is one of the registered primitive codecs."""
    return isinstance(typ, type) and typ in _TYPE_REGISTRY.values()


def json_default(value: Any) -> Any:
    """`default=` hook for json.dumps: dates become ISO-8601 strings."""
    if isinstance(value, (datetime, date)):
        return DateType.serialize(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def get_type(name: str) -> type[SerializableType]:
    """
    Look up a primitive codec by name.

    Raises:
        KeyError: If no codec is registered under that name.
    """
    return _TYPE_REGISTRY[name]


class Type:
    """Namespace giving the primitive codecs their short names."""

    Boolean = BooleanType
    Date = DateType
    Number = NumberType
    Raw = RawType
    String = StringType
