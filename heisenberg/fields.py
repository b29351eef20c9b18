"""
Field declarations for serializable models.

A model declares its fields as class attributes:

    >>> from heisenberg import SerializableObject, fields
    >>> class Author(SerializableObject):
    ...     name = fields.string_field()
    ...     born = fields.date_field()
    ...     aliases = fields.string_list()
    ...     notes = fields.string_field(transient=True)

Each declaration is a `Field`, a data descriptor that stores the value in
the owning instance and routes every assignment through the owner's
validating setter. The immutable metadata (type, list-ness, transience)
lives in a `FieldDescriptor`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from heisenberg.errors import SchemaError
from heisenberg.stypes import SerializableType, Type

if TYPE_CHECKING:
    from heisenberg.model import SerializableObject


class FieldDescriptor(BaseModel):
    """
    Metadata for one declared field.

    Attributes:
        type: A SerializableType codec class or a SerializableObject subclass.
        is_list: True if the field holds a SerializableArray of `type`.
        is_transient: True if the field is left out of normal serialization.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Any
    is_list: bool = False
    is_transient: bool = False

    @property
    def is_model(self) -> bool:
        return is_model_type(self.type)


def is_model_type(typ: Any) -> bool:
    """True if typ is a SerializableObject subclass."""
    from heisenberg.model import SerializableObject

    return isinstance(typ, type) and issubclass(typ, SerializableObject)


def check_type(typ: Any) -> Any:
    """
    Validate a field or array element type.

    Raises:
        SchemaError: If typ is neither a codec nor a model class.
    """
    if isinstance(typ, type) and issubclass(typ, SerializableType) and typ is not SerializableType:
        return typ
    if is_model_type(typ):
        return typ
    raise SchemaError(f"Could not find a serializer for type {typ!r}")


class Field:
    """
    Data descriptor for a declared model field.

    The type may be given as a zero-argument callable returning it (for
    example `lambda: TreeNode`), so a model can declare fields of its own
    type or of a model defined further down. Such a type is resolved and
    checked the first time the field's descriptor is needed.
    """

    def __init__(self, typ: Any, *, is_list: bool = False, transient: bool = False):
        self._type = typ
        self._is_list = is_list
        self._transient = transient
        self._descriptor: FieldDescriptor | None = None
        self.name: str | None = None
        if not _is_deferred(typ):
            self._descriptor = self._resolve()

    def __repr__(self) -> str:
        kind = "list" if self._is_list else "field"
        typ = self._descriptor.type if self._descriptor is not None else self._type
        return f"<{kind} {self.name!r} of {getattr(typ, '__name__', typ)!r}>"

    def _resolve(self) -> FieldDescriptor:
        typ = self._type() if _is_deferred(self._type) else self._type
        return FieldDescriptor(
            type=check_type(typ),
            is_list=self._is_list,
            is_transient=self._transient,
        )

    @property
    def descriptor(self) -> FieldDescriptor:
        if self._descriptor is None:
            self._descriptor = self._resolve()
        return self._descriptor

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: SerializableObject | None, owner: type) -> Any:
        if instance is None:
            return self
        return instance._local_data.get(self.name)

    def __set__(self, instance: SerializableObject, value: Any) -> None:
        instance._assign(self.name, self.descriptor, value)


def _is_deferred(typ: Any) -> bool:
    return callable(typ) and not isinstance(typ, type)


# =============================================================================
# Declarations
# =============================================================================


def field(typ: Any, *, transient: bool = False) -> Field:
    """
    Describe a scalar field of the specified type.

    Args:
        typ: A primitive codec (see heisenberg.stypes.Type), another
            SerializableObject subclass, or a zero-argument callable
            returning one.
        transient: If True, the field is not serialized unless transient
            fields are explicitly requested.
    """
    return Field(typ, is_list=False, transient=transient)


def list_field(typ: Any, *, transient: bool = False) -> Field:
    """Describe a list field whose elements are of the specified type."""
    return Field(typ, is_list=True, transient=transient)


def boolean_field(*, transient: bool = False) -> Field:
    return field(Type.Boolean, transient=transient)


def boolean_list(*, transient: bool = False) -> Field:
    return list_field(Type.Boolean, transient=transient)


def date_field(*, transient: bool = False) -> Field:
    return field(Type.Date, transient=transient)


def date_list(*, transient: bool = False) -> Field:
    return list_field(Type.Date, transient=transient)


def number_field(*, transient: bool = False) -> Field:
    return field(Type.Number, transient=transient)


def number_list(*, transient: bool = False) -> Field:
    return list_field(Type.Number, transient=transient)


def raw_field(*, transient: bool = False) -> Field:
    return field(Type.Raw, transient=transient)


def raw_list(*, transient: bool = False) -> Field:
    return list_field(Type.Raw, transient=transient)


def string_field(*, transient: bool = False) -> Field:
    return field(Type.String, transient=transient)


def string_list(*, transient: bool = False) -> Field:
    return list_field(Type.String, transient=transient)
