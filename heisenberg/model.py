"""
Serializable models with change tracking.

A model is a class whose fields are declared with heisenberg.fields:

    >>> class Address(SerializableObject):
    ...     street = fields.string_field()
    ...
    >>> class Person(SerializableObject):
    ...     root_key = "person"
    ...
    ...     name = fields.string_field()
    ...     age = fields.number_field()
    ...     address = fields.field(Address)
    ...     nicknames = fields.string_list()
    ...
    >>> person = Person.deserialize({"name": "Ada", "age": "36"})
    >>> person.age
    36
    >>> person.object_state.is_dirty
    False
    >>> person.name = "Ada Lovelace"
    >>> person.object_state.is_dirty
    True
    >>> person.to_wrapped_json()
    '{"person": {"name": "Ada Lovelace", "age": 36, "nicknames": []}}'
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, ClassVar, Dict, Optional

from heisenberg.array import SerializableArray
from heisenberg.errors import SchemaError
from heisenberg.fields import Field, FieldDescriptor
from heisenberg.serialize import from_json, to_json, to_object, to_wrapped_json
from heisenberg.state import ObjectState
from heisenberg.stypes import OMIT


class SerializableObject:
    """
    Base class for JSON-serializable models.

    Class attributes:
        root_key: Envelope key used by to_wrapped_json() and by response
            binding, or None for unwrapped payloads.

    Every instance owns an ObjectState. A fresh instance is new and
    loading; deserialize() makes it loaded; after that, the first field
    assignment that changes a value makes it dirty.
    """

    root_key: ClassVar[Optional[str]] = None
    _fields: ClassVar[Dict[str, Field]] = {}

    __hash__ = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        collected: Dict[str, Field] = {}
        for klass in reversed(cls.__mro__):
            for name, attr in vars(klass).items():
                if isinstance(attr, Field):
                    collected[name] = attr
                elif name in collected:
                    del collected[name]

        for name in collected:
            if name.startswith("_") or hasattr(SerializableObject, name):
                raise SchemaError(f"{cls.__name__}.{name} cannot be used as a field name")

        cls._fields = collected

    def __init__(self, **values: Any):
        self._local_data: Dict[str, Any] = {}
        self._object_state = ObjectState()

        for name, descriptor in self.fields().items():
            if descriptor.is_list:
                array = SerializableArray(type=descriptor.type)
                self._local_data[name] = array
                self._object_state.attach_child(array.object_state)

        self.set_properties(**values)

    def __repr__(self) -> str:
        values = ", ".join(
            f"{name}={value!r}"
            for name, value in self._local_data.items()
            if value is not None
        )
        return f"{type(self).__name__}({values})"

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(
            _same(getattr(self, name), getattr(other, name))
            for name in self.fields()
        )

    # -------------------------------------------------------------------------
    # Class API
    # -------------------------------------------------------------------------

    @classmethod
    def fields(cls) -> Dict[str, FieldDescriptor]:
        """Declared fields, in declaration order."""
        return {name: declared.descriptor for name, declared in cls._fields.items()}

    @classmethod
    def create(cls, **values: Any):
        return cls(**values)

    @classmethod
    def deserialize(cls, raw: Mapping, instance: Optional[SerializableObject] = None):
        """Populate instance (or a new instance) from a raw JSON object."""
        return from_json(raw, cls, instance)

    @classmethod
    def serialize(cls, value: Optional[SerializableObject], include_transient: bool = False) -> Any:
        if value is None:
            return OMIT
        object_type = type(value) if isinstance(value, cls) else cls
        return to_object(object_type, value, include_transient)

    # -------------------------------------------------------------------------
    # Field access
    # -------------------------------------------------------------------------

    @property
    def object_state(self) -> ObjectState:
        return self._object_state

    def get(self, path: str) -> Any:
        """
        Read a dotted attribute path, e.g. "address.street".

        A None link along the path yields None.
        """
        target: Any = self
        for part in path.split("."):
            if target is None:
                return None
            target = getattr(target, part)
        return target

    def set(self, path: str, value: Any) -> None:
        """Assign a dotted attribute path, e.g. "nicknames.content"."""
        head, _, last = path.rpartition(".")
        target = self.get(head) if head else self
        if target is None:
            raise AttributeError(f"Cannot set {path!r}: {head!r} is None")
        setattr(target, last, value)

    def set_properties(self, **values: Any):
        for path, value in values.items():
            self.set(path, value)
        return self

    def _assign(self, name: str, descriptor: FieldDescriptor, value: Any) -> None:
        previous = self._local_data.get(name)

        if descriptor.is_list:
            value = _as_array(name, descriptor, value)
        elif descriptor.is_model:
            if value is not None and not isinstance(value, descriptor.type):
                raise SchemaError(
                    f"Object for property {name!r} cannot be set to {value!r}, "
                    f"expected type {descriptor.type.__name__} instead"
                )
        else:
            value = descriptor.type.deserialize(value)

        if self._object_state.is_loaded and not _same(previous, value):
            self._object_state.mark_dirty_once()

        if value is not None and value is not previous and (descriptor.is_list or descriptor.is_model):
            self._object_state.attach_child(value.object_state)

        self._local_data[name] = value

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_object(self, include_transient: bool = False) -> dict:
        """
        Serialize to a new plain dict.

        Args:
            include_transient: Also serialize fields declared transient.
        """
        return to_object(type(self), self, include_transient)

    def to_json(self) -> str:
        return to_json(type(self), self)

    def to_wrapped_json(self) -> str:
        return to_wrapped_json(type(self), self)

    def copy(self):
        """
        Deep copy, transient fields included.

        The copy has its own state: loaded and not dirty, whatever the
        state of the original.
        """
        object_type = type(self)
        return from_json(self.to_object(include_transient=True), object_type, object_type())

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return self.copy()


def _same(a: Any, b: Any) -> bool:
    return a is b or a == b


def _as_array(name: str, descriptor: FieldDescriptor, value: Any) -> SerializableArray:
    if isinstance(value, SerializableArray) and value.type is descriptor.type:
        return value
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        raise SchemaError(
            f"Object for property {name!r} cannot be set to {value!r}, "
            "expected an iterable instead"
        )
    return SerializableArray(type=descriptor.type, content=value)
