"""
Typed, dirty-tracking sequences.

A SerializableArray holds elements of exactly one type, either a primitive
codec or a SerializableObject subclass. The type is bound once; rebinding
it to something else is a schema error.

Once an array has been loaded through deserialize(), the first structural
change to its contents (append, insert, delete, replace, sort, ...) marks
it dirty, and it stays dirty until the next deserialize().
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, MutableSequence
from typing import Any, Callable, List, Optional

from heisenberg.errors import SchemaError
from heisenberg.fields import check_type, is_model_type
from heisenberg.state import ObjectState
from heisenberg.stypes import OMIT, json_default

logger = logging.getLogger(__name__)


class SerializableArray(MutableSequence):
    """
    Ordered, homogeneous collection with the same serialization contract
    as SerializableObject.

    Example:
        >>> tags = SerializableArray(type=Type.String).deserialize(["a", "b"])
        >>> tags.append("c")
        >>> tags.object_state.is_dirty
        True
        >>> tags.to_object()
        ['a', 'b', 'c']
    """

    __hash__ = None

    def __init__(self, type: Any = None, content: Optional[Iterable] = None):
        self._object_state = ObjectState()
        self._type = None
        self._content: List[Any] = []
        if type is not None:
            self.type = type
        if content is not None:
            self._content = list(content)
            self._adopt(self._content)

    def __repr__(self) -> str:
        name = self._type.__name__ if self._type is not None else None
        return f"SerializableArray(type={name}, content={self._content!r})"

    # -------------------------------------------------------------------------
    # Type binding
    # -------------------------------------------------------------------------

    @property
    def type(self) -> Any:
        return self._type

    @type.setter
    def type(self, value: Any) -> None:
        if self._type is not None:
            if value is self._type:
                return
            raise SchemaError(
                f"Cannot change already-specified type of {self._type.__name__} "
                f"for {self!r}"
            )
        self._type = check_type(value)

    def _require_type(self) -> Any:
        if self._type is None:
            raise SchemaError(f"Unspecified type for array instance {self!r}")
        return self._type

    @property
    def object_state(self) -> ObjectState:
        return self._object_state

    # -------------------------------------------------------------------------
    # Change tracking
    # -------------------------------------------------------------------------

    def _adopt(self, items: Iterable) -> None:
        if not is_model_type(self._type):
            return
        for item in items:
            if item is not None and hasattr(item, "object_state"):
                self._object_state.attach_child(item.object_state)

    def _content_changed(self) -> None:
        if self._object_state.is_loaded:
            self._object_state.mark_dirty_once()

    # -------------------------------------------------------------------------
    # MutableSequence protocol
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._content)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return SerializableArray(type=self._type, content=self._content[index])
        return self._content[index]

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            value = list(value)
            self._adopt(value)
        else:
            self._adopt([value])
        self._content[index] = value
        self._content_changed()

    def __delitem__(self, index) -> None:
        del self._content[index]
        self._content_changed()

    def insert(self, index: int, value: Any) -> None:
        self._adopt([value])
        self._content.insert(index, value)
        self._content_changed()

    def extend(self, values: Iterable) -> None:
        values = list(values)
        if not values:
            return
        self._adopt(values)
        self._content.extend(values)
        self._content_changed()

    def clear(self) -> None:
        if not self._content:
            return
        self._content.clear()
        self._content_changed()

    def sort(self, *, key: Optional[Callable] = None, reverse: bool = False) -> None:
        before = list(self._content)
        self._content.sort(key=key, reverse=reverse)
        if self._content != before:
            self._content_changed()

    @property
    def content(self) -> List[Any]:
        """A shallow copy of the elements. Assign to replace them all."""
        return list(self._content)

    @content.setter
    def content(self, values: Iterable) -> None:
        values = list(values)
        changed = values != self._content
        self._adopt(values)
        self._content = values
        if changed:
            self._content_changed()

    # -------------------------------------------------------------------------
    # Equality and search
    # -------------------------------------------------------------------------

    def index_of(self, value: Any, start_at: int = 0) -> int:
        """
        Position of the first element equal to value, or -1.

        A negative start_at counts back from the end.
        """
        length = len(self._content)
        if start_at < 0:
            start_at = max(start_at + length, 0)
        for index in range(start_at, length):
            if self._content[index] == value:
                return index
        return -1

    def is_equal(self, other: Any) -> bool:
        """True if other has the same length and pairwise-equal elements."""
        if other is None:
            return False
        if isinstance(other, (str, bytes, Mapping)) or not isinstance(other, Iterable):
            return False
        other = list(other)
        if len(self._content) != len(other):
            return False
        return all(mine == theirs for mine, theirs in zip(self._content, other))

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, (SerializableArray, list, tuple)):
            return self.is_equal(other)
        return NotImplemented

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def deserialize(self, raw: Optional[Iterable]) -> SerializableArray:
        """
        Replace the contents with the deserialized raw elements.

        None clears the array. The array is loaded afterwards, and changes
        made from here on mark it dirty.
        """
        element_type = self._require_type()
        state = self._object_state
        state.begin_load()

        items: List[Any] = []
        if raw is not None:
            model = is_model_type(element_type)
            for raw_item in raw:
                if model and raw_item is None:
                    item = None
                elif model:
                    item = element_type.deserialize(raw_item, element_type())
                    state.attach_child(item.object_state)
                else:
                    item = element_type.deserialize(raw_item)
                items.append(item)

        self._content = items
        state.mark_loaded()
        logger.debug("Deserialized %d %s element(s)", len(items), element_type.__name__)
        return self

    def serialize(self, *, include_transient: bool = False) -> List[Any]:
        """Serialize every element; an empty array serializes to []."""
        element_type = self._require_type()
        result = []
        for item in self._content:
            value = element_type.serialize(item, include_transient=include_transient)
            result.append(None if value is OMIT else value)
        return result

    def to_object(self, *, include_transient: bool = False) -> List[Any]:
        return self.serialize(include_transient=include_transient)

    def to_json(self) -> str:
        return json.dumps(self.to_object(), default=json_default)

    def to_wrapped_json(self) -> str:
        """Like to_json(), wrapped under the element type's root_key if it has one."""
        obj: Any = self.to_object()
        root_key = getattr(self._require_type(), "root_key", None)
        if root_key is not None:
            obj = {root_key: obj}
        return json.dumps(obj, default=json_default)

    def copy(self) -> SerializableArray:
        """Deep copy, transient fields of model elements included."""
        clone = SerializableArray(type=self._require_type())
        return clone.deserialize(self.to_object(include_transient=True))

    __copy__ = copy
