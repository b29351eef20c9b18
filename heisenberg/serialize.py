"""
Field-walking serialization for the heisenberg library.

This module contains the functions that convert between plain JSON values
and SerializableObject instances, including:
- Iteration over the declared fields of a model type
- Deserialization of a raw JSON object into a (possibly new) instance
- Serialization of an instance to a plain dict or a JSON string
- Root-key wrapping and unwrapping

The SerializableObject methods (to_object, to_json, deserialize, ...) are
thin delegates to these functions, so they can also be called with an
explicit type when the declared type differs from the instance's class.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Iterator, Optional, Tuple

from heisenberg.array import SerializableArray
from heisenberg.fields import FieldDescriptor
from heisenberg.stypes import OMIT, RawType, json_default

if TYPE_CHECKING:
    from heisenberg.model import SerializableObject

logger = logging.getLogger(__name__)


# =============================================================================
# Root wrapping
# =============================================================================


def unwrap_root_object(object_type: type, raw: Any) -> Any:
    """
    Remove the root-key envelope from a raw JSON value.

    Returns raw unchanged when object_type declares no root_key.
    """
    root_key = getattr(object_type, "root_key", None)
    if root_key is None or raw is None:
        return raw
    if not isinstance(raw, Mapping):
        raise TypeError(f"Cannot unwrap root key {root_key!r} from {type(raw).__name__}")
    return raw.get(root_key)


def wrap_root_object(object_type: type, obj: Any) -> Any:
    """
    Put obj inside a single-key envelope named after object_type's root_key.

    Returns obj unchanged when object_type declares no root_key.
    """
    root_key = getattr(object_type, "root_key", None)
    if root_key is None:
        return obj
    return {root_key: obj}


# =============================================================================
# Field iteration
# =============================================================================


def each_field_of(object_type: type) -> Iterator[Tuple[str, FieldDescriptor]]:
    """Yield (name, descriptor) for each declared field, in declaration order."""
    yield from object_type.fields().items()


# =============================================================================
# Deserialization
# =============================================================================


def from_json(
    raw: Mapping,
    object_type: type,
    object_instance: Optional[SerializableObject] = None,
) -> SerializableObject:
    """
    Populate an instance of object_type from a raw JSON object.

    Values are written straight into the instance, so loading never marks
    it dirty. Nested models and lists get their own states attached as
    children of the instance's state. The instance is loaded afterwards.

    Args:
        raw: The JSON object (a dict, as returned by json.loads()).
        object_type: The model type whose fields drive deserialization.
        object_instance: Instance to populate. A new one is created when
            omitted.

    Returns:
        The populated instance.

    Raises:
        TypeError: If raw is not a mapping.
    """
    if object_instance is None:
        object_instance = object_type()
    if not isinstance(raw, Mapping):
        raise TypeError(
            f"Cannot deserialize {type(raw).__name__} into {object_type.__name__}; "
            "expected a JSON object"
        )

    state = object_instance.object_state
    state.begin_load()
    local_data = object_instance._local_data

    for name, descriptor in each_field_of(object_type):
        raw_value = raw.get(name)

        if descriptor.is_list:
            value = SerializableArray(type=descriptor.type).deserialize(raw_value)
            state.attach_child(value.object_state)
        elif descriptor.is_model:
            if raw_value is None:
                value = None
            else:
                value = descriptor.type.deserialize(raw_value, descriptor.type())
                value.object_state.mark_not_new()
                state.attach_child(value.object_state)
        else:
            value = descriptor.type.deserialize(raw_value)

        local_data[name] = value

    state.mark_loaded()
    logger.debug("Deserialized %s", object_type.__name__)
    return object_instance


# =============================================================================
# Serialization
# =============================================================================


def to_object(
    object_type: type,
    object_instance: SerializableObject,
    include_transient: bool = False,
) -> dict:
    """
    Serialize an instance to a new plain dict.

    Absent scalar values are left out, except for raw fields, which are
    emitted as-is. List fields are always present. Transient fields are
    left out unless include_transient is set.
    """
    obj = {}
    for name, descriptor in each_field_of(object_type):
        if descriptor.is_transient and not include_transient:
            continue

        value = getattr(object_instance, name)
        if descriptor.is_list:
            if value is not None:
                obj[name] = value.serialize(include_transient=include_transient)
            continue
        if value is None and descriptor.type is not RawType:
            continue

        serialized = descriptor.type.serialize(value, include_transient=include_transient)
        if serialized is not OMIT:
            obj[name] = serialized
    return obj


def to_json(object_type: type, object_instance: SerializableObject) -> str:
    """Serialize an instance to a JSON string."""
    return json.dumps(to_object(object_type, object_instance), default=json_default)


def to_wrapped_json(object_type: type, object_instance: SerializableObject) -> str:
    """Serialize an instance to a JSON string, root-wrapped if the type has a root_key."""
    obj = wrap_root_object(object_type, to_object(object_type, object_instance))
    return json.dumps(obj, default=json_default)
