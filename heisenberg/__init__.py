"""
heisenberg - typed JSON models with change tracking.

This library binds declaratively typed model classes to their JSON wire
representation and to the HTTP requests that produce them:

- Fields are declared with typed codecs (boolean, number, string, date,
  raw) or with other model classes, as scalars or as lists
- Raw JSON is converted to typed values on the way in and back on the way
  out, with transient fields kept out of normal serialization
- Every model and model array carries an ObjectState telling whether it is
  new, loading, loaded, errored or dirty; dirtiness rolls up through
  nested models and lists
- Payloads can be wrapped in (and unwrapped from) a per-type root key
- Responses of HTTP requests are bound to model instances that exist
  before the response arrives

Basic Usage:
    >>> from heisenberg import SerializableObject, fields
    >>>
    >>> class Book(SerializableObject):
    ...     root_key = "book"
    ...
    ...     title = fields.string_field()
    ...     published = fields.date_field()
    ...     tags = fields.string_list()
    ...     draft_notes = fields.string_field(transient=True)
    >>>
    >>> book = Book.deserialize({"title": "Dune", "published": "1965-08-01T00:00:00+00:00"})
    >>> book.object_state.is_loaded, book.object_state.is_dirty
    (True, False)
    >>> book.tags.append("sci-fi")
    >>> book.object_state.is_dirty
    True
    >>> book.to_object()
    {'title': 'Dune', 'published': '1965-08-01T00:00:00+00:00', 'tags': ['sci-fi']}

Copying:
    >>> clone = book.copy()          # deep copy, transient fields included
    >>> clone == book, clone.object_state.is_dirty
    (True, False)

Requests:
    >>> from heisenberg import Resource
    >>>
    >>> class BookResource(Resource):
    ...     @classmethod
    ...     def find(cls, book_id):
    ...         request = cls.method("GET").url("/books/{id}", {"id": book_id}).produces(Book)
    ...         return cls.execute_request(request)
    >>>
    >>> handle = BookResource.find(1)   # inside a running event loop
    >>> book = await handle
"""

from heisenberg import fields
from heisenberg.array import SerializableArray
from heisenberg.errors import (
    EmptyResponseError,
    HttpError,
    NotFoundError,
    ResponseError,
    SchemaError,
)
from heisenberg.executor import DEFAULT_CONFIG, Executor, ExecutorConfig, HttpxExecutor
from heisenberg.fields import FieldDescriptor
from heisenberg.model import SerializableObject
from heisenberg.request import QUERY_PARAM_EMPTY_VALUE, Request, RequestDescriptor
from heisenberg.resource import Resource, ResponseHandle
from heisenberg.serialize import (
    from_json,
    to_json,
    to_object,
    to_wrapped_json,
    unwrap_root_object,
    wrap_root_object,
)
from heisenberg.state import ObjectState
from heisenberg.stypes import OMIT, SerializableType, Type


__all__ = [
    # Models
    "SerializableObject",
    "SerializableArray",
    "ObjectState",
    "fields",
    "FieldDescriptor",
    # Types
    "SerializableType",
    "Type",
    "OMIT",
    # Serialization
    "from_json",
    "to_object",
    "to_json",
    "to_wrapped_json",
    "wrap_root_object",
    "unwrap_root_object",
    # Requests
    "Request",
    "RequestDescriptor",
    "QUERY_PARAM_EMPTY_VALUE",
    "Resource",
    "ResponseHandle",
    "Executor",
    "ExecutorConfig",
    "HttpxExecutor",
    "DEFAULT_CONFIG",
    # Errors
    "SchemaError",
    "HttpError",
    "ResponseError",
    "EmptyResponseError",
    "NotFoundError",
]
