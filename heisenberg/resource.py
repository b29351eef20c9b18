"""
Binding of HTTP responses to models.

A Resource groups the requests of one remote resource:

    >>> class BookResource(Resource):
    ...     @classmethod
    ...     def find(cls, book_id):
    ...         request = cls.method("GET").url("/books/{id}", {"id": book_id}).produces(Book)
    ...         return cls.execute_request(request)
    ...
    >>> handle = BookResource.find(7)
    >>> handle.value.object_state.is_loading     # usable right away
    True
    >>> book = await handle                      # the same instance, loaded

execute_request() returns immediately with a ResponseHandle holding the
target instance, which is populated in place when the response arrives.
Awaiting the handle yields that instance (or None for a null response),
or raises a ResponseError. On failure the instance's state is also marked
as errored, for callers that only look at the instance.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
from typing import Any, Callable, ClassVar, Optional, Union

from heisenberg.array import SerializableArray
from heisenberg.errors import EmptyResponseError, HttpError, NotFoundError, ResponseError, SchemaError
from heisenberg.executor import Executor, HttpxExecutor
from heisenberg.fields import is_model_type
from heisenberg.model import SerializableObject
from heisenberg.request import Request
from heisenberg.serialize import from_json, unwrap_root_object
from heisenberg.stypes import is_primitive_type

logger = logging.getLogger(__name__)

Target = Union[SerializableObject, SerializableArray]

_METHODS = frozenset({"DELETE", "GET", "POST", "PUT"})

_default_executor: Optional[HttpxExecutor] = None


def default_executor() -> HttpxExecutor:
    """The process-wide executor used when neither the call nor the resource names one."""
    global _default_executor
    if _default_executor is None:
        _default_executor = HttpxExecutor()
    return _default_executor


class ResponseHandle:
    """
    The target instance of a request together with its completion.

    Attributes:
        value: The instance being populated.
        future: Task resolving to the populated instance, or None.
    """

    def __init__(self, value: Target, future: asyncio.Future):
        self.value = value
        self.future = future

    def get_response_value(self) -> Target:
        return self.value

    def get_response_promise(self) -> asyncio.Future:
        return self.future

    def __await__(self):
        return self.future.__await__()


# =============================================================================
# Deserialization steps
# =============================================================================


def _deserialize_primitive(codec: Any) -> Callable[[SerializableObject, Any], Any]:
    def deserialize(holder: SerializableObject, raw: Any) -> Any:
        holder.object_state.mark_loaded()
        if raw is None:
            return None
        holder.value = codec.deserialize(raw)
        return holder

    return deserialize


def _deserialize_into(instance: SerializableObject, raw: Any) -> Any:
    if raw is None:
        instance.object_state.mark_loaded()
        return None
    return from_json(raw, type(instance), instance)


def _deserialize_into_list(array: SerializableArray, raw: Any) -> Any:
    if raw is None:
        array.object_state.mark_loaded()
        return None
    return array.deserialize(raw)


def _singleton(raw: Any) -> Any:
    if not raw:
        return None
    if len(raw) > 1:
        logger.warning("Expected a singleton list, got %d elements; using the first", len(raw))
    return raw[0]


def _deserialize_into_singleton(step: Callable[[Any, Any], Any]) -> Callable[[Any, Any], Any]:
    def deserialize(instance: Any, raw: Any) -> Any:
        return step(instance, _singleton(raw))

    return deserialize


def _classify(error: Exception) -> ResponseError:
    if isinstance(error, HttpError) and error.status == 404:
        return NotFoundError(f"{error.status_text} ({error.status})", error.response_text, status=404)

    title = f"{type(error).__name__}: {error}"
    body = "".join(traceback.format_exception(error))
    status = getattr(error, "status", None)
    if isinstance(error, EmptyResponseError):
        return EmptyResponseError(title, body, status)
    return ResponseError(title, body, status)


# =============================================================================
# Resource
# =============================================================================


class Resource:
    """
    Base class for groups of requests against one remote resource.

    Class attributes:
        executor: Executor used by execute_request(); the shared
            HttpxExecutor when None.
        global_error_handler: Called as handler(error, request) with the
            ResponseError of every failed request that has not opted out
            with Request.disable_global_error_handler(). The error is
            raised to the awaiting caller either way.
    """

    executor: ClassVar[Optional[Executor]] = None
    global_error_handler: ClassVar[Optional[Callable[[ResponseError, Request], Any]]] = None

    @classmethod
    def method(cls, method: str) -> Request:
        """
        Start a request for the given HTTP method.

        Raises:
            ValueError: For methods other than GET, POST, PUT and DELETE.
        """
        if method.upper() not in _METHODS:
            raise ValueError(f'Cannot create a request with method "{method}"')
        return Request(method)

    @classmethod
    def execute_request(cls, request: Request, executor: Optional[Executor] = None) -> ResponseHandle:
        """
        Send the request and bind its response to a new target instance.

        Must be called while an event loop is running.

        Raises:
            SchemaError: If the request declares no usable response type.
        """
        response_type = request.response_type
        if response_type is None:
            raise SchemaError(f"{request!r} does not declare a response type")
        primitive = is_primitive_type(response_type)
        if not primitive and not is_model_type(response_type):
            raise SchemaError(f"Unsupported response type {response_type!r}")

        instance: Target
        if request.response_is_list:
            instance = SerializableArray(type=response_type)
            deserialize = _deserialize_into_list
        elif primitive:
            instance = SerializableObject()
            deserialize = _deserialize_primitive(response_type)
        else:
            instance = response_type()
            deserialize = _deserialize_into

        if request.response_is_singleton_list:
            deserialize = _deserialize_into_singleton(deserialize)
        elif not request.response_is_list and not primitive:
            instance.object_state.mark_not_new()

        executor = executor or cls.executor or default_executor()
        coroutine = cls._complete(request, executor, instance, deserialize, unwrap=not primitive)
        future = asyncio.get_running_loop().create_task(coroutine)
        return ResponseHandle(instance, future)

    @classmethod
    async def _complete(
        cls,
        request: Request,
        executor: Executor,
        instance: Target,
        deserialize: Callable[[Any, Any], Any],
        unwrap: bool,
    ) -> Any:
        try:
            raw = await executor.execute(request.target_url, request.descriptor)
            if raw is None and not request.response_is_nullable:
                raise EmptyResponseError()
            if unwrap:
                raw = unwrap_root_object(request.response_type, raw)
            return deserialize(instance, raw)
        except Exception as exc:
            logger.debug("%r failed: %s", request, exc)
            instance.object_state.mark_error()
            error = _classify(exc)
            handler = cls.global_error_handler
            if handler is not None and request.descriptor.use_global_error_handler:
                handler(error, request)
            raise error from exc
