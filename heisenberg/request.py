"""
Fluent description of an HTTP request and of the response it produces.

    >>> request = (
    ...     Request("GET")
    ...     .url("/authors/{id}/books", {"id": 7})
    ...     .query_params({"sort": "title", "tag": ["a", "b"]})
    ...     .produces_list_of(Book)
    ... )
    >>> request.target_url
    '/authors/7/books?sort=title&tag=a&tag=b'

The transport-level settings end up in a RequestDescriptor, which is all an
executor sees. The response settings (type, list-ness, nullability) are
read by heisenberg.resource when binding the result.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Literal, Optional
from urllib.parse import quote, urlencode

from pydantic import BaseModel

from heisenberg.fields import check_type
from heisenberg.stypes import Type, json_default

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"

# Methods that accept body()
_BODY_METHODS = frozenset({"POST", "PUT"})


class _EmptyValue:
    def __repr__(self) -> str:
        return "QUERY_PARAM_EMPTY_VALUE"


# Marker for a query parameter written without "=value" (a flag).
QUERY_PARAM_EMPTY_VALUE = _EmptyValue()


class RequestDescriptor(BaseModel):
    """
    Transport settings handed to an executor.

    Attributes:
        method: HTTP method.
        content_type: Content-Type of the body.
        accept: Accept header.
        data_type: "json" to parse the response body, "text" to keep it raw.
        data: Encoded request body, if any.
        use_global_error_handler: Whether Resource.global_error_handler
            is called when this request fails.
    """

    method: str = "GET"
    content_type: str = JSON_CONTENT_TYPE
    accept: str = "application/json"
    data_type: Literal["json", "text"] = "json"
    data: Optional[str] = None
    use_global_error_handler: bool = True


def _encode(value: Any) -> str:
    if isinstance(value, bool):
        value = "true" if value else "false"
    return quote(str(value), safe="")


class Request:
    """A request under construction. Every builder method returns self."""

    def __init__(self, method: str):
        self._url: Optional[str] = None
        self.descriptor = RequestDescriptor(method=method.upper())
        self.response_type: Any = None
        self.response_is_list = False
        self.response_is_singleton_list = False
        self.response_is_nullable = False

    def __repr__(self) -> str:
        return f"Request({self.descriptor.method} {self._url})"

    def _update(self, **changes: Any) -> Request:
        self.descriptor = self.descriptor.model_copy(update=changes)
        return self

    @property
    def target_url(self) -> str:
        if self._url is None:
            raise ValueError(f"No URL has been set on {self!r}")
        return self._url

    # -------------------------------------------------------------------------
    # URL
    # -------------------------------------------------------------------------

    def url(self, template: str, params: Optional[Mapping[str, Any]] = None) -> Request:
        """
        Set the URL, replacing each {name} token with the URL-encoded value
        of params[name].
        """
        result = template
        for key, value in (params or {}).items():
            result = result.replace("{" + key + "}", _encode(value))
        self._url = result
        return self

    def query_params(self, params: Optional[Mapping[str, Any]]) -> Request:
        """
        Append a query string.

        None values are skipped, list and tuple values repeat the parameter,
        and QUERY_PARAM_EMPTY_VALUE writes the bare parameter name.
        """
        if params is None:
            return self

        fragments = []
        for name, value in params.items():
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                fragments.extend(f"{name}={_encode(item)}" for item in value)
            elif value is QUERY_PARAM_EMPTY_VALUE:
                fragments.append(name)
            else:
                fragments.append(f"{name}={_encode(value)}")

        if fragments:
            url = self.target_url
            separator = "&" if "?" in url else "?"
            self._url = url + separator + "&".join(fragments)
        return self

    # -------------------------------------------------------------------------
    # Transport settings
    # -------------------------------------------------------------------------

    def use_global_error_handler(self, flag: bool) -> Request:
        return self._update(use_global_error_handler=flag)

    def disable_global_error_handler(self) -> Request:
        return self.use_global_error_handler(False)

    def consumes_json(self) -> Request:
        return self._update(content_type=JSON_CONTENT_TYPE)

    def consumes_form_data(self) -> Request:
        return self._update(content_type=FORM_CONTENT_TYPE)

    def produces_json(self) -> Request:
        return self._update(data_type="json", accept="application/json")

    def produces_csv(self) -> Request:
        return self._update(data_type="text", accept="text/csv")

    def body(self, data: Any) -> Request:
        """
        Set the request body. Non-string data is JSON-encoded when the
        request consumes JSON, and form-encoded otherwise.

        Raises:
            ValueError: For methods that carry no body.
        """
        if self.descriptor.method not in _BODY_METHODS:
            raise ValueError(f"{self.descriptor.method} requests cannot have a body")
        if not isinstance(data, str):
            if "json" in self.descriptor.content_type:
                data = json.dumps(data, default=json_default)
            elif isinstance(data, Mapping):
                data = urlencode(data, doseq=True)
            else:
                data = str(data)
        return self._update(data=data)

    # -------------------------------------------------------------------------
    # Response settings
    # -------------------------------------------------------------------------

    def produces(self, object_type: Any) -> Request:
        """The response is a single object (or primitive) of object_type."""
        self.response_type = check_type(object_type)
        return self

    def produces_boolean(self) -> Request:
        return self.produces(Type.Boolean)

    def produces_date(self) -> Request:
        return self.produces(Type.Date)

    def produces_number(self) -> Request:
        return self.produces(Type.Number)

    def produces_raw(self) -> Request:
        return self.produces(Type.Raw)

    def produces_string(self) -> Request:
        return self.produces(Type.String)

    def produces_list_of(self, object_type: Any) -> Request:
        self.produces(object_type)
        self.response_is_list = True
        return self

    def produces_singleton_list_of(self, object_type: Any) -> Request:
        """
        The response is a list holding a single object. An empty list is
        treated as a null response.
        """
        self.produces(object_type)
        self.response_is_singleton_list = True
        return self

    def produces_nullable(self, flag: bool = True) -> Request:
        self.response_is_nullable = flag
        return self
