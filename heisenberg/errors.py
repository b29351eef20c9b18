"""
Exception types raised by heisenberg.

Three families of failure are distinguished:

- SchemaError: a bug in a model declaration or a misuse of a typed
  container (wrong codec, re-bound array type, mismatched assignment).
  Raised synchronously at the call site and never caught by the library.
- HttpError: raised by an executor when the HTTP exchange itself fails.
- ResponseError and its subclasses: what a caller awaiting a bound
  response receives. NotFoundError is kept apart from every other failure
  so callers can treat a missing resource differently.
"""

from __future__ import annotations

from typing import Optional


class SchemaError(TypeError):
    """Raised when a model declaration or typed assignment is invalid."""


class HttpError(Exception):
    """
    Failure reported by an executor.

    Attributes:
        status: HTTP status code, or 0 when no response was received.
        status_text: Reason phrase of the response.
        response_text: Raw body of the response, if any.
    """

    def __init__(self, status: int, status_text: str = "", response_text: str = ""):
        self.status = status
        self.status_text = status_text
        self.response_text = response_text
        super().__init__(f"{status_text} ({status})" if status_text else f"HTTP {status}")


class ResponseError(Exception):
    """
    Failure delivered to whoever awaits a bound response.

    Attributes:
        status: HTTP status code when one is known, otherwise None.
        title: Short human-readable summary.
        body: Longer description (response text or formatted traceback).
    """

    def __init__(self, title: str, body: str = "", status: Optional[int] = None):
        self.status = status
        self.title = title
        self.body = body
        super().__init__(title)


class EmptyResponseError(ResponseError):
    """A null response arrived for a request that does not allow one."""

    def __init__(self, title: str = "Response must not be null.", body: str = "", status: Optional[int] = None):
        super().__init__(title, body, status)


class NotFoundError(ResponseError):
    """The server answered 404."""
