"""
HTTP execution for bound requests.

An executor turns a URL and a RequestDescriptor into the decoded response
body. heisenberg.resource only relies on the Executor protocol, so any
object with a matching `execute` coroutine can be plugged in (a fake in
tests, a client with authentication in an application).

HttpxExecutor is the default implementation, built on httpx.AsyncClient:

    >>> config = ExecutorConfig(base_url="https://api.example.com")
    >>> config = config.with_headers(Authorization="Bearer ...")
    >>> async with HttpxExecutor(config) as executor:
    ...     body = await executor.execute("/books", RequestDescriptor())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Protocol

import httpx

from heisenberg.errors import HttpError
from heisenberg.request import RequestDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutorConfig:
    """
    Settings for HttpxExecutor.

    Attributes:
        base_url: Prefix for relative request URLs.
        timeout: Timeout in seconds applied to every request.
        headers: Headers sent with every request.
    """

    base_url: str = ""
    timeout: float = 30.0
    headers: Dict[str, str] = field(default_factory=dict)

    def with_headers(self, **headers: str) -> ExecutorConfig:
        """Return a new config with headers merged over this one's."""
        return replace(self, headers={**self.headers, **headers})


DEFAULT_CONFIG = ExecutorConfig()


class Executor(Protocol):
    async def execute(self, url: str, descriptor: RequestDescriptor) -> Any:
        """
        Perform the request and return the decoded body.

        Raises:
            HttpError: If the request fails or the status is not 2xx.
        """
        ...


class HttpxExecutor:
    """Executor backed by a (lazily created) httpx.AsyncClient."""

    def __init__(self, config: Optional[ExecutorConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or DEFAULT_CONFIG
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                headers=self.config.headers,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpxExecutor:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def execute(self, url: str, descriptor: RequestDescriptor) -> Any:
        headers = {"Accept": descriptor.accept}
        if descriptor.data is not None:
            headers["Content-Type"] = descriptor.content_type

        logger.debug("%s %s", descriptor.method, url)
        try:
            response = await self.client.request(
                descriptor.method,
                url,
                content=descriptor.data,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise HttpError(0, type(exc).__name__, str(exc)) from exc

        if not response.is_success:
            logger.debug("%s %s failed with %d", descriptor.method, url, response.status_code)
            raise HttpError(response.status_code, response.reason_phrase, response.text)

        if descriptor.data_type == "text":
            return response.text
        if not response.content:
            return None
        return response.json()
