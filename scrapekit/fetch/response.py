"""Response value object with lazy body resolution and response interceptors."""

import asyncio
import inspect
import json
from enum import Enum
from typing import Any

import httpx

from scrapekit.fetch.constants import HTTP_STATUS_OK_MAX, HTTP_STATUS_OK_MIN
from scrapekit.fetch.request import HttpRequest
from scrapekit.fetch.schemas import Interceptor


class BodyState(str, Enum):
    """Lifecycle of a response body.

    UNRESOLVED -> RESOLVING -> RESOLVED
    """

    UNRESOLVED = "UNRESOLVED"
    RESOLVING = "RESOLVING"
    RESOLVED = "RESOLVED"


class BodyCell:
    """Reads the raw body bytes at most once.

    Concurrent readers wait on the same read instead of issuing a second one.
    """

    def __init__(self, raw: httpx.Response) -> None:
        """Initialize the cell.

        Args:
            raw: Response whose body is read on first access.
        """
        self._raw = raw
        self._lock = asyncio.Lock()
        self._state = BodyState.UNRESOLVED
        self._value = b""

    @property
    def state(self) -> BodyState:
        """Get the current resolution state."""
        return self._state

    async def get(self) -> bytes:
        """Get the body bytes, reading them on first call."""
        if self._state is BodyState.RESOLVED:
            return self._value

        async with self._lock:
            if self._state is BodyState.UNRESOLVED:
                self._state = BodyState.RESOLVING
                try:
                    self._value = await self._raw.aread()
                except BaseException:
                    self._state = BodyState.UNRESOLVED
                    raise
                self._state = BodyState.RESOLVED
        return self._value


class HttpResponse:
    """A fully materialized HTTP response.

    ``content`` and ``data`` are filled lazily the first time the body is
    read, either directly through ``text()``/``json()`` or by ``intercept()``.
    """

    def __init__(self, raw: httpx.Response, request: HttpRequest) -> None:
        """Wrap a network response.

        Args:
            raw: The response returned by the transport.
            request: The request that initiated this response.
        """
        try:
            raw.request
        except RuntimeError:
            # Transports may return responses built without a request
            raw.request = request.to_httpx()

        self.request = request
        self.status: int = raw.status_code
        self.status_text: str = raw.reason_phrase
        self.url = raw.url
        self.headers = httpx.Headers(raw.headers)
        self.interceptors: list[Interceptor] = []
        self.content = ""
        self.data: Any = None
        self._raw = raw
        self._body = BodyCell(raw)
        self._text_resolved = False
        self._data_resolved = False

    @property
    def ok(self) -> bool:
        """Check if the status is in the 2xx success range."""
        return HTTP_STATUS_OK_MIN <= self.status < HTTP_STATUS_OK_MAX

    @property
    def content_type(self) -> str:
        """Get the content-type header, or an empty string."""
        return self.headers.get("content-type", "")

    @property
    def body_state(self) -> BodyState:
        """Get the resolution state of the body."""
        return self._body.state

    def add_interceptors(self, *fns: Interceptor) -> "HttpResponse":
        """Append interceptors that are not registered yet.

        Args:
            fns: Interceptor functions to add.

        Returns:
            The response, for chaining.
        """
        for fn in fns:
            if fn not in self.interceptors:
                self.interceptors.append(fn)
        return self

    async def text(self) -> str:
        """Decode the body as text.

        Returns:
            The body content, also stored on ``content``.
        """
        if not self._text_resolved:
            raw_bytes = await self._body.get()
            encoding = self._raw.charset_encoding or "utf-8"
            self.content = raw_bytes.decode(encoding, errors="replace")
            self._text_resolved = True
        return self.content

    async def json(self) -> Any:
        """Parse the body as JSON.

        Returns:
            The parsed body, also stored on ``data``.

        Raises:
            json.JSONDecodeError: If the body is not valid JSON.
        """
        if not self._data_resolved:
            self.data = json.loads(await self.text())
            self._data_resolved = True
        return self.data

    async def resolve_body(self) -> "HttpResponse":
        """Resolve the body as JSON or text depending on the content type.

        Returns:
            The response, for chaining.
        """
        if "json" in self.content_type.lower():
            await self.json()
        else:
            await self.text()
        return self

    async def intercept(self) -> "HttpResponse":
        """Resolve the body, then run the response interceptors in order.

        Returns:
            The response, after all interceptors ran.
        """
        await self.resolve_body()

        for interceptor in self.interceptors:
            result = interceptor(self)
            if inspect.isawaitable(result):
                await result
        return self

    def __repr__(self) -> str:
        return f"<HttpResponse [{self.status} {self.url}]>"
