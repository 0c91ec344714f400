"""Request value object with an ordered request-interceptor pipeline."""

import asyncio
import inspect

import httpx

from scrapekit.fetch.schemas import (
    CacheMode,
    CredentialsMode,
    Interceptor,
    RedirectPolicy,
    ReferrerPolicy,
    RequestConfig,
    RequestMode,
)


class HttpRequest:
    """An outgoing HTTP request.

    Method, URL and body are fixed at construction. Headers and the
    interceptor list are the only parts meant to change before sending.
    """

    def __init__(self, config: RequestConfig) -> None:
        """Build a request from a validated configuration.

        Args:
            config: Validated request configuration.
        """
        self._method = config.method.value
        self._url = httpx.URL(config.url)
        self._body = config.body
        self.headers = httpx.Headers(config.headers)
        self.cache: CacheMode = config.cache
        self.credentials: CredentialsMode | None = config.credentials
        self.mode: RequestMode = config.mode
        self.redirect: RedirectPolicy = config.redirect
        self.referrer = config.referrer
        self.referrer_policy: ReferrerPolicy = config.referrer_policy
        self.integrity = config.integrity
        self.keepalive = config.keepalive
        self.signal: asyncio.Event | None = config.signal
        self.interceptors: list[Interceptor] = []

    @property
    def method(self) -> str:
        """Get the upper-case request method."""
        return self._method

    @property
    def url(self) -> httpx.URL:
        """Get the request URL."""
        return self._url

    @property
    def body(self) -> str | bytes | None:
        """Get the request body."""
        return self._body  # type: ignore[return-value]

    @property
    def content_type(self) -> str:
        """Get the content-type header, or an empty string."""
        return self.headers.get("content-type", "")

    @property
    def total_headers(self) -> int:
        """Get the number of headers set on the request."""
        return len(self.headers)

    def add_interceptors(self, *fns: Interceptor) -> "HttpRequest":
        """Append interceptors that are not registered yet.

        Args:
            fns: Interceptor functions to add.

        Returns:
            The request, for chaining.
        """
        for fn in fns:
            if fn not in self.interceptors:
                self.interceptors.append(fn)
        return self

    async def intercept(self) -> "HttpRequest":
        """Run the request interceptors in order.

        Each interceptor receives this request and may mutate it in place;
        awaitable results are awaited before the next interceptor runs.

        Returns:
            The request, after all interceptors ran.
        """
        for interceptor in self.interceptors:
            result = interceptor(self)
            if inspect.isawaitable(result):
                await result
        return self

    def to_httpx(self) -> httpx.Request:
        """Build the ``httpx.Request`` sent over the network."""
        return httpx.Request(
            self.method,
            self.url,
            headers=httpx.Headers(self.headers),
            content=self.body,
        )

    def __repr__(self) -> str:
        return f"<HttpRequest [{self.method} {self.url}]>"
