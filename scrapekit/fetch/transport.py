"""Network transports for the HTTP client.

A transport takes an ``HttpRequest`` and returns a fully read
``httpx.Response``. The client never talks to the network directly, so tests
and callers can swap in any implementation of the ``Transport`` protocol.
"""

import asyncio
import base64
import contextlib
import hashlib
from collections.abc import Awaitable
from typing import Protocol

import httpx
import structlog

from scrapekit.fetch.constants import (
    CACHE_CONTROL_DIRECTIVES,
    CREDENTIAL_HEADERS,
    DEFAULT_TIMEOUT_SECONDS,
    HTTP_STATUS_REDIRECT_MAX,
    HTTP_STATUS_REDIRECT_MIN,
)
from scrapekit.fetch.errors import (
    IntegrityMismatchError,
    RedirectNotAllowedError,
    RequestAbortedError,
)
from scrapekit.fetch.redact import redact_url_credentials
from scrapekit.fetch.request import HttpRequest
from scrapekit.fetch.schemas import CredentialsMode, RedirectPolicy, ReferrerPolicy


logger = structlog.get_logger()

_INTEGRITY_ALGORITHMS = {
    "sha256": hashlib.sha256,
    "sha384": hashlib.sha384,
    "sha512": hashlib.sha512,
}


class Transport(Protocol):
    """Protocol for sending a request over the network."""

    async def __call__(self, request: HttpRequest) -> httpx.Response:
        """Send a request.

        Args:
            request: The intercepted request to send.

        Returns:
            The network response with its body read.
        """
        ...


class HttpxTransport:
    """Default transport backed by ``httpx.AsyncClient``.

    Applies the fetch-style options carried by the request: redirect policy,
    credentials mode, referrer, cache mode, subresource integrity and the
    abort signal.
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        trust_env: bool = True,
    ) -> None:
        """Initialize the transport.

        Args:
            transport: Optional low-level httpx transport (e.g. MockTransport).
            timeout: Request timeout in seconds.
            trust_env: Whether proxy and certificate settings are read from
                the environment.
        """
        self._transport = transport
        self._timeout = timeout
        self._trust_env = trust_env

    async def __call__(self, request: HttpRequest) -> httpx.Response:
        """Send a request and return the fully read response.

        Args:
            request: The intercepted request to send.

        Returns:
            The network response.

        Raises:
            RequestAbortedError: If the abort signal is set first.
            RedirectNotAllowedError: If a redirect arrives under policy 'error'.
            IntegrityMismatchError: If the body digest does not match.
            httpx.HTTPError: On network failures, unchanged.
        """
        url = str(request.url)
        if request.signal is not None and request.signal.is_set():
            msg = f"Request to {redact_url_credentials(url)} was aborted"
            raise RequestAbortedError(msg, url=url)

        response = await self._with_signal(self._send(request), request)

        is_redirect = (
            HTTP_STATUS_REDIRECT_MIN <= response.status_code < HTTP_STATUS_REDIRECT_MAX
        )
        if request.redirect is RedirectPolicy.ERROR and is_redirect:
            msg = f"Redirect from {redact_url_credentials(url)} is not allowed"
            raise RedirectNotAllowedError(msg, url=url)

        if request.integrity:
            self._verify_integrity(request.integrity, response.content, url)

        return response

    async def _send(self, request: HttpRequest) -> httpx.Response:
        outgoing = request.to_httpx()
        self._apply_options(request, outgoing.headers)

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self._timeout,
            trust_env=self._trust_env,
            follow_redirects=request.redirect is RedirectPolicy.FOLLOW,
        ) as client:
            return await client.send(outgoing)

    @staticmethod
    def _apply_options(request: HttpRequest, headers: httpx.Headers) -> None:
        if request.credentials is CredentialsMode.OMIT:
            for name in CREDENTIAL_HEADERS:
                headers.pop(name, None)

        if (
            request.referrer
            and request.referrer_policy is not ReferrerPolicy.NO_REFERRER
            and "referer" not in headers
        ):
            headers["referer"] = request.referrer

        directive = CACHE_CONTROL_DIRECTIVES.get(request.cache.value)
        if directive and "cache-control" not in headers:
            headers["cache-control"] = directive

    @staticmethod
    async def _with_signal(
        send: Awaitable[httpx.Response], request: HttpRequest
    ) -> httpx.Response:
        if request.signal is None:
            return await send

        send_task = asyncio.ensure_future(send)
        abort_task = asyncio.ensure_future(request.signal.wait())
        done, _ = await asyncio.wait(
            {send_task, abort_task}, return_when=asyncio.FIRST_COMPLETED
        )

        if send_task in done:
            abort_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await abort_task
            return send_task.result()

        send_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await send_task
        url = str(request.url)
        logger.info("request_aborted", url=redact_url_credentials(url))
        msg = f"Request to {redact_url_credentials(url)} was aborted"
        raise RequestAbortedError(msg, url=url)

    @staticmethod
    def _verify_integrity(integrity: str, body: bytes, url: str) -> None:
        """Check the body against a subresource-integrity value.

        Any one matching digest is enough; unsupported algorithms are ignored.
        """
        supported = False
        for token in integrity.split():
            algorithm, _, expected = token.partition("-")
            digest_fn = _INTEGRITY_ALGORITHMS.get(algorithm.lower())
            if digest_fn is None:
                continue
            supported = True
            actual = base64.b64encode(digest_fn(body).digest()).decode("ascii")
            if actual == expected.split("?", 1)[0]:
                return

        if supported:
            msg = f"Integrity check failed for {redact_url_credentials(url)}"
            raise IntegrityMismatchError(msg, url=url)
