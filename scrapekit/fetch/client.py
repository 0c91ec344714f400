"""HTTP client with layered defaults, interceptors and forking."""

import asyncio
import time
from typing import Any, ClassVar

import structlog

from scrapekit.fetch.constants import HTTP_PROFILE
from scrapekit.fetch.errors import (
    ConfigValidationError,
    HttpClientError,
    HttpErrorClass,
    RequestFailedError,
)
from scrapekit.fetch.merge import ConfigInput, InterceptorsInput
from scrapekit.fetch.metrics import HttpMetrics
from scrapekit.fetch.profiles import Lineage, ProfileRegistry
from scrapekit.fetch.redact import (
    redact_config,
    redact_headers,
    redact_url_credentials,
)
from scrapekit.fetch.request import HttpRequest
from scrapekit.fetch.response import HttpResponse
from scrapekit.fetch.schemas import HttpMethod, parse_config, parse_interceptors
from scrapekit.fetch.transport import HttpxTransport, Transport


logger = structlog.get_logger()


class HttpClient:
    """Asynchronous HTTP client.

    Each client owns a snapshot of defaults and interceptors, taken at
    construction by merging its lineage's baseline with the constructor
    arguments. A single send runs, strictly in sequence:

    merge -> validate -> build request -> request interceptors -> transport
    -> build response -> status check -> response interceptors -> delay
    """

    lineage: ClassVar[Lineage]

    def __init__(
        self,
        config: ConfigInput | None = None,
        interceptors: InterceptorsInput | None = None,
        *,
        transport: Transport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Defaults merged over the lineage baseline.
            interceptors: Interceptors merged over the lineage baseline.
            transport: Network transport (defaults to HttpxTransport).
        """
        baseline = self.lineage.baseline()

        self.defaults = self.lineage.merge_config(baseline.defaults, config or {})
        self.interceptors = self.lineage.merge_interceptors(
            baseline.interceptors, interceptors or {}
        )
        self.transport: Transport = transport or HttpxTransport()
        self._log = logger.bind(component="http", profile=self.lineage.name)

    @classmethod
    def create(
        cls,
        config: ConfigInput | None = None,
        interceptors: InterceptorsInput | None = None,
        **options: Any,
    ) -> "HttpClient":
        """Create a client of this class's lineage.

        Args:
            config: Instance defaults.
            interceptors: Instance interceptors.
            options: Extra constructor options.

        Returns:
            New client.
        """
        return cls.lineage.create(config, interceptors, **options)

    @classmethod
    def define_defaults(cls, config: ConfigInput) -> None:
        """Merge configuration into the baseline of this class's lineage.

        Intended for one-time setup; existing clients keep their snapshot.

        Args:
            config: Configuration merged over the baseline.
        """
        ProfileRegistry.get_instance().define_defaults(cls.lineage, config)

    @classmethod
    def define_interceptors(cls, interceptors: InterceptorsInput) -> None:
        """Merge interceptors into the baseline of this class's lineage.

        Args:
            interceptors: Bundle merged over the baseline.
        """
        ProfileRegistry.get_instance().define_interceptors(cls.lineage, interceptors)

    async def send(
        self,
        config: ConfigInput | None = None,
        interceptors: InterceptorsInput | None = None,
    ) -> HttpResponse:
        """Send a request and return the processed response.

        Args:
            config: Per-call configuration merged over the client defaults.
            interceptors: Per-call interceptors appended to the client's.

        Returns:
            The response, after its interceptors ran.

        Raises:
            ConfigValidationError: If the merged configuration is invalid.
            RequestFailedError: If the response status is not 2xx.
        """
        merged_config = self.lineage.merge_config(self.defaults, config or {})
        merged_interceptors = self.lineage.merge_interceptors(
            self.interceptors, interceptors or {}
        )
        return await self._dispatch(merged_config, merged_interceptors)

    async def get(
        self,
        config: ConfigInput | None = None,
        interceptors: InterceptorsInput | None = None,
    ) -> HttpResponse:
        """Send a GET request."""
        return await self.send(
            {**(config or {}), "method": HttpMethod.GET.value}, interceptors
        )

    async def post(
        self,
        config: ConfigInput | None = None,
        interceptors: InterceptorsInput | None = None,
    ) -> HttpResponse:
        """Send a POST request."""
        return await self.send(
            {**(config or {}), "method": HttpMethod.POST.value}, interceptors
        )

    def fork(
        self,
        config: ConfigInput | None = None,
        interceptors: InterceptorsInput | None = None,
    ) -> "HttpClient":
        """Derive an independent client from this one.

        The new client's defaults and interceptors are this client's merged
        with the given overrides; later changes to either client do not
        affect the other.

        Args:
            config: Configuration merged over this client's defaults.
            interceptors: Interceptors merged over this client's.

        Returns:
            New client of the same lineage.
        """
        return self.lineage.create(
            self.lineage.merge_config(self.defaults, config or {}),
            self.lineage.merge_interceptors(self.interceptors, interceptors or {}),
            **self._options(),
        )

    def _options(self) -> dict[str, Any]:
        """Constructor options carried over to forked clients."""
        return {"transport": self.transport}

    async def _dispatch(
        self,
        config: ConfigInput,
        interceptors: InterceptorsInput,
    ) -> HttpResponse:
        start_time_ns = time.perf_counter_ns()
        metrics = HttpMetrics.get_instance()

        try:
            request_config = parse_config(config)
            bundle = parse_interceptors(interceptors)
        except ConfigValidationError as e:
            metrics.record_failure(self.lineage.name, e.error_class)
            self._log.warning(
                "request_validation_failed",
                schema=e.schema,
                errors=e.errors,
                config=redact_config(config),
            )
            raise

        request = HttpRequest(request_config).add_interceptors(*bundle.request)
        log = self._log.bind(
            method=request.method,
            url=redact_url_credentials(str(request.url)),
        )

        try:
            await request.intercept()
            log.debug("request_dispatched", headers=redact_headers(request.headers))

            try:
                raw = await self.transport(request)
            except Exception as e:
                error_class = (
                    e.error_class
                    if isinstance(e, HttpClientError)
                    else HttpErrorClass.TRANSPORT
                )
                metrics.record_failure(self.lineage.name, error_class)
                log.warning(
                    "request_transport_error",
                    error_type=type(e).__name__,
                    error=str(e),
                )
                raise

            response = HttpResponse(raw, request).add_interceptors(*bundle.response)
            metrics.record_response(
                self.lineage.name, response.status, raw.num_bytes_downloaded
            )

            if not response.ok:
                metrics.record_failure(
                    self.lineage.name, HttpErrorClass.REQUEST_FAILED
                )
                log.warning(
                    "request_failed",
                    status_code=response.status,
                    reason=response.status_text,
                )
                raise RequestFailedError(response)

            await response.intercept()

            if request_config.delay > 0:
                await asyncio.sleep(request_config.delay / 1000)
        finally:
            duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
            metrics.record_duration(duration_ms)

        log.info(
            "request_complete",
            status_code=response.status,
            content_type=response.content_type,
            duration_ms=round(duration_ms, 2),
        )
        return response


HttpClient.lineage = Lineage(name=HTTP_PROFILE, factory=HttpClient)
