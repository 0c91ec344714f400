"""HTTP client with layered configuration and interceptors.

This module provides:
- Declarative request configuration with validation, defaults and coercion
- Ordered, de-duplicated request/response interceptors
- Client profiles composed across a lineage and forked per use
- A pluggable transport (httpx by default)
- Header redaction and metrics for observability
"""

from scrapekit.fetch.client import HttpClient
from scrapekit.fetch.constants import (
    HTML_CONTENT_TYPE,
    HTTP_PROFILE,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    JSON_CONTENT_TYPE,
    SCRAPER_PROFILE,
)
from scrapekit.fetch.errors import (
    ConfigValidationError,
    HttpClientError,
    HttpErrorClass,
    IntegrityMismatchError,
    RedirectNotAllowedError,
    RequestAbortedError,
    RequestFailedError,
    TransportError,
    UnknownProfileError,
)
from scrapekit.fetch.merge import merge_config, merge_headers, merge_interceptors
from scrapekit.fetch.metrics import HttpMetrics
from scrapekit.fetch.profiles import ClientProfile, Lineage, ProfileRegistry
from scrapekit.fetch.redact import (
    redact_config,
    redact_headers,
    redact_url_credentials,
)
from scrapekit.fetch.request import HttpRequest
from scrapekit.fetch.response import BodyState, HttpResponse
from scrapekit.fetch.schemas import (
    CacheMode,
    CredentialsMode,
    HttpMethod,
    InterceptorBundle,
    RedirectPolicy,
    ReferrerPolicy,
    RequestConfig,
    RequestMode,
    parse_config,
    parse_interceptors,
)
from scrapekit.fetch.transport import HttpxTransport, Transport


__all__ = [
    # Client
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "BodyState",
    # Profiles
    "ClientProfile",
    "Lineage",
    "ProfileRegistry",
    # Schemas
    "RequestConfig",
    "InterceptorBundle",
    "CacheMode",
    "CredentialsMode",
    "HttpMethod",
    "RedirectPolicy",
    "ReferrerPolicy",
    "RequestMode",
    "parse_config",
    "parse_interceptors",
    # Merge
    "merge_config",
    "merge_headers",
    "merge_interceptors",
    # Transport
    "HttpxTransport",
    "Transport",
    # Errors
    "HttpClientError",
    "HttpErrorClass",
    "ConfigValidationError",
    "RequestFailedError",
    "TransportError",
    "RequestAbortedError",
    "RedirectNotAllowedError",
    "IntegrityMismatchError",
    "UnknownProfileError",
    # Constants
    "HTTP_STATUS_OK_MIN",
    "HTTP_STATUS_OK_MAX",
    "JSON_CONTENT_TYPE",
    "HTML_CONTENT_TYPE",
    "HTTP_PROFILE",
    "SCRAPER_PROFILE",
    # Metrics
    "HttpMetrics",
    # Redaction
    "redact_config",
    "redact_headers",
    "redact_url_credentials",
]
