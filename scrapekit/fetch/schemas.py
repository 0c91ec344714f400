"""Declarative schemas for request configurations and interceptor bundles.

``RequestConfig`` validates, defaults and coerces one merged request
configuration. ``InterceptorBundle`` validates the request/response
interceptor lists. Both are parsed once, after all configuration layers have
been merged.
"""

import asyncio
import inspect
import json
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Annotated, Any
from urllib.parse import urlencode, urlparse

import httpx
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from scrapekit.fetch.constants import FORM_CONTENT_TYPE, JSON_CONTENT_TYPE
from scrapekit.fetch.errors import ConfigValidationError


class CacheMode(str, Enum):
    """How the request interacts with HTTP caches."""

    DEFAULT = "default"
    FORCE_CACHE = "force-cache"
    NO_CACHE = "no-cache"
    NO_STORE = "no-store"
    ONLY_IF_CACHED = "only-if-cached"
    RELOAD = "reload"


class CredentialsMode(str, Enum):
    """Whether credentials are sent with the request."""

    INCLUDE = "include"
    OMIT = "omit"
    SAME_ORIGIN = "same-origin"


class RequestMode(str, Enum):
    """CORS mode of the request."""

    SAME_ORIGIN = "same-origin"
    CORS = "cors"
    NAVIGATE = "navigate"
    NO_CORS = "no-cors"


class RedirectPolicy(str, Enum):
    """How redirects are handled.

    - FOLLOW: Follow redirects transparently
    - ERROR: Fail the request when a redirect is received
    - MANUAL: Return the redirect response as-is
    """

    ERROR = "error"
    FOLLOW = "follow"
    MANUAL = "manual"


class ReferrerPolicy(str, Enum):
    """Referrer policy of the request."""

    EMPTY = ""
    SAME_ORIGIN = "same-origin"
    NO_REFERRER = "no-referrer"
    NO_REFERRER_WHEN_DOWNGRADE = "no-referrer-when-downgrade"
    ORIGIN = "origin"
    ORIGIN_WHEN_CROSS_ORIGIN = "origin-when-cross-origin"
    STRICT_ORIGIN = "strict-origin"
    STRICT_ORIGIN_WHEN_CROSS_ORIGIN = "strict-origin-when-cross-origin"
    UNSAFE_URL = "unsafe-url"


class HttpMethod(str, Enum):
    """HTTP request methods."""

    GET = "GET"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    CONNECT = "CONNECT"
    DELETE = "DELETE"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"


Interceptor = Callable[..., Any]

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL,
)


class RequestConfig(BaseModel):
    """Validated configuration for a single outgoing request.

    Every field is independently defaulted. After validation ``body`` holds
    the only body representation: a ``json`` payload takes precedence and is
    serialized to a string, form mappings are URL-encoded.
    """

    model_config = ConfigDict(
        extra="forbid",
        arbitrary_types_allowed=True,
        populate_by_name=True,
    )

    cache: CacheMode = CacheMode.NO_CACHE
    credentials: CredentialsMode | None = None
    delay: Annotated[
        float, Field(ge=0, description="Milliseconds to wait before returning")
    ] = 0
    headers: httpx.Headers = Field(default_factory=httpx.Headers)
    integrity: str | None = None
    keepalive: bool = False
    mode: RequestMode = RequestMode.NO_CORS
    redirect: RedirectPolicy = RedirectPolicy.FOLLOW
    referrer: str = ""
    referrer_policy: ReferrerPolicy = ReferrerPolicy.EMPTY
    signal: asyncio.Event | None = None
    origin: str | None = None
    path: str = "/"
    method: HttpMethod = HttpMethod.GET
    json_body: dict[str, Any] | str | None = Field(default=None, alias="json")
    body: str | bytes | dict[str, str] | None = None

    @field_validator("headers", mode="before")
    @classmethod
    def coerce_headers(cls, value: Any) -> httpx.Headers:
        """Copy headers into a fresh, case-insensitive collection."""
        if value is None:
            return httpx.Headers()
        if isinstance(value, httpx.Headers):
            return httpx.Headers(value)
        if isinstance(value, Mapping):
            headers = httpx.Headers()
            for key, item in value.items():
                if not isinstance(key, str) or not isinstance(item, str):
                    msg = "Header names and values must be strings"
                    raise ValueError(msg)
                headers[key] = item
            return headers
        msg = "Headers must be a mapping or httpx.Headers"
        raise ValueError(msg)

    @field_validator("origin")
    @classmethod
    def clean_origin(cls, value: str | None) -> str | None:
        """Require an absolute URL and strip the trailing slash."""
        if value is None:
            return None
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            msg = f"Invalid origin URL: {value!r}"
            raise ValueError(msg)
        if value.endswith("/"):
            return value[:-1]
        return value

    @field_validator("path")
    @classmethod
    def validate_path(cls, value: str) -> str:
        """Ensure the path is absolute."""
        if not value.startswith("/"):
            msg = "Path must start with '/'"
            raise ValueError(msg)
        return value

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, value: Any) -> Any:
        """Accept HTTP methods in any case."""
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("json_body")
    @classmethod
    def serialize_json(cls, value: dict[str, Any] | str | None) -> str | None:
        """Serialize objects and check pre-serialized strings."""
        if value is None:
            return None
        if isinstance(value, str):
            try:
                json.loads(value)
            except ValueError as e:
                msg = "Not a valid JSON body."
                raise ValueError(msg) from e
            return value
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        except TypeError as e:
            msg = f"JSON body is not serializable: {e}"
            raise ValueError(msg) from e

    @model_validator(mode="after")
    def resolve_body(self) -> "RequestConfig":
        """Collapse json/body/form input into a single body."""
        if self.json_body is not None:
            self.body = self.json_body
            if "json" not in self.headers.get("content-type", "").lower():
                self.headers["content-type"] = JSON_CONTENT_TYPE
        elif isinstance(self.body, Mapping):
            self.body = urlencode(self.body)
            if "content-type" not in self.headers:
                self.headers["content-type"] = FORM_CONTENT_TYPE
        return self

    @property
    def url(self) -> str:
        """Get the full request URL (origin followed by path)."""
        return f"{self.origin or ''}{self.path}"


def is_valid_interceptor(value: object) -> bool:
    """Check that a value is a named callable taking at least one argument.

    Lambdas and nameless callables are rejected so that interceptors stay
    identifiable in logs and de-duplicate predictably.

    Args:
        value: Candidate interceptor.

    Returns:
        True if the value can be registered as an interceptor.
    """
    if not callable(value):
        return False
    name = getattr(value, "__name__", None)
    if not name or name == "<lambda>":
        return False
    try:
        signature = inspect.signature(value)
    except (TypeError, ValueError):
        return False
    return any(p.kind in _POSITIONAL_KINDS for p in signature.parameters.values())


class InterceptorBundle(BaseModel):
    """Ordered request and response interceptors.

    Each interceptor appears at most once; the first occurrence wins.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    request: tuple[Interceptor, ...] = ()
    response: tuple[Interceptor, ...] = ()

    @field_validator("request", "response")
    @classmethod
    def validate_interceptors(
        cls, value: tuple[Interceptor, ...]
    ) -> tuple[Interceptor, ...]:
        """Reject anonymous or zero-arity interceptors and drop duplicates."""
        unique: list[Interceptor] = []
        for fn in value:
            if not is_valid_interceptor(fn):
                msg = (
                    f"Interceptor {fn!r} must be a named function "
                    "accepting at least one argument"
                )
                raise ValueError(msg)
            if fn not in unique:
                unique.append(fn)
        return tuple(unique)


def _flatten_errors(error: ValidationError) -> list[dict[str, str]]:
    return [
        {
            "loc": ".".join(str(loc) for loc in err["loc"]),
            "msg": err["msg"],
            "type": err["type"],
        }
        for err in error.errors()
    ]


def parse_config(config: Mapping[str, Any]) -> RequestConfig:
    """Validate a merged request configuration.

    Args:
        config: Merged configuration mapping.

    Returns:
        Validated configuration with defaults applied.

    Raises:
        ConfigValidationError: If any field is invalid.
    """
    try:
        return RequestConfig.model_validate(dict(config))
    except ValidationError as e:
        raise ConfigValidationError(_flatten_errors(e), schema="RequestConfig") from e


def parse_interceptors(interceptors: Mapping[str, Any]) -> InterceptorBundle:
    """Validate a merged interceptor bundle.

    Args:
        interceptors: Mapping with optional ``request``/``response`` lists.

    Returns:
        Validated bundle.

    Raises:
        ConfigValidationError: If an interceptor is invalid.
    """
    try:
        return InterceptorBundle.model_validate(dict(interceptors))
    except ValidationError as e:
        raise ConfigValidationError(
            _flatten_errors(e), schema="InterceptorBundle"
        ) from e
