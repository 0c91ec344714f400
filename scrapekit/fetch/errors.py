"""Error types for the HTTP client."""

from enum import Enum
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from scrapekit.fetch.response import HttpResponse


class HttpErrorClass(str, Enum):
    """Classification of client errors.

    - VALIDATION: Configuration or interceptors failed validation
    - REQUEST_FAILED: Transport succeeded but the status is not 2xx
    - TRANSPORT: The transport could not complete the request
    - ABORTED: The abort signal fired before the response arrived
    - REDIRECT: A redirect was received while redirects are an error
    - INTEGRITY: The body digest did not match the requested integrity
    - PROFILE: A client profile lookup failed
    """

    VALIDATION = "VALIDATION"
    REQUEST_FAILED = "REQUEST_FAILED"
    TRANSPORT = "TRANSPORT"
    ABORTED = "ABORTED"
    REDIRECT = "REDIRECT"
    INTEGRITY = "INTEGRITY"
    PROFILE = "PROFILE"


class HttpClientError(Exception):
    """Base exception for client errors.

    Provides structured error information for logging and reporting.
    """

    error_class: HttpErrorClass = HttpErrorClass.TRANSPORT

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the client error.

        Args:
            message: Human-readable error message.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigValidationError(HttpClientError, ValueError):
    """Raised when a request configuration or interceptor bundle is invalid.

    Raised before any network activity.
    """

    error_class = HttpErrorClass.VALIDATION

    def __init__(self, errors: list[dict[str, str]], schema: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details (loc, msg, type).
            schema: Name of the schema that rejected the input.
        """
        self.errors = errors
        self.schema = schema
        super().__init__(
            f"Validation failed for {schema}: {len(errors)} errors",
            details={"schema": schema, "errors": errors},
        )


class RequestFailedError(HttpClientError):
    """Raised when the response status is outside the 2xx range.

    The full response is attached; its body can still be resolved.
    """

    error_class = HttpErrorClass.REQUEST_FAILED

    def __init__(self, response: "HttpResponse") -> None:
        """Initialize the error.

        Args:
            response: The response that caused the error.
        """
        self.response = response
        super().__init__(
            f"Request to {response.url} failed with status "
            f"{response.status} {response.status_text}".rstrip(),
            details={"status": response.status, "url": str(response.url)},
        )

    @property
    def status(self) -> int:
        """Get the status code of the failed response."""
        return self.response.status


class TransportError(HttpClientError):
    """Raised by the default transport when a request cannot be completed."""

    error_class = HttpErrorClass.TRANSPORT

    def __init__(self, message: str, url: str) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            url: URL of the request.
        """
        self.url = url
        super().__init__(message, details={"url": url})


class RequestAbortedError(TransportError):
    """Raised when the abort signal is set before the response arrives."""

    error_class = HttpErrorClass.ABORTED


class RedirectNotAllowedError(TransportError):
    """Raised when a redirect is received and the redirect policy is 'error'."""

    error_class = HttpErrorClass.REDIRECT


class IntegrityMismatchError(TransportError):
    """Raised when the response body does not match the requested integrity."""

    error_class = HttpErrorClass.INTEGRITY


class UnknownProfileError(HttpClientError, KeyError):
    """Raised when a client profile is not registered."""

    error_class = HttpErrorClass.PROFILE

    def __init__(self, name: str) -> None:
        """Initialize the error.

        Args:
            name: Name of the missing profile.
        """
        self.name = name
        super().__init__(f"Unknown client profile: {name}", details={"name": name})

    def __str__(self) -> str:
        return self.message
