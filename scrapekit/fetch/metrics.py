"""Metrics collection for HTTP clients and the page cache."""

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock

from scrapekit.fetch.errors import HttpErrorClass


_metrics_instance: "HttpMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class HttpMetrics:
    """Thread-safe metrics for client sends.

    Tracks responses by profile and status, failures by profile and error
    class, bytes and time spent, and page cache activity.
    Use get_instance() for singleton access.
    """

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    # Responses received, keyed by (profile, status code)
    responses_by_profile_status: Counter[tuple[str, int]] = field(
        default_factory=Counter
    )

    # Failed sends, keyed by (profile, error class)
    failures_by_profile_class: Counter[tuple[str, str]] = field(
        default_factory=Counter
    )

    bytes_total: int = 0
    duration_ms_total: float = 0.0
    send_count: int = 0
    cache_hits_total: int = 0
    cache_writes_total: int = 0

    @classmethod
    def get_instance(cls) -> "HttpMetrics":
        """Get the singleton instance (thread-safe).

        Returns:
            The shared HttpMetrics instance.
        """
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_response(self, profile: str, status_code: int, num_bytes: int) -> None:
        """Record a response received from the transport.

        Args:
            profile: Name of the client profile that sent the request.
            status_code: HTTP status code.
            num_bytes: Number of body bytes received.
        """
        with self._lock:
            self.responses_by_profile_status[(profile, status_code)] += 1
            self.bytes_total += num_bytes

    def record_failure(self, profile: str, error_class: HttpErrorClass) -> None:
        """Record a failed send.

        Args:
            profile: Name of the client profile.
            error_class: Classification of the failure.
        """
        with self._lock:
            self.failures_by_profile_class[(profile, error_class.value)] += 1

    def record_duration(self, duration_ms: float) -> None:
        """Record the duration of one send, successful or not."""
        with self._lock:
            self.duration_ms_total += duration_ms
            self.send_count += 1

    def record_cache_hit(self) -> None:
        """Record a page served from the cache."""
        with self._lock:
            self.cache_hits_total += 1

    def record_cache_write(self) -> None:
        """Record a page written to the cache."""
        with self._lock:
            self.cache_writes_total += 1

    def get_responses_total(self, profile: str | None = None) -> int:
        """Get the number of responses received.

        Args:
            profile: Restrict to one profile, or None for all.

        Returns:
            Response count.
        """
        with self._lock:
            return sum(
                count
                for (name, _), count in self.responses_by_profile_status.items()
                if profile is None or name == profile
            )

    def get_failures_total(self, profile: str | None = None) -> int:
        """Get the number of failed sends.

        Args:
            profile: Restrict to one profile, or None for all.

        Returns:
            Failure count.
        """
        with self._lock:
            return sum(
                count
                for (name, _), count in self.failures_by_profile_class.items()
                if profile is None or name == profile
            )

    @property
    def avg_duration_ms(self) -> float:
        """Average send duration in milliseconds."""
        with self._lock:
            if self.send_count == 0:
                return 0.0
            return self.duration_ms_total / self.send_count

    def to_prometheus_format(self) -> str:
        """Export metrics in Prometheus text format.

        Returns:
            Prometheus-formatted metrics string.
        """
        lines = [
            "# HELP http_responses_total Responses received by profile and status",
            "# TYPE http_responses_total counter",
        ]
        with self._lock:
            for (profile, status), count in sorted(
                self.responses_by_profile_status.items()
            ):
                lines.append(
                    f'http_responses_total{{profile="{profile}",status="{status}"}} '
                    f"{count}"
                )

            lines.append(
                "# HELP http_failures_total Failed sends by profile and error class"
            )
            lines.append("# TYPE http_failures_total counter")
            for (profile, error_class), count in sorted(
                self.failures_by_profile_class.items()
            ):
                lines.append(
                    f'http_failures_total{{profile="{profile}",'
                    f'error_class="{error_class}"}} {count}'
                )

            lines.append("# HELP http_bytes_total Response body bytes received")
            lines.append("# TYPE http_bytes_total counter")
            lines.append(f"http_bytes_total {self.bytes_total}")

            lines.append("# HELP html_cache_hits_total Pages served from the cache")
            lines.append("# TYPE html_cache_hits_total counter")
            lines.append(f"html_cache_hits_total {self.cache_hits_total}")

            lines.append("# HELP html_cache_writes_total Pages written to the cache")
            lines.append("# TYPE html_cache_writes_total counter")
            lines.append(f"html_cache_writes_total {self.cache_writes_total}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        """Export metrics as dictionary.

        Returns:
            Dictionary representation of all metrics.
        """
        with self._lock:
            return {
                "responses_by_profile_status": dict(self.responses_by_profile_status),
                "failures_by_profile_class": dict(self.failures_by_profile_class),
                "bytes_total": self.bytes_total,
                "duration_ms_total": self.duration_ms_total,
                "send_count": self.send_count,
                "cache_hits_total": self.cache_hits_total,
                "cache_writes_total": self.cache_writes_total,
            }
