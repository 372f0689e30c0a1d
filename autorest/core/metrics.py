"""Process-local request metrics exposed through the actuator.

Counters reset when the process restarts. The registry is shared by the
request logging middleware (writer) and the actuator routes (reader).
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Final

from autorest.core.constants import MILLISECONDS_PER_SECOND

HTTP_SERVER_REQUESTS: Final[str] = "http.server.requests"
HTTP_SERVER_ERRORS: Final[str] = "http.server.errors"
PROCESS_UPTIME: Final[str] = "process.uptime"

SERVER_ERROR_STATUS: Final[int] = 500


@dataclass
class _Timer:
    count: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    def record(self, elapsed_ms: float) -> None:
        self.count += 1
        self.total_ms += elapsed_ms
        self.max_ms = max(self.max_ms, elapsed_ms)


class MetricsRegistry:
    """Thread-safe registry of HTTP server metrics."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._started = time.monotonic()
        self._requests = _Timer()
        self._errors = 0
        self._statuses: dict[int, int] = {}

    def record_request(self, status_code: int, elapsed_ms: float) -> None:
        """Record one completed (or failed) request."""
        with self._lock:
            self._requests.record(elapsed_ms)
            self._statuses[status_code] = self._statuses.get(status_code, 0) + 1
            if status_code >= SERVER_ERROR_STATUS:
                self._errors += 1

    def names(self) -> list[str]:
        """Return the names of all available metrics."""
        return sorted([HTTP_SERVER_ERRORS, HTTP_SERVER_REQUESTS, PROCESS_UPTIME])

    def measurements(self, name: str) -> list[dict[str, float | str]] | None:
        """Return the measurements of one metric, or None if it is unknown."""
        with self._lock:
            if name == HTTP_SERVER_REQUESTS:
                return [
                    {"statistic": "COUNT", "value": self._requests.count},
                    {
                        "statistic": "TOTAL_TIME",
                        "value": round(
                            self._requests.total_ms / MILLISECONDS_PER_SECOND, 6
                        ),
                    },
                    {
                        "statistic": "MAX",
                        "value": round(self._requests.max_ms / MILLISECONDS_PER_SECOND, 6),
                    },
                ]
            if name == HTTP_SERVER_ERRORS:
                return [{"statistic": "COUNT", "value": self._errors}]
            if name == PROCESS_UPTIME:
                return [
                    {"statistic": "VALUE", "value": round(time.monotonic() - self._started, 3)}
                ]
        return None

    def status_counts(self) -> dict[str, int]:
        """Return request counts keyed by status code."""
        with self._lock:
            return {str(code): count for code, count in sorted(self._statuses.items())}

    def reset(self) -> None:
        """Reset all counters (used by tests)."""
        with self._lock:
            self._requests = _Timer()
            self._errors = 0
            self._statuses = {}


_registry = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """Return the process-wide metrics registry."""
    return _registry
