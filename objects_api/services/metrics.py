"""
Request Metrics

Counters and durations for handled requests. The collector is injected into
the HTTP layer; services never touch it.
"""

import threading
from typing import Protocol


class MetricsCollector(Protocol):
    """Counter/histogram interface the HTTP layer reports to"""

    def record_request(self, action: str, duration_ms: float, success: bool) -> None: ...

    def snapshot(self) -> dict: ...


class InMemoryMetrics:
    """Process-local MetricsCollector"""

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self.total_requests = 0
            self.successful_requests = 0
            self.failed_requests = 0
            self.total_duration_ms = 0.0
            self._actions: dict[str, dict[str, float]] = {}

    def record_request(self, action: str, duration_ms: float, success: bool) -> None:
        with self._lock:
            self.total_requests += 1
            self.total_duration_ms += duration_ms
            if success:
                self.successful_requests += 1
            else:
                self.failed_requests += 1

            stats = self._actions.setdefault(
                action, {"count": 0, "failed": 0, "total_duration_ms": 0.0, "max_duration_ms": 0.0}
            )
            stats["count"] += 1
            stats["total_duration_ms"] += duration_ms
            stats["max_duration_ms"] = max(stats["max_duration_ms"], duration_ms)
            if not success:
                stats["failed"] += 1

    def snapshot(self) -> dict:
        with self._lock:
            average = self.total_duration_ms / self.total_requests if self.total_requests else 0.0
            return {
                "total_requests": self.total_requests,
                "successful_requests": self.successful_requests,
                "failed_requests": self.failed_requests,
                "average_duration_ms": round(average, 3),
                "actions": {
                    action: {
                        "count": int(stats["count"]),
                        "failed": int(stats["failed"]),
                        "average_duration_ms": round(stats["total_duration_ms"] / stats["count"], 3),
                        "max_duration_ms": round(stats["max_duration_ms"], 3),
                    }
                    for action, stats in self._actions.items()
                },
            }


_metrics: InMemoryMetrics | None = None


def get_metrics() -> InMemoryMetrics:
    """Get global metrics collector instance"""
    global _metrics
    if _metrics is None:
        _metrics = InMemoryMetrics()
    return _metrics
