"""
Fetch statistics for a single thread assembly.

One FetchStats value is owned by each assembly; nothing is shared
across requests.
"""

import time
from dataclasses import dataclass, field
from typing import Any

__all__ = ["FetchStats"]

# ══════════════════════════════════════════════════════════════════════════════
# Metrics Classes
# ══════════════════════════════════════════════════════════════════════════════


@dataclass
class FetchStats:
    """Track page fetch attempts for one assembly."""

    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    retry_count: int = 0
    total_latency_ms: float = 0.0
    started_at: float = field(default_factory=time.monotonic)
    error_types: dict[str, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        if self.total_calls == 0:
            return 0.0
        return (self.successful_calls / self.total_calls) * 100

    @property
    def avg_latency_ms(self) -> float:
        if self.successful_calls == 0:
            return 0.0
        return self.total_latency_ms / self.successful_calls

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self.started_at

    def record_success(self, latency_ms: float):
        self.total_calls += 1
        self.successful_calls += 1
        self.total_latency_ms += latency_ms

    def record_failure(self, error_type: str):
        self.total_calls += 1
        self.failed_calls += 1
        self.error_types[error_type] = self.error_types.get(error_type, 0) + 1

    def record_retry(self):
        self.retry_count += 1

    def summary(self) -> dict[str, Any]:
        return {
            "requests": self.total_calls,
            "failed": self.failed_calls,
            "retries": self.retry_count,
            "avg_latency_ms": round(self.avg_latency_ms, 0),
            "elapsed_seconds": round(self.elapsed_seconds, 2),
        }
