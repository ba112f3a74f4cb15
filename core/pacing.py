"""
Pacing policy for sequential page fetches.

Larger threads need more requests against the same origin, so the delay
inserted before every page after the first grows with the page count.
"""

from dataclasses import dataclass, field
from typing import Optional

__all__ = ["PacingTier", "PacingPolicy", "DEFAULT_POLICY", "delay_for"]

# ══════════════════════════════════════════════════════════════════════════════
# Tiers
# ══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PacingTier:
    """Delay applied to threads with at most ``max_pages`` pages."""

    max_pages: Optional[int]  # None = no upper bound
    delay_ms: int


DEFAULT_TIERS: tuple[PacingTier, ...] = (
    PacingTier(max_pages=50, delay_ms=0),  # up to 1000 posts
    PacingTier(max_pages=99, delay_ms=100),  # up to 1980 posts
    PacingTier(max_pages=None, delay_ms=200),
)


@dataclass(frozen=True)
class PacingPolicy:
    """Maps a thread's page count to an inter-request delay."""

    tiers: tuple[PacingTier, ...] = field(default=DEFAULT_TIERS)

    def delay_for(self, total_pages: int) -> int:
        """Delay in milliseconds before each page fetch beyond the first."""
        for tier in self.tiers:
            if tier.max_pages is None or total_pages <= tier.max_pages:
                return tier.delay_ms
        return self.tiers[-1].delay_ms

    def delay_seconds(self, total_pages: int) -> float:
        return self.delay_for(total_pages) / 1000.0

    def max_request_rate(self, total_pages: int) -> Optional[float]:
        """
        Ceiling on secondary page requests per second.

        Returns None when the tier inserts no delay (the rate is then bound
        only by the single in-flight request).
        """
        delay_ms = self.delay_for(total_pages)
        if delay_ms <= 0:
            return None
        return 1000.0 / delay_ms


DEFAULT_POLICY = PacingPolicy()


def delay_for(total_pages: int) -> int:
    """Delay in milliseconds for the default tiers."""
    return DEFAULT_POLICY.delay_for(total_pages)
