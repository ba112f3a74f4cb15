"""
Core thread-assembly engine for the Forum Thread MCP.

    Pacing Policy      Inter-request delay tiers by thread size
    Retry Logic        Bounded, constant-delay retry for page fetches
    Deduplication      First-seen-wins merge keyed by post id
    Assembler          Sequential page walk into one sorted Thread
    Search             Keyword matches with context snippets
    Render             Markdown and JSON views

Only the leaf modules are re-exported here; ``core.assembler``,
``core.dedup``, ``core.search`` and ``core.render`` depend on the data
models and are imported directly.
"""

from core.errors import (
    ForumError,
    InvalidInput,
    PageUnavailable,
    SourceUnavailable,
    UpstreamShapeError,
)
from core.metrics import FetchStats
from core.pacing import DEFAULT_POLICY, PacingPolicy, PacingTier, delay_for
from core.reliability import resilient_api_call

__all__ = [
    # Errors
    "ForumError",
    "InvalidInput",
    "SourceUnavailable",
    "PageUnavailable",
    "UpstreamShapeError",
    # Pacing
    "PacingPolicy",
    "PacingTier",
    "DEFAULT_POLICY",
    "delay_for",
    # Reliability
    "resilient_api_call",
    # Metrics
    "FetchStats",
]
