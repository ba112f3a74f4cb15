"""
Reliability utilities: bounded retry for page fetches.

A page that keeps failing is reported as missing data rather than an
exception, so one bad page never aborts a whole thread.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional

from core.metrics import FetchStats

__all__ = [
    "resilient_api_call",
    "Sleeper",
]

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[Any]]

# ══════════════════════════════════════════════════════════════════════════════
# Retry Logic
# ══════════════════════════════════════════════════════════════════════════════


async def resilient_api_call(
    func: Callable[..., Awaitable[Any]],
    *args,
    max_attempts: int = 3,
    retry_delay: float = 1.0,
    default: Any = None,
    label: str = "request",
    stats: Optional[FetchStats] = None,
    sleep: Sleeper = asyncio.sleep,
    **kwargs,
) -> Any:
    """
    Execute an async function with automatic retry logic.

    The same call is repeated after a fixed ``retry_delay``; there is no
    backoff.

    Args:
        func: Async function to call
        *args: Positional arguments
        max_attempts: Total attempts, including the first
        retry_delay: Seconds between attempts
        default: Value returned once every attempt has failed
        label: Name used in log messages
        stats: Optional per-assembly fetch statistics
        sleep: Awaitable sleep, injectable for tests
        **kwargs: Keyword arguments

    Returns:
        Result from func, or ``default`` on failure
    """
    for attempt in range(1, max_attempts + 1):
        started = time.monotonic()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            if stats is not None:
                stats.record_failure(type(e).__name__)
            logger.warning(
                f"Error fetching {label} (attempt {attempt}/{max_attempts}): "
                f"{type(e).__name__}: {e}"
            )
            if attempt < max_attempts:
                if stats is not None:
                    stats.record_retry()
                await sleep(retry_delay)
            continue

        if stats is not None:
            stats.record_success((time.monotonic() - started) * 1000)
        return result

    logger.error(f"Giving up on {label} after {max_attempts} attempts")
    return default
