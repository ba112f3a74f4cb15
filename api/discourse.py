"""
Discourse Forum Client.

Fetches topic pages and topic search results from the public JSON
endpoints every Discourse instance serves:

    {topic_url}.json            first page plus topic metadata
    {topic_url}.json?page=N     page N of the post stream (20 posts)
    /search/query.json?term=Q   topic search

The caller owns the ``httpx.AsyncClient`` and passes it in; this module
keeps no global transport state.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from core.errors import (
    InvalidInput,
    PageUnavailable,
    SourceUnavailable,
    UpstreamShapeError,
)
from core.metrics import FetchStats
from core.reliability import Sleeper, resilient_api_call
from models.forum import PageChunk, Post, TopicSummary
from utils import is_valid_url, thread_json_url

__all__ = [
    "build_client",
    "fetch_first_page",
    "fetch_page",
    "parse_posts",
    "search_topics",
    "DEFAULT_FORUM",
]

# ══════════════════════════════════════════════════════════════════════════════
# Configuration
# ══════════════════════════════════════════════════════════════════════════════

API_TIMEOUT = 30.0
PAGE_ATTEMPTS = 3
RETRY_DELAY = 1.0  # seconds between attempts, no backoff

DEFAULT_FORUM = "https://forum.valuepickr.com"

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json",
}

logger = logging.getLogger(__name__)

# ══════════════════════════════════════════════════════════════════════════════
# Transport
# ══════════════════════════════════════════════════════════════════════════════


def build_client(
    timeout: float = API_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the HTTP client for one operation.

    Every call made through it sends a browser-like identity, asks for
    JSON and is bounded by ``timeout`` seconds.
    """
    return httpx.AsyncClient(
        headers=DEFAULT_HEADERS,
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        transport=transport,
    )


async def _get_json(
    client: httpx.AsyncClient,
    url: str,
    params: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    response = await client.get(url, params=params)
    response.raise_for_status()
    data = response.json()
    if not isinstance(data, dict):
        raise UpstreamShapeError(f"Expected a JSON object from {url}")
    return data


def parse_posts(data: dict[str, Any]) -> Optional[list[Post]]:
    """
    Extract posts from a topic response.

    Returns None when the response has no ``post_stream.posts`` array.
    Records without an id, or with fields that do not parse, are skipped.
    """
    post_stream = data.get("post_stream")
    if not isinstance(post_stream, dict):
        return None
    records = post_stream.get("posts")
    if not isinstance(records, list):
        return None

    posts = []
    for record in records:
        if not isinstance(record, dict) or record.get("id") is None:
            logger.debug(f"Skipping post record without id: {record!r:.80}")
            continue
        try:
            posts.append(Post.from_api(record))
        except (TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed post record {record.get('id')!r}: {e}")
    return posts


# ══════════════════════════════════════════════════════════════════════════════
# Topic Pages
# ══════════════════════════════════════════════════════════════════════════════


async def fetch_first_page(
    client: httpx.AsyncClient, thread_url: str
) -> tuple[dict[str, Any], list[Post]]:
    """
    Fetch page 1 and the topic metadata. Not retried.

    Returns the raw topic object together with the posts parsed from it.

    Raises:
        InvalidInput: ``thread_url`` is not an http(s) URL
        SourceUnavailable: the request failed or the response has no post stream
    """
    if not is_valid_url(thread_url):
        raise InvalidInput("Invalid URL provided")

    json_url = thread_json_url(thread_url)
    logger.info(f"Fetching initial topic: {json_url}")

    try:
        data = await _get_json(client, json_url)
    except httpx.HTTPStatusError as e:
        raise SourceUnavailable(
            f"Forum returned HTTP {e.response.status_code} for {json_url}"
        ) from e
    except (httpx.HTTPError, ValueError, UpstreamShapeError) as e:
        raise SourceUnavailable(f"Could not fetch {json_url}: {e}") from e

    posts = parse_posts(data)
    if posts is None:
        raise SourceUnavailable("Invalid Discourse topic URL or no data returned.")
    return data, posts


async def fetch_page(
    client: httpx.AsyncClient,
    thread_url: str,
    page: int,
    *,
    stats: Optional[FetchStats] = None,
    sleep: Sleeper = asyncio.sleep,
    max_attempts: int = PAGE_ATTEMPTS,
    retry_delay: float = RETRY_DELAY,
) -> Optional[PageChunk]:
    """
    Fetch one secondary page of a topic's post stream.

    Transport failures are retried with a constant delay, same page each
    time. Once every attempt has failed the page is reported as missing
    (None) so the caller can carry on with the posts it already has.

    Args:
        client: Shared client owned by the calling operation
        thread_url: Topic URL (canonicalized here)
        page: 1-based page index
        stats: Optional per-assembly fetch statistics
        sleep: Awaitable sleep, injectable for tests
        max_attempts: Total attempts before giving up
        retry_delay: Seconds between attempts

    Returns:
        The page's posts, or None when the page is unavailable
    """
    json_url = thread_json_url(thread_url, page=page)

    async def _attempt() -> dict[str, Any]:
        logger.info(f"Fetching page {page}: {json_url}")
        try:
            return await _get_json(client, json_url)
        except (httpx.HTTPError, ValueError, UpstreamShapeError) as e:
            raise PageUnavailable(page, f"Page {page}: {e}") from e

    data = await resilient_api_call(
        _attempt,
        max_attempts=max_attempts,
        retry_delay=retry_delay,
        default=None,
        label=f"page {page}",
        stats=stats,
        sleep=sleep,
    )
    if data is None:
        return None

    posts = parse_posts(data)
    if posts is None:
        logger.warning(f"Page {page} has no post stream; treating it as empty")
        return PageChunk(page=page, posts=[])
    return PageChunk(page=page, posts=posts)


# ══════════════════════════════════════════════════════════════════════════════
# Topic Search
# ══════════════════════════════════════════════════════════════════════════════


async def search_topics(
    client: httpx.AsyncClient,
    query: str,
    limit: int = 10,
    *,
    base_url: str = DEFAULT_FORUM,
) -> list[TopicSummary]:
    """
    Search a Discourse forum for topics.

    Results keep the order the forum ranked them in and are cut to
    ``limit``. A response without a ``topics`` field is an empty result.

    Example:
        >>> async with build_client() as client:
        ...     topics = await search_topics(client, "Asian Paints", limit=5)
    """
    if not query or not query.strip():
        raise InvalidInput("A search query is required")

    search_url = f"{base_url.rstrip('/')}/search/query.json"
    logger.info(f"Searching: {search_url} term={query!r}")

    try:
        data = await _get_json(client, search_url, params={"term": query})
    except (httpx.HTTPError, ValueError, UpstreamShapeError) as e:
        raise SourceUnavailable(f"Search failed on {base_url}: {e}") from e

    records = data.get("topics")
    if not isinstance(records, list):
        logger.info(f"No topics field in search response for {query!r}")
        return []

    topics = []
    for record in records:
        if len(topics) >= limit:
            break
        if not isinstance(record, dict) or record.get("id") is None:
            continue
        try:
            topics.append(TopicSummary.from_api(record))
        except (TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed topic record {record.get('id')!r}: {e}")
    return topics
