"""
Forum API Integrations.

Async access to Discourse forums through their public JSON endpoints.
Functions take an explicit ``httpx.AsyncClient`` created by the caller
with ``build_client``:

    async with build_client() as client:
        data = await fetch_first_page(client, url)

Endpoints:
─────────────────────────────────────────────────────────────────────────────
    fetch_first_page     {topic}.json          page 1 + metadata, no retry
    fetch_page           {topic}.json?page=N   3 attempts, 1s apart
    search_topics        /search/query.json    topic search, origin order
"""

from api.discourse import (
    DEFAULT_FORUM,
    build_client,
    fetch_first_page,
    fetch_page,
    parse_posts,
    search_topics,
)

__all__ = [
    "DEFAULT_FORUM",
    "build_client",
    "fetch_first_page",
    "fetch_page",
    "parse_posts",
    "search_topics",
]
