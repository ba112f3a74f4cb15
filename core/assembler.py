"""
Thread assembly: walk every page of a topic into one Thread.

Pages are fetched strictly one after another in increasing order, so at
most one request is in flight against the origin and the pacing delay
alone sets the request rate.
"""

import asyncio
import logging
import math
from typing import Any

import httpx

from api.discourse import fetch_first_page, fetch_page
from core.dedup import PostCollection
from core.errors import InvalidInput
from core.metrics import FetchStats
from core.pacing import DEFAULT_POLICY, PacingPolicy
from core.reliability import Sleeper
from models.forum import Thread
from utils import canonical_thread_url, is_valid_url

__all__ = ["ThreadAssembler", "POSTS_PER_PAGE", "count_pages"]

logger = logging.getLogger(__name__)

# Fixed by the origin's pagination
POSTS_PER_PAGE = 20


def count_pages(total_posts: int, posts_per_page: int = POSTS_PER_PAGE) -> int:
    """Number of pages needed for ``total_posts`` posts."""
    if total_posts <= 0:
        return 1
    return math.ceil(total_posts / posts_per_page)


def _reported_post_count(data: dict[str, Any], first_page_size: int) -> int:
    """posts_count, else the stream length, else what page 1 holds."""
    count = data.get("posts_count")
    if isinstance(count, int) and count > 0:
        return count
    stream = (data.get("post_stream") or {}).get("stream")
    if isinstance(stream, list) and stream:
        return len(stream)
    return first_page_size


class ThreadAssembler:
    """
    Reassembles a paginated topic into a deduplicated, sorted Thread.

    Usage:
        async with build_client() as client:
            thread = await ThreadAssembler(client).assemble(url)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        policy: PacingPolicy = DEFAULT_POLICY,
        posts_per_page: int = POSTS_PER_PAGE,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.client = client
        self.policy = policy
        self.posts_per_page = posts_per_page
        self.sleep = sleep

    async def assemble(self, thread_url: str) -> Thread:
        """
        Fetch and merge every page of a topic.

        Raises:
            InvalidInput: the URL is not a well-formed http(s) URL
            SourceUnavailable: page 1 failed or lacks a post stream

        A secondary page that stays unavailable after its retries adds no
        posts; its index is recorded in ``Thread.failed_pages``.
        """
        if not is_valid_url(thread_url):
            raise InvalidInput("Invalid URL provided")

        url = canonical_thread_url(thread_url)
        stats = FetchStats()

        data, first_posts = await fetch_first_page(self.client, url)
        collection = PostCollection(first_posts)

        total_posts = _reported_post_count(data, len(first_posts))
        total_pages = count_pages(total_posts, self.posts_per_page)
        failed_pages: list[int] = []

        if total_pages > 1:
            delay = self.policy.delay_seconds(total_pages)
            logger.info(
                f"Using {self.policy.delay_for(total_pages)}ms delay for {total_pages} pages"
            )
            for page in range(2, total_pages + 1):
                if delay > 0:
                    await self.sleep(delay)
                chunk = await fetch_page(
                    self.client, url, page, stats=stats, sleep=self.sleep
                )
                if chunk is None:
                    logger.warning(f"Page {page} unavailable; continuing without it")
                    failed_pages.append(page)
                    continue
                collection.merge(chunk.posts)

        thread = Thread(
            title=data.get("title") or "(untitled)",
            url=url,
            total_posts_reported=total_posts,
            posts=collection.sorted_posts(),
            views=data.get("views"),
            reply_count=data.get("reply_count"),
            like_count=data.get("like_count") or 0,
            category_id=data.get("category_id"),
            total_pages=total_pages,
            failed_pages=failed_pages,
            stats=stats,
        )
        logger.info(
            f"Assembled {len(thread.posts)}/{total_posts} posts from {total_pages} "
            f"page(s), {len(failed_pages)} unavailable"
        )
        return thread
