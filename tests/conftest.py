"""Pytest configuration, lightweight asyncio support and a fake forum.

Async tests run without ``pytest-asyncio``: a small compatibility shim

* accepts the ``--asyncio-mode`` CLI flag so pytest startup does not abort, and
* detects coroutine test functions and executes them on a fresh event loop.

The ``forum`` fixture serves Discourse-shaped JSON through
``httpx.MockTransport`` so no test touches the network, and ``sleeper``
records every wait instead of sleeping.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Optional

import httpx
import pytest

TOPIC_URL = "https://forum.example.com/t/asian-paints-analysis/1234"


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register a no-op ``--asyncio-mode`` option for compatibility."""

    parser.addoption(
        "--asyncio-mode",
        action="store",
        default="auto",
        help="Compat shim for async tests without pytest-asyncio",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: run the coroutine test on an event loop")


def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute coroutine test functions on an event loop.

    Returning ``True`` tells pytest the call was handled, preventing the
    default (which would error on an un-awaited coroutine).
    """

    test_obj = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_obj):
        return None

    bound_args = {
        name: value
        for name, value in pyfuncitem.funcargs.items()
        if name in inspect.signature(test_obj).parameters
    }

    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        loop.run_until_complete(test_obj(**bound_args))
    finally:
        loop.close()
        asyncio.set_event_loop(None)

    return True


# ══════════════════════════════════════════════════════════════════════════════
# Fakes
# ══════════════════════════════════════════════════════════════════════════════


def make_post(
    post_id: int,
    post_number: Optional[int] = None,
    body: str = "",
    *,
    username: str = "investor",
    created_at: str = "2024-01-15T10:30:00.000Z",
    deleted_at: Optional[str] = None,
) -> dict[str, Any]:
    """A post record as Discourse returns it."""
    return {
        "id": post_id,
        "post_number": post_id if post_number is None else post_number,
        "username": username,
        "created_at": created_at,
        "cooked": body or f"<p>Post body {post_id}</p>",
        "deleted_at": deleted_at,
    }


class FakeForum:
    """
    In-memory Discourse topic served over ``httpx.MockTransport``.

    ``pages`` maps a page index to the post records it returns; pages not
    listed are cut from ``posts`` in chunks of 20. ``failures`` maps a
    page index to how many requests for it fail with HTTP 503 first.
    """

    def __init__(
        self,
        posts: list[dict[str, Any]],
        *,
        posts_count: Optional[int] = None,
        title: str = "Asian Paints - Analysis",
        pages: Optional[dict[int, list[dict[str, Any]]]] = None,
        failures: Optional[dict[int, int]] = None,
        topic: Optional[dict[str, Any]] = None,
        search_response: Optional[dict[str, Any]] = None,
    ):
        self.posts = posts
        self.posts_count = len(posts) if posts_count is None else posts_count
        self.title = title
        self.pages = pages or {}
        self.failures = dict(failures or {})
        self.topic = topic
        self.search_response = search_response
        self.requests: list[httpx.Request] = []

    def page_posts(self, page: int) -> list[dict[str, Any]]:
        if page in self.pages:
            return self.pages[page]
        return self.posts[(page - 1) * 20 : page * 20]

    @property
    def requested_pages(self) -> list[int]:
        return [
            int(r.url.params.get("page", 1))
            for r in self.requests
            if r.url.path.endswith(".json") and "/search/" not in r.url.path
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path.endswith("/search/query.json"):
            return httpx.Response(200, json=self.search_response or {})

        page = int(request.url.params.get("page", 1))
        if self.failures.get(page, 0) > 0:
            self.failures[page] -= 1
            return httpx.Response(503, json={"errors": ["busy"]})

        if page == 1 and self.topic is not None:
            return httpx.Response(200, json=self.topic)

        body: dict[str, Any] = {"post_stream": {"posts": self.page_posts(page)}}
        if page == 1:
            body.update(
                {
                    "title": self.title,
                    "posts_count": self.posts_count,
                    "views": 5120,
                    "reply_count": self.posts_count - 1,
                    "like_count": 42,
                    "category_id": 7,
                }
            )
        return httpx.Response(200, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        from api.discourse import build_client

        return build_client(transport=self.transport)


class RecordingSleep:
    """Stands in for ``asyncio.sleep`` and records every requested wait."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def forum() -> Callable[..., FakeForum]:
    """Factory for fake forums."""
    return FakeForum


@pytest.fixture
def post() -> Callable[..., dict[str, Any]]:
    """Factory for post records."""
    return make_post


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def topic_url() -> str:
    return TOPIC_URL
