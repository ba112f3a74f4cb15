#!/usr/bin/env python3
"""
Forum Thread MCP Server

An MCP server that reads complete Discourse forum threads, no matter how
many pages they span, and searches inside them.

Features:
- Full thread reconstruction (all pages, deduplicated, in post order)
- Size-aware request pacing to stay under the forum's rate limits
- Retry on flaky pages; a lost page never sinks the whole thread
- Keyword search within a thread with context snippets
- Topic search across the forum
- Markdown or JSON output, with explicit completeness reporting
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import httpx
from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from api import build_client, search_topics
from core.assembler import ThreadAssembler
from core.errors import ForumError
from core.reliability import Sleeper
from core.render import (
    matches_to_dict,
    render_matches,
    render_topics,
    thread_to_dict,
    topics_to_dict,
)
from core.search import search_within
from models import (
    ReadThreadInput,
    ResponseFormat,
    SearchForumInput,
    SearchWithinThreadInput,
    ServerConfig,
    ToolResult,
    load_config,
)

logger = logging.getLogger("forum_thread_mcp")

# Load environment variables from .env file
load_dotenv()

CONFIG = load_config()

# Initialize MCP server
mcp = FastMCP("forum_thread_mcp", port=CONFIG.port)

# Read-only tool annotations shared by every tool
READ_ONLY = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": True,
}


def _validation_message(error: ValidationError) -> str:
    """First validation problem, phrased for the caller."""
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "input"
    message = first.get("msg", "invalid value").removeprefix("Value error, ")
    return f"{message} ({field})"


def _dump(payload: dict) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


# ============================================================================
# Operations
# ============================================================================


async def read_thread(
    url: str,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
    *,
    config: Optional[ServerConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Sleeper = asyncio.sleep,
) -> ToolResult:
    """Assemble a whole thread and render it. Never raises."""
    config = config or CONFIG
    try:
        params = ReadThreadInput(url=url, response_format=response_format)
        async with build_client(config.request_timeout, transport) as client:
            thread = await ThreadAssembler(client, sleep=sleep).assemble(params.url)
    except ValidationError as e:
        logger.info(f"Rejected read_forum_thread input: {e}")
        return ToolResult.error(f"Error: {_validation_message(e)}")
    except ForumError as e:
        logger.error(f"Error fetching thread {url}: {e}")
        return ToolResult.error(f"Error fetching thread: {e}")
    except Exception as e:
        logger.exception(f"Unexpected error reading thread {url}")
        return ToolResult.error(f"Error fetching thread: {e}")

    data = thread_to_dict(thread)
    if params.response_format == ResponseFormat.JSON:
        return ToolResult(text=_dump(data), data=data)
    return ToolResult(text=data["transcript"], data=data)


async def search_forum_topics(
    query: str,
    limit: int = 10,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
    *,
    config: Optional[ServerConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ToolResult:
    """Run a topic search against the configured forum. Never raises."""
    config = config or CONFIG
    try:
        params = SearchForumInput(
            query=query, limit=limit, response_format=response_format
        )
        async with build_client(config.request_timeout, transport) as client:
            topics = await search_topics(
                client,
                params.query,
                params.limit,
                base_url=config.forum_base_url,
            )
    except ValidationError as e:
        logger.info(f"Rejected search_forum input: {e}")
        return ToolResult.error(f"Error: {_validation_message(e)}")
    except ForumError as e:
        logger.error(f"Error searching forum for {query!r}: {e}")
        return ToolResult.error(f"Error searching forum: {e}")
    except Exception as e:
        logger.exception(f"Unexpected error searching forum for {query!r}")
        return ToolResult.error(f"Error searching forum: {e}")

    data = topics_to_dict(params.query, topics, config.forum_base_url)
    if params.response_format == ResponseFormat.JSON:
        return ToolResult(text=_dump(data), data=data)
    return ToolResult(
        text=render_topics(params.query, topics, config.forum_base_url), data=data
    )


async def search_thread(
    url: str,
    keyword: str,
    case_sensitive: bool = False,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
    *,
    config: Optional[ServerConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Sleeper = asyncio.sleep,
) -> ToolResult:
    """Assemble a thread and return the posts containing a keyword. Never raises."""
    config = config or CONFIG
    try:
        params = SearchWithinThreadInput(
            url=url,
            keyword=keyword,
            case_sensitive=case_sensitive,
            response_format=response_format,
        )
        async with build_client(config.request_timeout, transport) as client:
            thread = await ThreadAssembler(client, sleep=sleep).assemble(params.url)
        matches = search_within(thread, params.keyword, params.case_sensitive)
    except ValidationError as e:
        logger.info(f"Rejected search_within_thread input: {e}")
        return ToolResult.error(f"Error: {_validation_message(e)}")
    except ForumError as e:
        logger.error(f"Error searching within thread {url}: {e}")
        return ToolResult.error(f"Error searching within thread: {e}")
    except Exception as e:
        logger.exception(f"Unexpected error searching within thread {url}")
        return ToolResult.error(f"Error searching within thread: {e}")

    data = matches_to_dict(thread, params.keyword, matches)
    if params.response_format == ResponseFormat.JSON:
        return ToolResult(text=_dump(data), data=data)
    return ToolResult(text=render_matches(thread, params.keyword, matches), data=data)


def _deliver(result: ToolResult) -> str:
    """Hand a result to FastMCP; errors become MCP error results."""
    if result.is_error:
        raise ToolError(result.text)
    return result.text


# ============================================================================
# MCP Tools
# ============================================================================


@mcp.tool(
    name="read_forum_thread",
    annotations={"title": "Read Forum Thread", **READ_ONLY},
)
async def read_forum_thread(
    url: str, response_format: ResponseFormat = ResponseFormat.MARKDOWN
) -> str:
    """
    Read a ValuePickr/Discourse forum thread in full.

    Pagination is handled automatically: every page of the topic is
    fetched in order, duplicates are dropped and deleted posts hidden.

    Args:
        url (str): The full URL of the forum topic
            (e.g., https://forum.valuepickr.com/t/ranjans-portfolio/45082)
        response_format (str): 'markdown' (default) or 'json'

    Returns:
        str: The transcript, or a JSON object with title, metadata,
            postsCount, totalPostsReported, failedPages and transcript.

    Notes:
        - Large threads are paced (up to 200ms between pages)
        - If a page cannot be fetched the result says so explicitly
    """
    return _deliver(await read_thread(url, response_format))


@mcp.tool(
    name="search_forum",
    annotations={"title": "Search Forum Topics", **READ_ONLY},
)
async def search_forum(
    query: str,
    limit: int = 10,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    Search the forum for topics matching a query.

    Args:
        query (str): The search query (e.g., 'microcap carnage', 'Asian Paints analysis')
        limit (int): Number of results to return (default: 10)
        response_format (str): 'markdown' (default) or 'json'

    Returns:
        str: Ranked topic list with URL, date, replies and views.
    """
    return _deliver(await search_forum_topics(query, limit, response_format))


@mcp.tool(
    name="search_within_thread",
    annotations={"title": "Search Within Forum Thread", **READ_ONLY},
)
async def search_within_thread(
    url: str,
    keyword: str,
    case_sensitive: bool = False,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    Search for a keyword within a specific forum thread.

    Fetches the entire thread and returns only the posts containing the
    keyword, each with a snippet of surrounding context.

    Args:
        url (str): The full URL of the forum topic
        keyword (str): The keyword or phrase to search for
        case_sensitive (bool): Whether the search is case-sensitive (default: false)
        response_format (str): 'markdown' (default) or 'json'

    Returns:
        str: Matching posts with context snippets and full content.
    """
    return _deliver(
        await search_thread(url, keyword, case_sensitive, response_format)
    )


@mcp.custom_route("/", methods=["GET"])
async def health(request: Request) -> JSONResponse:
    """Health check for HTTP deployments."""
    return JSONResponse(
        {
            "status": "running",
            "protocol": "mcp-sse",
            "endpoints": {"sse": "/sse", "messages": "/messages/"},
        }
    )


# ============================================================================
# Main Entry Point
# ============================================================================


def configure_logging(level: str) -> None:
    """Log to stderr; stdout carries the stdio transport."""
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    configure_logging(CONFIG.log_level)
    if CONFIG.transport == "sse":
        logger.warning(f"Forum Thread MCP (SSE) listening on port {CONFIG.port}")
    mcp.run(transport=CONFIG.transport)


if __name__ == "__main__":
    main()
