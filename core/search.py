"""
Keyword search within an assembled thread.

Works on the same view as the transcript: posts in post_number order with
tombstones removed and markup stripped.
"""

import logging
import re
from typing import Optional

from core.errors import InvalidInput
from models.forum import SearchMatch, Thread
from utils import normalize_content

__all__ = ["search_within", "build_snippet", "SNIPPET_CONTEXT"]

logger = logging.getLogger(__name__)

# Characters of context kept on each side of a match
SNIPPET_CONTEXT = 100


def build_snippet(
    content: str,
    index: int,
    keyword_length: int,
    context: int = SNIPPET_CONTEXT,
) -> str:
    """
    Cut a window of ``context`` characters either side of a match.

    An ellipsis marks each side that was truncated.
    """
    start = max(0, index - context)
    end = min(len(content), index + keyword_length + context)
    prefix = "..." if start > 0 else ""
    suffix = "..." if end < len(content) else ""
    return f"{prefix}{content[start:end]}{suffix}"


def _find(content: str, keyword: str, case_sensitive: bool) -> Optional[tuple[int, int]]:
    """Position and length of the first match, measured in ``content``."""
    if case_sensitive:
        index = content.find(keyword)
        return None if index < 0 else (index, len(keyword))
    match = re.search(re.escape(keyword), content, re.IGNORECASE)
    return None if match is None else (match.start(), match.end() - match.start())


def search_within(
    thread: Thread,
    keyword: str,
    case_sensitive: bool = False,
) -> list[SearchMatch]:
    """
    Find the visible posts containing ``keyword``.

    Only the first occurrence in each post is reported. No matches is an
    empty list, not an error.
    """
    if not keyword:
        raise InvalidInput("A keyword is required")

    matches = []

    for post in thread.visible_posts:
        content = normalize_content(post.body_raw)
        span = _find(content, keyword, case_sensitive)
        if span is None:
            continue
        index, length = span
        matches.append(
            SearchMatch(
                post_number=post.post_number,
                username=post.username,
                created_at=post.created_at,
                snippet=build_snippet(content, index, length),
                full_text=content,
            )
        )

    logger.info(
        f"Found {len(matches)} post(s) containing {keyword!r} "
        f"in {thread.posts_count} visible post(s)"
    )
    return matches
