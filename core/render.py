"""
Response rendering: markdown and JSON views over threads and results.

Every view is deterministic for a fixed input.
"""

from typing import Any

from models.forum import SearchMatch, Thread, TopicSummary
from utils import iso_date, normalize_content

__all__ = [
    "render_transcript",
    "thread_to_dict",
    "render_matches",
    "matches_to_dict",
    "render_topics",
    "topics_to_dict",
]

SEPARATOR = "\n---\n\n"


def _or_unknown(value: Any) -> Any:
    return "Unknown" if value is None else value


def _completeness_lines(thread: Thread) -> list[str]:
    lines = [
        f"**Posts**: {thread.posts_count} shown of {thread.total_posts_reported} reported"
    ]
    if thread.failed_pages:
        pages = ", ".join(str(p) for p in thread.failed_pages)
        lines.append(
            f"> **Warning**: page(s) {pages} of {thread.total_pages} could not be "
            "fetched; this transcript is incomplete."
        )
    return lines


# ══════════════════════════════════════════════════════════════════════════════
# Thread Transcript
# ══════════════════════════════════════════════════════════════════════════════


def render_transcript(thread: Thread) -> str:
    """Markdown transcript of every visible post, in post order."""
    parts = [
        f"# Thread: {thread.title}",
        (
            f"**Metadata**: {_or_unknown(thread.views)} views | "
            f"{thread.replies} replies | {thread.like_count} likes | "
            f"Category ID: {_or_unknown(thread.category_id)}"
        ),
        f"**URL**: {thread.url}",
        *_completeness_lines(thread),
    ]
    transcript = "\n".join(parts) + "\n" + SEPARATOR

    for post in thread.visible_posts:
        content = normalize_content(post.body_raw)
        transcript += (
            f"### [{post.post_number}] {post.username} ({post.created_date}):\n"
            f"{content}\n" + SEPARATOR
        )
    return transcript


def thread_to_dict(thread: Thread) -> dict[str, Any]:
    """Structured variant of the transcript."""
    return {
        "title": thread.title,
        "url": thread.url,
        "metadata": {
            "views": thread.views,
            "replies": thread.replies,
            "likes": thread.like_count,
            "category_id": thread.category_id,
        },
        "postsCount": thread.posts_count,
        "totalPostsReported": thread.total_posts_reported,
        "totalPages": thread.total_pages,
        "failedPages": list(thread.failed_pages),
        "complete": thread.is_complete,
        "fetch": thread.stats.summary(),
        "transcript": render_transcript(thread),
    }


# ══════════════════════════════════════════════════════════════════════════════
# Search Within Thread
# ══════════════════════════════════════════════════════════════════════════════


def render_matches(thread: Thread, keyword: str, matches: list[SearchMatch]) -> str:
    if not matches:
        return f'No posts found containing "{keyword}" in thread: {thread.title}'

    output = f'# Search Results for "{keyword}" in "{thread.title}"\n\n'
    output += (
        f"**Found {len(matches)} matching post(s) out of "
        f"{thread.total_posts_reported} total posts**\n\n"
    )
    for line in _completeness_lines(thread)[1:]:
        output += f"{line}\n\n"
    output += f"**Thread URL**: {thread.url}\n" + SEPARATOR

    for match in matches:
        output += (
            f"### [Post #{match.post_number}] {match.username} ({match.created_date})\n"
            f"**Context**: {match.snippet}\n\n"
            f"**Full content**:\n{match.full_text}\n" + SEPARATOR
        )
    return output


def matches_to_dict(
    thread: Thread, keyword: str, matches: list[SearchMatch]
) -> dict[str, Any]:
    return {
        "title": thread.title,
        "url": thread.url,
        "keyword": keyword,
        "matchCount": len(matches),
        "postsCount": thread.posts_count,
        "totalPostsReported": thread.total_posts_reported,
        "failedPages": list(thread.failed_pages),
        "complete": thread.is_complete,
        "matches": [m.to_dict() for m in matches],
    }


# ══════════════════════════════════════════════════════════════════════════════
# Topic Search
# ══════════════════════════════════════════════════════════════════════════════


def render_topics(query: str, topics: list[TopicSummary], base_url: str) -> str:
    if not topics:
        return f'No results found for query: "{query}"'

    output = f'# Search Results for "{query}"\n\n'
    for index, topic in enumerate(topics, start=1):
        date = iso_date(topic.created_at)
        output += (
            f"### {index}. {topic.title}\n"
            f"- **URL**: {topic.url_for(base_url)}\n"
            f"- **Date**: {date} | **Replies**: {topic.replies} | "
            f"**Views**: {topic.views}\n\n"
        )
    return output


def topics_to_dict(
    query: str, topics: list[TopicSummary], base_url: str
) -> dict[str, Any]:
    return {
        "query": query,
        "count": len(topics),
        "topics": [
            {**topic.to_dict(), "url": topic.url_for(base_url)} for topic in topics
        ],
    }
