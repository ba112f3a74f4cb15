"""Forum data models: posts, threads, topic summaries and search matches."""

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from core.metrics import FetchStats
from utils import iso_date


@dataclass
class Post:
    """
    A single post in a thread's post stream.

    ``id`` is the dedup key; ``post_number`` is the display and sort key.
    A post with ``deleted_at`` set is a tombstone: kept during assembly,
    hidden from every rendered view.
    """

    id: int
    post_number: int
    username: str = "unknown"
    created_at: Optional[str] = None
    body_raw: str = ""
    deleted_at: Optional[str] = None

    @classmethod
    def from_api(cls, record: dict[str, Any]) -> "Post":
        """Build a Post from one ``post_stream.posts`` record."""
        return cls(
            id=int(record["id"]),
            post_number=int(record.get("post_number") or 0),
            username=record.get("username") or "unknown",
            created_at=record.get("created_at"),
            body_raw=record.get("cooked") or "",
            deleted_at=record.get("deleted_at"),
        )

    @property
    def is_tombstone(self) -> bool:
        return bool(self.deleted_at)

    @property
    def created_date(self) -> str:
        return iso_date(self.created_at)


@dataclass
class PageChunk:
    """One page of posts, identified by its 1-based index."""

    page: int
    posts: list[Post] = field(default_factory=list)


@dataclass
class Thread:
    """
    A fully assembled topic.

    ``posts`` holds at most one entry per id, ascending by post_number, and
    still includes tombstones. ``len(posts)`` may differ from
    ``total_posts_reported``; ``failed_pages`` records pages that returned
    no data so callers can tell when the transcript is incomplete.
    """

    title: str
    url: str
    total_posts_reported: int
    posts: list[Post] = field(default_factory=list)
    views: Optional[int] = None
    reply_count: Optional[int] = None
    like_count: int = 0
    category_id: Optional[int] = None
    total_pages: int = 1
    failed_pages: list[int] = field(default_factory=list)
    stats: FetchStats = field(default_factory=FetchStats)

    @property
    def visible_posts(self) -> list[Post]:
        """Posts in display order with tombstones removed."""
        return [p for p in self.posts if not p.is_tombstone]

    @property
    def posts_count(self) -> int:
        return len(self.visible_posts)

    @property
    def replies(self) -> int:
        if self.reply_count:
            return self.reply_count
        return max(0, self.total_posts_reported - 1)

    @property
    def is_complete(self) -> bool:
        return not self.failed_pages and len(self.posts) >= self.total_posts_reported


@dataclass
class TopicSummary:
    """One topic from the forum search endpoint."""

    id: int
    slug: str
    title: str
    created_at: Optional[str] = None
    views: int = 0
    posts_count: int = 0

    @classmethod
    def from_api(cls, record: dict[str, Any]) -> "TopicSummary":
        return cls(
            id=int(record["id"]),
            slug=record.get("slug") or "",
            title=record.get("title") or "(untitled)",
            created_at=record.get("created_at"),
            views=int(record.get("views") or 0),
            posts_count=int(record.get("posts_count") or 0),
        )

    @property
    def replies(self) -> int:
        return max(0, self.posts_count - 1)

    def url_for(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/t/{self.slug}/{self.id}"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SearchMatch:
    """A post containing the keyword, with a context snippet."""

    post_number: int
    username: str
    created_at: Optional[str]
    snippet: str
    full_text: str

    @property
    def created_date(self) -> str:
        return iso_date(self.created_at)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
