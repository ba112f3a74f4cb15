"""
Post deduplication.

Merges page chunks into one post collection keyed by post id.
The first occurrence of an id wins; later copies are dropped, never used
to overwrite.
"""

import logging
from typing import Iterable

from models.forum import Post

__all__ = ["PostCollection", "sort_posts"]

logger = logging.getLogger(__name__)

# ══════════════════════════════════════════════════════════════════════════════
# Deduplication
# ══════════════════════════════════════════════════════════════════════════════


class PostCollection:
    """
    Order-preserving post list backed by a set of seen ids.

    Membership checks are O(1), so merging a whole thread is linear in the
    number of posts received.
    """

    def __init__(self, posts: Iterable[Post] = ()):
        self._posts: list[Post] = []
        self._seen: set[int] = set()
        self.merge(posts)

    def merge(self, posts: Iterable[Post]) -> int:
        """Append posts whose id is new. Returns the number added."""
        added = 0
        duplicates = 0
        for post in posts:
            if post.id in self._seen:
                duplicates += 1
                continue
            self._seen.add(post.id)
            self._posts.append(post)
            added += 1

        if duplicates:
            logger.debug(f"Deduplication: dropped {duplicates} repeated post(s)")
        return added

    def __len__(self) -> int:
        return len(self._posts)

    def sorted_posts(self) -> list[Post]:
        return sort_posts(self._posts)


def sort_posts(posts: Iterable[Post]) -> list[Post]:
    """Stable ascending sort by post_number."""
    return sorted(posts, key=lambda p: p.post_number)
