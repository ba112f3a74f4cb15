"""
Error taxonomy for thread retrieval and search.

Every operation catches ForumError at its boundary and reports the
message to the caller as an error result.
"""

__all__ = [
    "ForumError",
    "InvalidInput",
    "SourceUnavailable",
    "PageUnavailable",
    "UpstreamShapeError",
]


class ForumError(Exception):
    """Base class for all forum retrieval errors."""


class InvalidInput(ForumError):
    """Malformed URL or a missing required argument. Never retried."""


class SourceUnavailable(ForumError):
    """The first page could not be fetched or lacks a post stream. Fatal."""


class PageUnavailable(ForumError):
    """A secondary page failed after all attempts. Never fatal."""

    def __init__(self, page: int, message: str = ""):
        self.page = page
        super().__init__(message or f"Page {page} unavailable")


class UpstreamShapeError(ForumError):
    """A successful response is missing expected fields."""
