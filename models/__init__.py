"""
Data models for the Forum Thread MCP.

Provides Pydantic models for tool argument validation, the response
format enum, and the forum dataclasses the core works on.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.config import ResponseFormat, ServerConfig, load_config
from models.forum import PageChunk, Post, SearchMatch, Thread, TopicSummary
from utils import is_valid_url

__all__ = [
    "ResponseFormat",
    "ServerConfig",
    "load_config",
    "Post",
    "PageChunk",
    "Thread",
    "TopicSummary",
    "SearchMatch",
    "ToolResult",
    "ReadThreadInput",
    "SearchForumInput",
    "SearchWithinThreadInput",
]

# ══════════════════════════════════════════════════════════════════════════════
# Tool Result
# ══════════════════════════════════════════════════════════════════════════════


class ToolResult(BaseModel):
    """What every operation hands back to the MCP layer."""

    text: str
    is_error: bool = False
    data: Optional[dict[str, Any]] = None

    @classmethod
    def error(cls, message: str) -> "ToolResult":
        return cls(text=message, is_error=True)


# ══════════════════════════════════════════════════════════════════════════════
# Input Models
# ══════════════════════════════════════════════════════════════════════════════


class _ThreadUrlInput(BaseModel):
    # Strings are kept verbatim; only url is trimmed, in its validator
    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
    )

    url: str = Field(
        ...,
        description=(
            "The full URL of the forum topic "
            "(e.g., https://forum.valuepickr.com/t/ranjans-portfolio/45082)"
        ),
        min_length=1,
        max_length=2000,
    )

    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'markdown' (default) or 'json'",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Only http(s) topic URLs can be fetched."""
        v = v.strip()
        if not is_valid_url(v):
            raise ValueError("Invalid URL provided")
        return v


class ReadThreadInput(_ThreadUrlInput):
    """Input model for reading a whole thread."""


class SearchWithinThreadInput(_ThreadUrlInput):
    """Input model for keyword search inside one thread."""

    keyword: str = Field(
        ...,
        description="The keyword or phrase to search for within the thread",
        min_length=1,
        max_length=500,
    )

    case_sensitive: bool = Field(
        default=False,
        description="Whether the search should be case-sensitive (default: false)",
    )

    @field_validator("keyword")
    @classmethod
    def validate_keyword(cls, v: str) -> str:
        """Reject blank keywords; surrounding spaces are part of the search."""
        if not v.strip():
            raise ValueError("A keyword is required")
        return v


class SearchForumInput(BaseModel):
    """Input model for forum topic search."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
    )

    query: str = Field(
        ...,
        description="The search query (e.g., 'microcap carnage', 'Asian Paints analysis')",
        min_length=1,
        max_length=500,
    )

    limit: int = Field(
        default=10,
        description="Number of results to return (default: 10)",
        ge=1,
        le=50,
    )

    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'markdown' (default) or 'json'",
    )
