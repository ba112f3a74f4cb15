"""Configuration enums and server settings for the Forum Thread MCP."""

import os
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class ResponseFormat(str, Enum):
    """Output format for tool responses."""

    MARKDOWN = "markdown"  # Human-readable transcript
    JSON = "json"  # Structured, includes completeness fields


class ServerConfig(BaseModel):
    """Runtime settings, read from the environment (or a .env file)."""

    port: int = Field(default=3000, ge=1, le=65535)
    transport: Literal["stdio", "sse"] = "stdio"
    forum_base_url: str = "https://forum.valuepickr.com"
    request_timeout: float = Field(default=30.0, gt=0)
    log_level: str = "WARNING"

    @field_validator("forum_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()


def load_config(environ: Optional[dict[str, str]] = None) -> ServerConfig:
    """Build a ServerConfig from environment variables, falling back to defaults."""
    env = os.environ if environ is None else environ
    mapping = {
        "port": "PORT",
        "transport": "MCP_TRANSPORT",
        "forum_base_url": "FORUM_BASE_URL",
        "request_timeout": "REQUEST_TIMEOUT",
        "log_level": "LOG_LEVEL",
    }
    values = {field: env[var] for field, var in mapping.items() if env.get(var)}
    return ServerConfig(**values)
