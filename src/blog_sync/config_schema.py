"""Configuration schema for blog_sync.

Defines Pydantic models for the YAML config structure with one section per
concern.  Every field has a default, so an empty config file (or none at
all) is valid and environment variables or CLI arguments supply the rest.

Usage:
    from blog_sync.config_loader import load_hierarchical_config
    from blog_sync.config_schema import build_config

    unified = build_config(load_hierarchical_config())
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class BlogConfig(BaseModel):
    """Blog service settings."""

    alias: str | None = Field(default=None, description="Collection alias")
    root: str | None = Field(
        default=None, description="Directory holding the post files"
    )
    login: str | None = Field(default=None, description="Account name")
    password: str | None = Field(default=None, description="Account password")
    endpoint: str | None = Field(default=None, description="API endpoint URL")

    model_config = {"frozen": True}


class ImagesConfig(BaseModel):
    """Image hosting settings.

    ``login`` and ``password`` default to the blog credentials when unset.
    """

    backend: Literal["snapas", "webdav"] | None = Field(
        default=None, description="Image store backend"
    )
    login: str | None = Field(default=None, description="Image store login")
    password: str | None = Field(
        default=None, description="Image store password"
    )
    snapas_endpoint: str | None = Field(
        default=None, description="Snap.as API endpoint URL"
    )
    webdav_endpoint: str | None = Field(
        default=None, description="WebDAV endpoint URL"
    )
    webdav_published_url: str | None = Field(
        default=None,
        description="Public URL under which the WebDAV images are served",
    )

    model_config = {"frozen": True}


class RetryConfig(BaseModel):
    """Retry policy for remote post listing and writes."""

    attempts: int = Field(default=5, ge=1, le=50)
    backoff: Literal["linear", "exponential"] = Field(default="linear")
    delay: float = Field(default=0.5, ge=0, description="Base delay (seconds)")
    initial_delay: float = Field(
        default=0.0, ge=0, description="Added to each exponential step"
    )
    max_delay: float = Field(default=30.0, ge=0)

    model_config = {"frozen": True}


class HttpConfig(BaseModel):
    """HTTP client settings."""

    connect_timeout: float = Field(default=10.0, gt=0)
    read_timeout: float = Field(default=60.0, gt=0)
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: "text" or "json".
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: Literal["text", "json"] = Field(default="text")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level configuration aggregating all sections."""

    blog: BlogConfig = Field(default_factory=BlogConfig)
    images: ImagesConfig = Field(default_factory=ImagesConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Missing sections get defaults.

    Raises:
        pydantic.ValidationError: If a section has invalid values.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
