"""Unified configuration schema for notion_docs_sync.

Defines Pydantic models for the YAML config structure with dedicated
sections for the Notion connection, sync behaviour, and logging.

Usage:
    from notion_docs_sync.config_schema import build_config, to_fallbacks

    raw = load_hierarchical_config()
    unified = build_config(raw)
    config = load_config(yaml_fallbacks=to_fallbacks(unified))
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class NotionConfig(BaseModel):
    """Notion connection settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    token: str | None = Field(
        default=None, description="Notion integration token"
    )
    destination_id: str | None = Field(
        default=None, description="Destination page id or URL"
    )
    api_version: str | None = Field(
        default=None, description="Notion-Version header value"
    )
    requests_per_window: int = Field(
        default=3,
        ge=1,
        le=100,
        description="Request budget per pacing window (1-100)",
    )
    window_seconds: float = Field(
        default=1.0, gt=0, description="Pacing window length in seconds"
    )
    request_timeout: float = Field(
        default=60.0, gt=0, description="HTTP read timeout in seconds"
    )

    model_config = {"frozen": True}


class SyncConfig(BaseModel):
    """Sync behaviour settings."""

    source: str | None = Field(
        default=None, description="Directory holding the markdown tree"
    )
    append_batch_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Blocks per append call (Notion accepts at most 100)",
    )
    hydrate_children: bool = Field(
        default=False,
        description="Fetch nested children of remote blocks before comparing",
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


class UnifiedConfig(BaseModel):
    """Top-level configuration.

    Every section has sensible defaults, so ``UnifiedConfig()`` is valid.
    """

    notion: NotionConfig = Field(default_factory=NotionConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Factory / adapter
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the dict returned by
    ``load_hierarchical_config()``.  Missing sections get defaults.

    Raises:
        pydantic.ValidationError: If a value is out of range.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


def to_fallbacks(unified: UnifiedConfig) -> dict[str, Any]:
    """Flatten the ``notion`` and ``sync`` sections into the fallback dict
    accepted by ``config.load_config``.  ``None`` values are dropped so
    they never shadow built-in defaults.
    """
    merged = {
        **unified.notion.model_dump(),
        **unified.sync.model_dump(),
    }
    return {k: v for k, v in merged.items() if v is not None}
