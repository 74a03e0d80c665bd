"""Configuration schema using Pydantic v2.

Example:
    from fido.config.schema import FidoOptions

    options = FidoOptions(enforce_priority=False)
    options = options.model_copy(update={"struct_tag": "cfg"})
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from fido.core.hydrator import DEFAULT_STRUCT_TAG


class FidoOptions(BaseModel):
    """Behaviour switches for a Fido instance.

    Attributes:
        auto_watch: Start watching notify-capable providers on fetch
        auto_update: Re-fetch a watched provider when it signals a change
        enforce_priority: Lower-ranked providers cannot overwrite higher-ranked values
        struct_tag: Metadata key holding each dataclass field's path segment
        error_on_field_not_found: Raise for values addressed to unknown paths
        error_on_missing_tag: Raise for untagged destination fields instead of skipping
        subscriber_buffer: Notifications buffered per subscriber before publish blocks
        watch_poll_interval: Seconds between a watch worker's cancellation checks
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    auto_watch: bool = Field(True, description="Watch notify-capable providers on fetch")
    auto_update: bool = Field(True, description="Re-fetch providers that signal a change")
    enforce_priority: bool = Field(True, description="Enforce provider priority")
    struct_tag: str = Field(DEFAULT_STRUCT_TAG, min_length=1, description="Path tag name")
    error_on_field_not_found: bool = Field(False, description="Raise on unknown paths")
    error_on_missing_tag: bool = Field(True, description="Raise on untagged fields")
    subscriber_buffer: int = Field(1, ge=1, description="Per-subscriber buffer size")
    watch_poll_interval: float = Field(0.05, gt=0.0, description="Watch poll interval (s)")


class LoggingSettings(BaseModel):
    """Logging configuration.

    Attributes:
        level: Level for the ``fido`` logger
        json_output: Emit one JSON object per record instead of plain text
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "WARNING", description="Log level"
    )
    json_output: bool = Field(False, description="Structured JSON log records")


__all__ = ["FidoOptions", "LoggingSettings"]
