"""Structured logging for fetch rounds and watch workers."""

import json
import logging
from datetime import UTC, datetime
from typing import Any

from fido.config.loader import load_logging_settings
from fido.config.schema import LoggingSettings

ROOT_LOGGER = "fido"

# Extras attached by fido log calls that the JSON formatter carries through
_EXTRA_FIELDS = ("provider", "path", "round_id", "updates", "error_type")


class JSONFormatter(logging.Formatter):
    """ELK/Datadog style JSON output, one object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in _EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(settings: LoggingSettings | None = None) -> logging.Logger:
    """
    Attach a stream handler to the ``fido`` logger.

    Calling this more than once replaces the handler rather than adding another.

    Args:
        settings: Level and output format. Defaults to the ``logging`` section of
            core_defaults.yaml with FIDO_LOGGING_* overrides applied

    Returns:
        The configured ``fido`` logger
    """
    settings = settings or load_logging_settings()
    logger = logging.getLogger(ROOT_LOGGER)

    handler = logging.StreamHandler()
    if settings.json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    # Avoid duplicating handlers when configured repeatedly
    for existing in list(logger.handlers):
        if getattr(existing, "_fido_handler", False):
            logger.removeHandler(existing)
    handler._fido_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(settings.level)

    return logger


__all__ = ["JSONFormatter", "configure_logging"]
