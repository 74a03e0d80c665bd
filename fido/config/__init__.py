"""Configuration for fido itself (not for the destination records it fills).

Defaults ship in core_defaults.yaml and can be overridden per key with
FIDO_<SECTION>_<KEY> environment variables or per instance with keyword
overrides.

Example:
    from fido.config import load_options

    options = load_options(enforce_priority=False)
"""

from fido.config.loader import (
    get_config_value,
    load_core_config,
    load_logging_settings,
    load_options,
    reload_config,
)
from fido.config.schema import FidoOptions, LoggingSettings

__all__ = [
    "FidoOptions",
    "LoggingSettings",
    "get_config_value",
    "load_core_config",
    "load_logging_settings",
    "load_options",
    "reload_config",
]
