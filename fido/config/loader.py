"""
Options loader.

Reads fido's shipped defaults (core_defaults.yaml) once per process and layers
overrides on top, lowest precedence first:

1. core_defaults.yaml, or the file named by FIDO_CORE_CONFIG
2. FIDO_<SECTION>_<KEY> environment variables
3. keyword overrides passed to load_options() / load_logging_settings()

The result is validated through the pydantic models in schema.py.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from fido.config.schema import FidoOptions, LoggingSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "FIDO"
DEFAULTS_FILE = "core_defaults.yaml"

_TRUE_WORDS = frozenset({"true", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "no", "off"})

# Models validating each section, used to vet environment overrides
_SECTION_MODELS: dict[str, type[BaseModel]] = {"options": FidoOptions, "logging": LoggingSettings}

# Parsed defaults with environment overrides applied, per process
_CONFIG_CACHE: dict[str, Any] | None = None


def _defaults_path() -> Path:
    """Locate the defaults file, preferring FIDO_CORE_CONFIG when it exists."""
    custom = os.environ.get(f"{ENV_PREFIX}_CORE_CONFIG")
    if custom:
        candidate = Path(custom)
        if candidate.exists():
            return candidate
        logger.warning("%s_CORE_CONFIG points at missing file %s", ENV_PREFIX, candidate)

    bundled = Path(__file__).resolve().parent / DEFAULTS_FILE
    if not bundled.exists():
        msg = (
            f"fido defaults missing at {bundled}; "
            f"set {ENV_PREFIX}_CORE_CONFIG to a replacement file"
        )
        raise FileNotFoundError(msg)

    return bundled


def _coerce_env_text(text: str) -> Any:
    """Turn environment text into a bool, int or float where it reads as one."""
    lowered = text.lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False

    for number in (int, float):
        try:
            return number(text)
        except ValueError:
            continue

    return text


def _apply_env_overrides(config: dict[str, Any], prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """
    Return a copy of ``config`` with FIDO_<SECTION>_<KEY> variables applied.

    The section is the first underscore-separated word after the prefix, so
    FIDO_OPTIONS_ERROR_ON_FIELD_NOT_FOUND sets ``options.error_on_field_not_found``.
    Variables naming an unknown section or key are skipped. Text is kept as
    text for string settings and coerced for the rest.
    """
    merged = {section: dict(values or {}) for section, values in config.items()}
    marker = f"{prefix}_"

    for name, text in os.environ.items():
        if not name.startswith(marker):
            continue

        section, _, key = name[len(marker) :].lower().partition("_")
        if not key or section not in merged:
            continue

        model = _SECTION_MODELS.get(section)
        setting = model.model_fields.get(key) if model is not None else None
        if model is not None and setting is None:
            logger.warning("Ignoring %s: %s has no setting %r", name, section, key)
            continue

        if setting is not None and setting.annotation is str:
            merged[section][key] = text
        else:
            merged[section][key] = _coerce_env_text(text)
        logger.debug("Environment override %s applied", name)

    return merged


def load_core_config(section: str | None = None, reload: bool = False) -> dict[str, Any]:
    """
    Return the layered defaults, or one section of them.

    Args:
        section: ``"options"`` or ``"logging"``; None for every section
        reload: Re-read the file and environment instead of using the cache

    Returns:
        The whole mapping, or the requested section

    Raises:
        FileNotFoundError: If no defaults file can be found
        KeyError: If ``section`` is not defined

    Example:
        >>> load_core_config("options")["struct_tag"]
        'fido'
    """
    global _CONFIG_CACHE

    if _CONFIG_CACHE is None or reload:
        with open(_defaults_path()) as f:
            _CONFIG_CACHE = _apply_env_overrides(yaml.safe_load(f) or {})

    if section is None:
        return _CONFIG_CACHE

    try:
        return _CONFIG_CACHE[section]
    except KeyError:
        msg = f"unknown config section {section!r}, expected one of {sorted(_CONFIG_CACHE)}"
        raise KeyError(msg) from None


def get_config_value(section: str, *keys: str, default: Any = None) -> Any:
    """Look up a nested value, returning ``default`` when any key is missing."""
    try:
        node: Any = load_core_config(section)
        for key in keys:
            node = node[key]
    except (KeyError, TypeError):
        return default
    return node


def reload_config() -> None:
    """Drop the cache and read the defaults and environment again."""
    global _CONFIG_CACHE
    _CONFIG_CACHE = None
    load_core_config(reload=True)


def load_options(**overrides: Any) -> FidoOptions:
    """
    Build FidoOptions from the layered defaults.

    Args:
        **overrides: Option values taking precedence over file and environment

    Returns:
        Validated options

    Raises:
        pydantic.ValidationError: If a value is out of range or unknown
    """
    return FidoOptions(**{**load_core_config("options"), **overrides})


def load_logging_settings(**overrides: Any) -> LoggingSettings:
    """Build LoggingSettings from the layered defaults."""
    return LoggingSettings(**{**load_core_config("logging"), **overrides})


__all__ = [
    "DEFAULTS_FILE",
    "ENV_PREFIX",
    "get_config_value",
    "load_core_config",
    "load_logging_settings",
    "load_options",
    "reload_config",
]
