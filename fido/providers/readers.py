"""Read providers decoding JSON and YAML documents.

Read providers do not know where their bytes come from; wrap them with
``from_string``, ``from_bytes`` or ``from_files`` to get a regular provider.

Example:
    provider = from_files(YAMLProvider(), "/etc/app/*.yaml")
"""

import json
import logging
from typing import IO, Any

import yaml

from fido.core.context import Context
from fido.core.fetch import Callback
from fido.core.path import Path
from fido.core.walk import walk_map
from fido.framework.errors import ErrorCode, ErrorSeverity, FidoError

logger = logging.getLogger(__name__)

JSON_PROVIDER_NAME = "json"
YAML_PROVIDER_NAME = "yaml"


class DecodeError(FidoError):
    """A document could not be decoded into a mapping."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(
            f"failed to decode {provider}: {message}",
            ErrorCode.PROVIDER_ERROR,
            {"provider": provider},
            severity=ErrorSeverity.USER_ERROR,
        )


def _read_text(reader: IO[Any]) -> str:
    data = reader.read()
    if isinstance(data, bytes):
        return data.decode("utf-8")
    return data


class JSONProvider:
    """Decodes a JSON object and walks it."""

    def __str__(self) -> str:
        return JSON_PROVIDER_NAME

    def values(self, ctx: Context, reader: IO[Any], callback: Callback) -> None:
        text = _read_text(reader)
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            msg = f"failed to unmarshal JSON: {e}"
            raise DecodeError(JSON_PROVIDER_NAME, msg) from e

        if not isinstance(document, dict):
            msg = f"expected an object, got {type(document).__name__}"
            raise DecodeError(JSON_PROVIDER_NAME, msg)

        walk_map(ctx, document, Path(), callback)


class YAMLProvider:
    """Decodes a YAML mapping and walks it. An empty document provides nothing."""

    def __str__(self) -> str:
        return YAML_PROVIDER_NAME

    def values(self, ctx: Context, reader: IO[Any], callback: Callback) -> None:
        text = _read_text(reader)
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            msg = f"failed to unmarshal YAML: {e}"
            raise DecodeError(YAML_PROVIDER_NAME, msg) from e

        if document is None:
            logger.debug("Empty YAML document, nothing to provide")
            return

        if not isinstance(document, dict):
            msg = f"expected a mapping, got {type(document).__name__}"
            raise DecodeError(YAML_PROVIDER_NAME, msg)

        walk_map(ctx, document, Path(), callback)


__all__ = [
    "JSON_PROVIDER_NAME",
    "YAML_PROVIDER_NAME",
    "DecodeError",
    "JSONProvider",
    "YAMLProvider",
]
