"""Adapters turning a read provider into a regular provider.

- StringProvider / from_string: decode a str
- BytesProvider / from_bytes: decode bytes
- FileProvider / from_files: decode every file matching a set of glob patterns

Example:
    provider = from_string(JSONProvider(), '{"server": {"port": 8080}}')
    fido.fetch(provider)
"""

import glob
import io
import logging
from collections.abc import Callable
from typing import IO, Any

from fido.core.context import Context
from fido.core.fetch import Callback
from fido.framework.errors import ProviderError
from fido.providers.protocol import ReadProvider, join_provider_names

logger = logging.getLogger(__name__)

STRING_PROVIDER_NAME = "String"
BYTES_PROVIDER_NAME = "Bytes"
FILES_PROVIDER_NAME = "Files"


class StringProvider:
    """Passes a fixed string to a wrapped read provider."""

    def __init__(self, provider: ReadProvider, value: str) -> None:
        self.provider = provider
        self.value = value

    def __str__(self) -> str:
        return join_provider_names(str(self.provider), STRING_PROVIDER_NAME)

    def values(self, ctx: Context, callback: Callback) -> None:
        self.provider.values(ctx, io.StringIO(self.value), callback)


class BytesProvider:
    """Passes fixed bytes to a wrapped read provider."""

    def __init__(self, provider: ReadProvider, value: bytes) -> None:
        self.provider = provider
        self.value = value

    def __str__(self) -> str:
        return join_provider_names(str(self.provider), BYTES_PROVIDER_NAME)

    def values(self, ctx: Context, callback: Callback) -> None:
        self.provider.values(ctx, io.BytesIO(self.value), callback)


class FileProvider:
    """Opens every file matching its patterns and passes it to a read provider.

    Each matched file is read once per FileProvider; later fetches only pick up
    files that newly match a pattern.
    """

    def __init__(
        self,
        provider: ReadProvider,
        patterns: list[str],
        opener: Callable[[str], IO[Any]] | None = None,
    ) -> None:
        """Initialize file provider.

        Args:
            provider: Read provider decoding each file
            patterns: Absolute paths or glob patterns
            opener: Opens a matched path, defaults to binary ``open``
        """
        self.provider = provider
        self.patterns = list(patterns)
        self.matches: set[str] = set()
        self._open = opener or (lambda name: open(name, "rb"))  # noqa: SIM115

    def __str__(self) -> str:
        return join_provider_names(str(self.provider), FILES_PROVIDER_NAME)

    def values(self, ctx: Context, callback: Callback) -> None:
        for pattern in self.patterns:
            ctx.check()

            for path in sorted(glob.glob(pattern)):
                if path in self.matches:
                    continue

                try:
                    f = self._open(path)
                except OSError as e:
                    msg = f"failed to open {path}"
                    raise ProviderError(msg, str(self), e) from e

                self.matches.add(path)
                logger.debug("Reading %s with %s", path, self.provider)

                with f:
                    self.provider.values(ctx, f, callback)


def from_string(provider: ReadProvider, value: str) -> StringProvider:
    return StringProvider(provider, value)


def from_bytes(provider: ReadProvider, value: bytes) -> BytesProvider:
    return BytesProvider(provider, value)


def from_files(provider: ReadProvider, *patterns: str) -> FileProvider:
    """Build a FileProvider reading every file matching ``patterns``."""
    return FileProvider(provider, list(patterns))


__all__ = [
    "BYTES_PROVIDER_NAME",
    "FILES_PROVIDER_NAME",
    "STRING_PROVIDER_NAME",
    "BytesProvider",
    "FileProvider",
    "StringProvider",
    "from_bytes",
    "from_files",
    "from_string",
]
