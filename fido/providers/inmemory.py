"""In-memory provider.

Holds values as a nested dict and can signal changes, which makes it the
provider of choice for defaults, tests and programmatic overrides.

Example:
    defaults = InMemoryProvider({"server": {"port": 8080}})
    defaults.add("server.host", "localhost")

    fido.fetch(defaults)
    defaults.update("server.port", 9090)  # watched Fido instances re-fetch
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any

from fido.core.channel import Channel, ChannelClosed
from fido.core.context import Context
from fido.core.fetch import Callback
from fido.core.path import Path
from fido.framework.errors import ErrorCode, ErrorSeverity, FidoError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "inmemory"


class InvalidMapKeyError(FidoError):
    """A nested mapping in the provider's values has a non-text key."""

    def __init__(self, path: str, key: Any) -> None:
        super().__init__(
            f"invalid map key {key!r} at {path}",
            ErrorCode.INVALID_MAP_KEY_TYPE,
            {"path": path, "key_type": type(key).__name__},
            severity=ErrorSeverity.USER_ERROR,
        )


class InMemoryProvider:
    """Provider backed by a nested dict."""

    def __init__(self, values: Mapping[str, Any] | None = None, name: str = PROVIDER_NAME) -> None:
        """Initialize in-memory provider.

        Args:
            values: Initial nested values
            name: Name for this provider
        """
        self.name = name
        self._values: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._changes: Channel[Any] | None = None

        for key, value in (values or {}).items():
            self._values[key] = value

    def __str__(self) -> str:
        return self.name

    def add(self, key: str | Path, value: Any) -> None:
        """
        Set a value at a dotted path, creating intermediate dicts.

        Args:
            key: Dotted path, e.g. ``"server.port"``
            value: Value to provide
        """
        path = Path.parse(key)
        with self._lock:
            node = self._values
            for segment in path[:-1]:
                child = node.get(segment)
                if not isinstance(child, dict):
                    child = node[segment] = {}
                node = child
            node[path[-1]] = value

    def update(self, key: str | Path, value: Any) -> None:
        """Set a value and signal watchers that this provider changed."""
        self.add(key, value)
        self.signal()

    def signal(self) -> None:
        """Send a change signal if anyone is watching.

        Signals coalesce: while one is still pending, further ones are dropped.
        """
        if self._changes is None:
            return
        try:
            self._changes.send(self, timeout=0)
        except ChannelClosed:
            logger.debug("Provider %s is closed, dropping change signal", self.name)

    def notify(self) -> Channel[Any]:
        """Return the change channel, creating it on first call."""
        if self._changes is None:
            self._changes = Channel()
        return self._changes

    def close(self) -> None:
        if self._changes is not None:
            self._changes.close()

    def values(self, ctx: Context, callback: Callback) -> None:
        """Walk the stored values, passing every leaf to ``callback``."""
        with self._lock:
            snapshot = _copy(self._values)
        self._walk(ctx, Path(), snapshot, callback)

    def _walk(self, ctx: Context, path: Path, values: dict, callback: Callback) -> None:
        for key, value in values.items():
            ctx.check()

            if isinstance(value, Mapping):
                bad = next((k for k in value if not isinstance(k, str)), None)
                if bad is not None:
                    raise InvalidMapKeyError(path.child(key).key, bad)
                self._walk(ctx, path.child(key), value, callback)
                continue

            callback(path.child(key), value)


def _copy(values: dict) -> dict:
    return {k: _copy(v) if isinstance(v, dict) else v for k, v in values.items()}


__all__ = ["PROVIDER_NAME", "InMemoryProvider", "InvalidMapKeyError"]
