"""Provider protocols.

A provider pushes ``(path, value)`` pairs into the callback it is given. It may
optionally support being closed and signalling changes.

Example:
    class StaticProvider:
        '''Provides a fixed pair of values.'''

        def __str__(self) -> str:
            return "static"

        def values(self, ctx: Context, callback: Callback) -> None:
            callback("server.host", "0.0.0.0")
            callback("server.port", 8080)
"""

from typing import IO, Any, Protocol, runtime_checkable

from fido.core.channel import Channel
from fido.core.context import Context
from fido.core.fetch import Callback

PROVIDER_NAME_SEPARATOR = "."


def join_provider_names(*names: str) -> str:
    """Join provider names, e.g. ``json`` and ``Files`` into ``json.Files``."""
    return PROVIDER_NAME_SEPARATOR.join(names)


@runtime_checkable
class Provider(Protocol):
    """A source of configuration values.

    ``values`` calls ``callback`` once per pair, in any order, and must let the
    first exception raised by the callback propagate. Well-behaved providers
    call ``ctx.check()`` before producing each item.
    """

    def values(self, ctx: Context, callback: Callback) -> None: ...


@runtime_checkable
class ReadProvider(Protocol):
    """Decodes values from a readable stream, e.g. JSON or YAML text."""

    def values(self, ctx: Context, reader: IO[Any], callback: Callback) -> None: ...


@runtime_checkable
class CloseProvider(Protocol):
    """A provider holding resources that should be released on shutdown."""

    def close(self) -> None: ...


@runtime_checkable
class NotifyProvider(Protocol):
    """A provider that can signal when its values change.

    ``notify`` returns a channel the provider sends to on every change and
    closes when it stops supplying values.
    """

    def notify(self) -> Channel[Any]: ...


__all__ = [
    "CloseProvider",
    "NotifyProvider",
    "Provider",
    "ReadProvider",
    "join_provider_names",
]
