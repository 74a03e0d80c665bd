"""Field updates, notifications and the bus that publishes them to subscribers."""

import logging
import threading
from dataclasses import dataclass
from typing import Any

from fido.core.channel import Channel, ChannelClosed
from fido.core.path import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldUpdate:
    """One accepted write.

    Attributes:
        path: Path the provider wrote to
        old: Value held before the write
        new: Coerced value held after the write
        provider: The provider that wrote it
    """

    path: Path
    old: Any
    new: Any
    provider: Any


@dataclass(frozen=True)
class Notification:
    """Outcome of one fetch round: a batch of updates or a single error."""

    updates: tuple[FieldUpdate, ...] = ()
    error: Exception | None = None

    @classmethod
    def batch(cls, updates: list[FieldUpdate]) -> "Notification":
        return cls(updates=tuple(updates))

    @classmethod
    def failure(cls, error: Exception) -> "Notification":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def result(self) -> tuple[FieldUpdate, ...]:
        """Return the updates, raising the round's error if it failed."""
        if self.error is not None:
            raise self.error
        return self.updates


class NotificationBus:
    """Fans notifications out to subscriber channels.

    Publishing blocks on a subscriber whose buffer is full, so a slow
    subscriber slows the fetch round publishing to it.
    """

    def __init__(self, buffer: int = 1) -> None:
        self.buffer = buffer
        self._subscribers: list[Channel[Notification]] = []
        self._lock = threading.Lock()

    def subscribe(self) -> Channel[Notification]:
        """Open a new subscription channel, open until :meth:`close`."""
        channel: Channel[Notification] = Channel(self.buffer)
        with self._lock:
            self._subscribers.append(channel)
        logger.debug("Added subscriber, %d total", len(self._subscribers))
        return channel

    def publish(self, notification: Notification) -> None:
        """Deliver ``notification`` to every open subscriber, in subscription order."""
        with self._lock:
            subscribers = list(self._subscribers)

        for channel in subscribers:
            try:
                channel.send(notification)
            except ChannelClosed:
                logger.debug("Skipping closed subscriber")

    def close(self) -> None:
        """Close every subscriber channel."""
        with self._lock:
            subscribers, self._subscribers = self._subscribers, []

        for channel in subscribers:
            channel.close()

        logger.debug("Closed %d subscribers", len(subscribers))

    def __len__(self) -> int:
        return len(self._subscribers)


__all__ = ["FieldUpdate", "Notification", "NotificationBus"]
