"""Bounded, closeable channel used for subscriptions and provider change signals."""

import threading
from collections import deque
from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class ChannelClosed(Exception):
    """Raised when sending to, or receiving from a drained, closed channel."""


class Channel(Generic[T]):
    """A thread-safe FIFO with a bounded buffer.

    ``send`` blocks while the buffer is full, which is what gives publishers
    backpressure from slow subscribers. ``close`` wakes every blocked sender and
    receiver; items already buffered can still be received after close.
    """

    def __init__(self, maxsize: int = 1) -> None:
        if maxsize < 1:
            msg = f"channel buffer must be at least 1, got {maxsize}"
            raise ValueError(msg)
        self.maxsize = maxsize
        self._items: deque[T] = deque()
        self._cond = threading.Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: T, timeout: float | None = None) -> bool:
        """
        Put an item on the channel, blocking while the buffer is full.

        Args:
            item: The item to send
            timeout: Maximum seconds to wait for room, None to wait forever

        Returns:
            True if the item was queued, False if the timeout passed

        Raises:
            ChannelClosed: If the channel is closed
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._closed or len(self._items) < self.maxsize, timeout
            )
            if self._closed:
                msg = "send on closed channel"
                raise ChannelClosed(msg)
            if not ready:
                return False
            self._items.append(item)
            self._cond.notify_all()
            return True

    def receive(self, timeout: float | None = None) -> T | None:
        """
        Take the next item, blocking until one is available.

        Args:
            timeout: Maximum seconds to wait, None to wait forever

        Returns:
            The next item, or None if the timeout passed

        Raises:
            ChannelClosed: If the channel is closed and drained
        """
        with self._cond:
            self._cond.wait_for(lambda: self._closed or bool(self._items), timeout)
            if self._items:
                item = self._items.popleft()
                self._cond.notify_all()
                return item
            if self._closed:
                msg = "receive on closed channel"
                raise ChannelClosed(msg)
            return None

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[T]:
        """Yield items until the channel is closed and drained."""
        while True:
            try:
                item = self.receive()
            except ChannelClosed:
                return
            if item is not None:
                yield item

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)
