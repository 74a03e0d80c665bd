"""Cancellation signal shared by fetch rounds and watch workers."""

import threading

from fido.framework.errors import CancelledError


class Context:
    """A cancellable execution context.

    A context is cancelled when :meth:`cancel` is called on it or on any of its
    ancestors. Cancellation never rolls anything back; it only makes
    :meth:`check` raise so in-flight work stops at its next checkpoint.

    Example:
        ctx = Context()
        worker_ctx = ctx.child()
        ctx.cancel()
        worker_ctx.cancelled  # True
    """

    def __init__(self, parent: "Context | None" = None) -> None:
        self._parent = parent
        self._event = threading.Event()

    @classmethod
    def background(cls) -> "Context":
        """Return a fresh context that is never cancelled unless asked to."""
        return cls()

    def child(self) -> "Context":
        """Derive a context cancelled together with this one."""
        return Context(parent=self)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        ctx: Context | None = self
        while ctx is not None:
            if ctx._event.is_set():
                return True
            ctx = ctx._parent
        return False

    def check(self) -> None:
        """Raise CancelledError if this context has been cancelled."""
        if self.cancelled:
            raise CancelledError
