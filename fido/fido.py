"""
Fido: aggregates configuration from many providers into one dataclass.

Example:
    @dataclass
    class Config:
        host: str = config_field("host", default="")
        port: UInt16 = config_field("port", default=0)
        labels: dict[str, str] | None = config_field("labels", default=None)

    def report(updates):
        for notification in updates:
            logger.info("updates: %s", notification.result())

    cfg = Config()
    with Fido(cfg) as f:
        threading.Thread(target=report, args=(f.subscribe(),), daemon=True).start()
        f.fetch(
            InMemoryProvider({"host": "localhost", "port": 8080}),
            from_files(YAMLProvider(), "/etc/app/*.yaml"),
        )

Providers added later outrank providers added earlier: a value written by the
YAML files above cannot be overwritten by the in-memory defaults.

Publishing a round's notification blocks while a subscriber's buffer is full,
so subscriptions are drained on another thread (as above), or opened only
after the synchronous fetch has returned.
"""

import logging
import threading
import uuid
from typing import Any

from fido.config.loader import load_options
from fido.config.schema import FidoOptions
from fido.core.channel import Channel, ChannelClosed
from fido.core.context import Context
from fido.core.fetch import FetchCoordinator
from fido.core.fields import Field
from fido.core.hydrator import hydrate
from fido.core.notify import Notification, NotificationBus
from fido.core.path import Path
from fido.core.priority import PriorityTable
from fido.framework.errors import FidoError, InternalError, ProviderError
from fido.providers.protocol import CloseProvider, NotifyProvider

logger = logging.getLogger(__name__)


class Fido:
    """Keeps a destination dataclass populated from a set of providers.

    Attributes:
        options: Behaviour switches, see FidoOptions
        registry: Path registry built from the destination
        priorities: Provider ranks, in the order providers were first added
    """

    def __init__(self, dst: Any, options: FidoOptions | None = None, **overrides: Any) -> None:
        """Hydrate the destination.

        Args:
            dst: Destination dataclass instance
            options: Options to use instead of the configured defaults
            **overrides: Individual option values, applied on top of ``options``

        Raises:
            DestinationError: If dst is not a dataclass instance
            StructTagNotFoundError: If a field is untagged and error_on_missing_tag is set
            pydantic.ValidationError: If an option value is invalid
        """
        if options is None:
            options = load_options(**overrides)
        elif overrides:
            options = FidoOptions(**{**options.model_dump(), **overrides})

        self.options = options
        self.registry = hydrate(dst, options.struct_tag, options.error_on_missing_tag)
        self.priorities = PriorityTable()
        self.coordinator = FetchCoordinator(
            self.registry,
            self.priorities,
            enforce_priority=options.enforce_priority,
            error_on_field_not_found=options.error_on_field_not_found,
        )
        self.bus = NotificationBus(options.subscriber_buffer)

        # Fetch rounds mutate the registry and priority table; one at a time.
        self._lock = threading.RLock()
        self._watch_lock = threading.Lock()
        self._watching: dict[int, threading.Thread] = {}
        self._stopping = Context()
        self._closed = False

        logger.debug("Fido ready with %d fields", len(self.registry))

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    def add(self, *providers: Any) -> None:
        """Register providers; each new provider outranks every earlier one."""
        for provider in providers:
            self.priorities.add(provider)

    def priority(self, provider: Any) -> int:
        """Return a provider's rank, 0 if it was never added."""
        return self.priorities.priority(provider)

    def field(self, path: Path | str) -> Field | None:
        """Look up the field a write to ``path`` would land in."""
        return self.registry.get(Path.parse(path))

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def fetch(self, *providers: Any, ctx: Context | None = None) -> None:
        """
        Fetch values from every known provider, in rank order.

        Given providers are added first. With ``auto_watch`` set, providers that
        can signal changes are watched from here on.

        Args:
            *providers: Providers to add before fetching
            ctx: Cancellation context, defaults to a background context

        Raises:
            CancelledError: If ctx is cancelled; writes already applied stay
            FidoError: The first error from any provider's round
        """
        ctx = ctx or Context.background()
        self.add(*providers)

        for provider in self.priorities:
            ctx.check()

            if self.options.auto_watch:
                self.watch(ctx=ctx)

            self._round(ctx, provider)

    def _round(self, ctx: Context, provider: Any) -> Notification:
        """Run one fetch round and publish its outcome."""
        round_id = uuid.uuid4().hex[:8]
        name = str(provider)

        try:
            with self._lock:
                updates = self.coordinator.fetch(ctx, provider)
        except FidoError as e:
            logger.warning(
                "Fetch from %s failed: %s",
                name,
                e,
                extra={"provider": name, "round_id": round_id, "error_type": type(e).__name__},
            )
            self.bus.publish(Notification.failure(e))
            raise

        logger.info(
            "Fetched %d updates from %s",
            len(updates),
            name,
            extra={"provider": name, "round_id": round_id, "updates": len(updates)},
        )

        notification = Notification.batch(updates)
        self.bus.publish(notification)
        return notification

    # ------------------------------------------------------------------
    # Watching
    # ------------------------------------------------------------------

    def watch(self, *providers: Any, ctx: Context | None = None) -> None:
        """
        Start one background worker per notify-capable provider not yet watched.

        Args:
            *providers: Providers to add before starting workers
            ctx: Cancellation context shared by the workers

        Raises:
            ProviderError: If a provider's notify() fails
        """
        ctx = ctx or Context.background()
        self.add(*providers)

        with self._watch_lock:
            for provider in self.priorities:
                if not isinstance(provider, NotifyProvider) or id(provider) in self._watching:
                    continue

                try:
                    changes = provider.notify()
                except Exception as e:
                    msg = f"failed to start provider {provider} notifier"
                    raise ProviderError(msg, str(provider), e) from e

                thread = threading.Thread(
                    target=self._watch,
                    args=(ctx, provider, changes),
                    name=f"fido-watch-{provider}",
                    daemon=True,
                )
                self._watching[id(provider)] = thread
                thread.start()

    def _watch(self, ctx: Context, provider: Any, changes: Channel[Any]) -> None:
        """Worker loop: re-fetch ``provider`` whenever it signals a change."""
        name = str(provider)
        logger.info("Watching provider %s", name, extra={"provider": name})

        # Cancellation and shutdown are noticed at the next poll of the change channel
        while not (ctx.cancelled or self._stopping.cancelled):
            try:
                signal = changes.receive(timeout=self.options.watch_poll_interval)
            except ChannelClosed:
                logger.info("Provider %s closed its change channel", name, extra={"provider": name})
                return

            if signal is None or not self.options.auto_update:
                continue

            try:
                self._round(ctx, provider)
            except FidoError:
                # Already published as an error notification
                continue
            except Exception as e:
                logger.exception("Unexpected error watching %s", name, extra={"provider": name})
                self.bus.publish(Notification.failure(InternalError(f"watch {name} failed", e)))

        logger.info("Stopped watching provider %s", name, extra={"provider": name})

    # ------------------------------------------------------------------
    # Subscriptions and shutdown
    # ------------------------------------------------------------------

    def subscribe(self) -> Channel[Notification]:
        """Subscribe to one Notification per fetch round, until shutdown.

        Rounds block on a full subscription, so drain it from another thread
        when it is opened before a synchronous fetch of several providers.
        """
        return self.bus.subscribe()

    def shutdown(self) -> None:
        """
        Close providers, wait for watch workers, then close subscriber channels.

        Raises:
            ProviderError: The first provider close() failure, after cleanup finished
        """
        if self._closed:
            logger.warning("Fido already shut down")
            return
        self._closed = True

        first_error: ProviderError | None = None
        for provider in self.priorities:
            if not isinstance(provider, CloseProvider):
                continue
            try:
                provider.close()
            except Exception as e:
                logger.warning("Failed to close provider %s: %s", provider, e)
                if first_error is None:
                    first_error = ProviderError(f"failed to close {provider}", str(provider), e)
                    first_error.__cause__ = e

        self._stopping.cancel()

        with self._watch_lock:
            workers = list(self._watching.values())
        for thread in workers:
            thread.join()

        self.bus.close()

        logger.debug("Fido shut down, %d workers stopped", len(workers))

        if first_error is not None:
            raise first_error

    close = shutdown

    def __enter__(self) -> "Fido":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


__all__ = ["Fido"]
