"""
Fetch coordinator.

Runs one fetch round for one provider: the provider pushes ``(path, value)``
pairs into a resolution callback which looks the path up, materializes map
entries, applies priority arbitration and coerces the value into the
destination. Accepted writes are collected, in order, as FieldUpdates.

Provider code is untrusted: anything it raises is converted into a FidoError
at this boundary and never propagates further.
"""

import logging
from collections.abc import Callable
from typing import Any

from fido.core.coercion import values_equal
from fido.core.context import Context
from fido.core.maps import materialize_field
from fido.core.notify import FieldUpdate
from fido.core.path import Path
from fido.core.priority import PriorityTable, ProviderHandle
from fido.core.registry import FieldRegistry
from fido.framework.errors import (
    CoercionError,
    ExpectedMapError,
    FidoError,
    FieldNotFoundError,
    InvalidMapKeyTypeError,
    InvalidPathError,
    NotAddressableError,
    to_fido_error,
)

logger = logging.getLogger(__name__)

Callback = Callable[[Path | str, Any], None]

_MATERIALIZE_ERRORS = (
    ExpectedMapError,
    InvalidMapKeyTypeError,
    InvalidPathError,
    NotAddressableError,
)


def _annotate(err: FidoError, path: Path, value: Any) -> FidoError:
    """Attach the written path and value to an error raised while applying it."""
    err.details["path"] = path.key
    err.message = f"{err.message}: failed to set field {path} value {value!r}"
    err.args = (err.message,)
    return err


class FetchCoordinator:
    """Applies provider values to the registry.

    Attributes:
        registry: Path registry of the destination
        priorities: Provider priority table
        enforce_priority: Drop writes to fields owned by a higher-ranked provider
        error_on_field_not_found: Raise on unknown paths instead of ignoring them
    """

    def __init__(
        self,
        registry: FieldRegistry,
        priorities: PriorityTable,
        enforce_priority: bool = True,
        error_on_field_not_found: bool = False,
    ) -> None:
        self.registry = registry
        self.priorities = priorities
        self.enforce_priority = enforce_priority
        self.error_on_field_not_found = error_on_field_not_found

    def fetch(self, ctx: Context, provider: Any) -> list[FieldUpdate]:
        """
        Run one fetch round for ``provider``.

        Args:
            ctx: Cancellation context
            provider: Provider to pull values from

        Returns:
            The accepted writes, in the order they were applied

        Raises:
            CancelledError: If ctx was cancelled before or during the round
            FidoError: The first lookup, materialization or coercion error, or the
                provider's own fault converted by ``to_fido_error``
        """
        ctx.check()

        handle = self.priorities.add(provider)
        updates: list[FieldUpdate] = []

        try:
            provider.values(ctx, self.resolver(ctx, handle, updates))
        except BaseException as exc:
            err = to_fido_error(exc, handle.name)
            if err is exc:
                raise
            logger.warning("Provider %s raised %s", handle.name, type(exc).__name__)
            raise err from exc

        logger.debug("Provider %s applied %d updates", handle.name, len(updates))

        return updates

    def resolver(
        self, ctx: Context, handle: ProviderHandle, updates: list[FieldUpdate]
    ) -> Callback:
        """Build the callback given to a provider for one round."""

        def callback(path: Path | str, value: Any) -> None:
            ctx.check()
            update = self.resolve(Path.parse(path), value, handle)
            if update is not None:
                updates.append(update)

        return callback

    def resolve(self, path: Path, value: Any, handle: ProviderHandle) -> FieldUpdate | None:
        """
        Apply one value to the field at ``path``.

        Returns:
            The FieldUpdate for an accepted write, None when the value was a
            no-op, overridden by a higher-ranked provider or not addressed to a
            known field (with error_on_field_not_found unset)
        """
        materialized = False

        while True:
            field = self.registry.get(path)
            if field is None:
                if self.error_on_field_not_found:
                    raise FieldNotFoundError(path.key)
                logger.debug("Ignoring %s from %s: no such field", path, handle.name)
                return None

            if not materialized and field.path.is_ancestor_of(path) and field.descriptor.is_map:
                try:
                    materialize_field(self.registry, path, field)
                except _MATERIALIZE_ERRORS as e:
                    raise _annotate(e, path, value) from None
                materialized = True
                continue

            break

        current = field.value
        if values_equal(current, value):
            return None

        if self.enforce_priority and self.priorities.overrides(field.provider, handle):
            logger.debug(
                "Dropping %s from %s: owned by %s", path, handle.name, field.provider.name
            )
            return None

        try:
            new = field.set(value, handle)
        except CoercionError as e:
            raise _annotate(e, path, value) from None

        return FieldUpdate(path=path, old=current, new=new, provider=handle.provider)


__all__ = ["Callback", "FetchCoordinator"]
