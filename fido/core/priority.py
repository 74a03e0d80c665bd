"""Provider priority table.

Providers are ranked in the order they are first added: the first provider
gets rank 1, the second rank 2, and so on. A later provider outranks an
earlier one, so values from providers added last win conflicts.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ProviderHandle:
    """Opaque handle issued to a provider at registration.

    Ownership of fields is recorded with handles, so provider objects never need
    to be hashable or to define equality.
    """

    rank: int
    name: str
    provider: Any = field(repr=False)


class PriorityTable:
    """Maps provider identity to its registration rank."""

    def __init__(self) -> None:
        self._handles: dict[int, ProviderHandle] = {}

    def add(self, provider: Any) -> ProviderHandle:
        """
        Register a provider, idempotently.

        Args:
            provider: Provider object; identity (not equality) is what counts

        Returns:
            The provider's handle; re-adding returns the existing handle
        """
        handle = self._handles.get(id(provider))
        if handle is not None:
            return handle

        handle = ProviderHandle(rank=len(self._handles) + 1, name=str(provider), provider=provider)
        self._handles[id(provider)] = handle
        logger.info("Registered provider %s with priority %d", handle.name, handle.rank)
        return handle

    def handle(self, provider: Any) -> ProviderHandle | None:
        """Return the provider's handle, None if it was never added."""
        return self._handles.get(id(provider))

    def priority(self, provider: Any) -> int:
        """Return the provider's rank, 0 if it was never added."""
        if isinstance(provider, ProviderHandle):
            return provider.rank
        handle = self.handle(provider)
        return handle.rank if handle else 0

    def overrides(self, owner: ProviderHandle | None, writer: ProviderHandle) -> bool:
        """True when ``owner`` strictly outranks ``writer``, i.e. the write must be dropped."""
        return owner is not None and owner.rank > writer.rank

    def __contains__(self, provider: object) -> bool:
        return id(provider) in self._handles

    def __iter__(self) -> Iterator[Any]:
        """Iterate providers in rank order."""
        return iter([h.provider for h in sorted(self._handles.values(), key=lambda h: h.rank)])

    def __len__(self) -> int:
        return len(self._handles)
