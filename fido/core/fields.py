"""Destination slots and the registry entries (fields) that wrap them."""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from fido.core.coercion import assign
from fido.core.kinds import TypeDescriptor
from fido.core.path import Path

if TYPE_CHECKING:
    from fido.core.priority import ProviderHandle

logger = logging.getLogger(__name__)


# ============================================================================
# Slots
# ============================================================================


class AttributeSlot:
    """A dataclass attribute. Unwritable when the owning dataclass is frozen."""

    def __init__(self, owner: Any, name: str, descriptor: TypeDescriptor) -> None:
        self.owner = owner
        self.name = name
        self.descriptor = descriptor

    @property
    def writable(self) -> bool:
        params = getattr(type(self.owner), "__dataclass_params__", None)
        return not (params is not None and params.frozen)

    def get(self) -> Any:
        return getattr(self.owner, self.name)

    def set(self, value: Any) -> None:
        setattr(self.owner, self.name, value)

    def __str__(self) -> str:
        return f"{type(self.owner).__name__}.{self.name}"


class EntrySlot:
    """The value stored at one key of a dict."""

    writable = True

    def __init__(self, mapping: dict, key: str, descriptor: TypeDescriptor) -> None:
        self.mapping = mapping
        self.key = key
        self.descriptor = descriptor

    def get(self) -> Any:
        return self.mapping.get(self.key)

    def set(self, value: Any) -> None:
        self.mapping[self.key] = value

    def __str__(self) -> str:
        return f"[{self.key!r}]"


class CellSlot:
    """A free-standing slot, holding the zero value of its type until set."""

    writable = True

    def __init__(self, descriptor: TypeDescriptor) -> None:
        self.descriptor = descriptor
        self.value = descriptor.zero()

    def get(self) -> Any:
        return self.value

    def set(self, value: Any) -> None:
        self.value = value

    def __str__(self) -> str:
        return f"cell[{self.descriptor}]"


# ============================================================================
# Fields
# ============================================================================


class FieldKind(str, Enum):
    """Registry entry variants."""

    STATIC = "static"  # declared on the destination, registered at hydrate time
    MAP_SLOT = "map_slot"  # entry of a map field, registered lazily during fetch


class Field:
    """Binds a path to a destination slot and the provider that last wrote it."""

    kind: ClassVar[FieldKind] = FieldKind.STATIC

    def __init__(self, path: Path, slot: Any) -> None:
        self.path = path
        self.slot = slot
        self.provider: ProviderHandle | None = None

    @property
    def descriptor(self) -> TypeDescriptor:
        return self.slot.descriptor

    @property
    def value(self) -> Any:
        return self.slot.get()

    def set(self, value: Any, provider: "ProviderHandle") -> Any:
        """
        Coerce and store a value, recording the writing provider.

        Args:
            value: Raw provider value
            provider: Handle of the writing provider

        Returns:
            The coerced value now held by the field
        """
        coerced = assign(self.slot, value)
        self.provider = provider
        return coerced

    def __str__(self) -> str:
        return self.path.key

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path.key!r}, type={self.descriptor})"


class MapField(Field):
    """A lazily registered entry of a map-typed destination.

    Writes are coerced into a private cell of the map's element type first; only
    the coerced value is then stored in the destination map at ``key``.
    """

    kind: ClassVar[FieldKind] = FieldKind.MAP_SLOT

    def __init__(self, path: Path, slot: CellSlot, dst: dict, key: str) -> None:
        super().__init__(path, slot)
        self.dst = dst
        self.key = key

    def set(self, value: Any, provider: "ProviderHandle") -> Any:
        coerced = super().set(value, provider)
        self.dst[self.key] = self.slot.get()
        logger.debug("Set map entry %r for %s", self.key, self.path)
        return coerced


__all__ = [
    "AttributeSlot",
    "CellSlot",
    "EntrySlot",
    "Field",
    "FieldKind",
    "MapField",
]
