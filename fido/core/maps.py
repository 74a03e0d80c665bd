"""Lazy materialization of map-typed destination entries.

A map field is registered at its own path only (say ``labels``). When a
provider writes ``labels.team`` the registry resolves the ancestor
``labels``; the materializer then makes sure the destination dict exists
(allocating nested dicts along the way for ``dict[str, dict[str, T]]``) and
registers a MapField at ``labels.team`` that all later writes go through.
"""

import logging
from typing import Any

from fido.core.fields import CellSlot, EntrySlot, Field, MapField
from fido.core.kinds import Kind, TypeDescriptor
from fido.core.path import Path
from fido.core.registry import FieldRegistry
from fido.framework.errors import (
    ExpectedMapError,
    InvalidMapKeyTypeError,
    InvalidPathError,
    NotAddressableError,
)

logger = logging.getLogger(__name__)


def materialize(segments: Path, slot: Any) -> tuple[dict, TypeDescriptor]:
    """
    Resolve (allocating as needed) the dict a map entry write should land in.

    Args:
        segments: Path segments below the map field, the last one being the entry key
        slot: Slot holding the map

    Returns:
        The innermost dict reached and the descriptor of its values

    Raises:
        ExpectedMapError: If the slot is not map-typed
        InvalidMapKeyTypeError: If the map is not keyed by text
        NotAddressableError: If the map is unset and its slot cannot be written
        InvalidPathError: If a nested map is addressed with fewer than two segments
    """
    desc = slot.descriptor.deref()
    if desc.kind is not Kind.MAP:
        raise ExpectedMapError(segments.key, str(desc))

    if desc.key.deref().kind is not Kind.STRING:
        raise InvalidMapKeyTypeError(segments.key, str(desc.key))

    mapping = slot.get()
    if mapping is None:
        if not slot.writable:
            raise NotAddressableError(segments.key)
        mapping = {}
        slot.set(mapping)
        logger.debug("Initialised map %s for %s", desc, segments)

    if desc.elem.is_map:
        if len(segments) < 2:  # noqa: PLR2004
            msg = f"cannot initialise nested map with path of length {len(segments)}"
            raise InvalidPathError(msg, segments.key)

        parent, children = segments[0], Path(segments[1:])
        return materialize(children, EntrySlot(mapping, parent, desc.elem))

    return mapping, desc.elem


def materialize_field(registry: FieldRegistry, path: Path, ancestor: Field) -> MapField:
    """
    Replace the registry entry at ``path`` with a MapField below ``ancestor``.

    Args:
        registry: Registry to update
        path: Exact path a provider wrote to
        ancestor: Registered map field that ``path`` resolved to

    Returns:
        The newly registered MapField
    """
    segments = Path(path[len(ancestor.path) :])
    mapping, elem = materialize(segments, ancestor.slot)

    key = segments[-1]
    cell = CellSlot(elem)
    if key in mapping:
        # Entries the destination already holds start from their current value
        cell.set(mapping[key])

    field = MapField(path, cell, dst=mapping, key=key)
    registry.set(path, field)

    logger.debug("Registered map entry field %s under %s", path, ancestor.path)

    return field


__all__ = ["materialize", "materialize_field"]
