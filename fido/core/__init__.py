"""
Aggregation engine.

The pieces, leaves first:
- kinds / coercion: destination type descriptors and value conversion
- path / fields / registry / hydrator: the path-indexed field registry
- maps: lazy registration of map entries
- priority: provider ranking and write arbitration
- fetch: one fetch round per provider
- notify / channel / context: publishing, subscriptions and cancellation
"""

from fido.core.channel import Channel, ChannelClosed
from fido.core.coercion import assign, coerce, values_equal
from fido.core.context import Context
from fido.core.fetch import Callback, FetchCoordinator
from fido.core.fields import AttributeSlot, CellSlot, EntrySlot, Field, FieldKind, MapField
from fido.core.hydrator import DEFAULT_STRUCT_TAG, Tag, config_field, hydrate, lookup_tag
from fido.core.kinds import (
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    Kind,
    TypeDescriptor,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    Width,
    describe,
)
from fido.core.maps import materialize, materialize_field
from fido.core.notify import FieldUpdate, Notification, NotificationBus
from fido.core.path import Path
from fido.core.priority import PriorityTable, ProviderHandle
from fido.core.registry import FieldRegistry
from fido.core.walk import walk_map

__all__ = [
    "DEFAULT_STRUCT_TAG",
    "AttributeSlot",
    "Callback",
    "CellSlot",
    "Channel",
    "ChannelClosed",
    "Context",
    "EntrySlot",
    "FetchCoordinator",
    "Field",
    "FieldKind",
    "FieldRegistry",
    "FieldUpdate",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Kind",
    "MapField",
    "Notification",
    "NotificationBus",
    "Path",
    "PriorityTable",
    "ProviderHandle",
    "Tag",
    "TypeDescriptor",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Width",
    "assign",
    "coerce",
    "config_field",
    "describe",
    "hydrate",
    "lookup_tag",
    "materialize",
    "materialize_field",
    "values_equal",
    "walk_map",
]
