"""Tests for lazy materialization of map entries."""

from dataclasses import dataclass

import pytest

from fido.core.fields import AttributeSlot, CellSlot, FieldKind, MapField
from fido.core.hydrator import config_field, hydrate
from fido.core.kinds import UInt8, describe
from fido.core.maps import materialize, materialize_field
from fido.core.path import Path
from fido.core.priority import PriorityTable
from fido.framework.errors import (
    ExpectedMapError,
    InvalidMapKeyTypeError,
    InvalidPathError,
    NotAddressableError,
    SetOverflowError,
)


@dataclass
class Maps:
    labels: dict[str, str] | None = config_field("labels", default=None)
    limits: dict[str, UInt8] = config_field("limits", default_factory=dict)
    nested: dict[str, dict[str, int]] | None = config_field("nested", default=None)
    by_id: dict[int, str] | None = config_field("by_id", default=None)
    name: str = config_field("name", default="")


@dataclass(frozen=True)
class FrozenMaps:
    labels: dict[str, str] | None = config_field("labels", default=None)


def _slot(owner: object, name: str) -> AttributeSlot:
    registry = hydrate(owner)
    field = next(f for f in registry if f.slot.name == name)
    return field.slot


class TestMaterialize:
    """Test resolving the dict a write lands in."""

    def test_allocates_unset_map(self) -> None:
        """An unset map is allocated and stored in the destination."""
        maps = Maps()

        mapping, elem = materialize(Path.parse("team"), _slot(maps, "labels"))

        assert mapping == {}
        assert maps.labels is mapping
        assert str(elem) == "string"

    def test_reuses_existing_map(self) -> None:
        """An existing map is used as is."""
        maps = Maps(limits={"cpu": 1})

        mapping, elem = materialize(Path.parse("mem"), _slot(maps, "limits"))

        assert mapping is maps.limits
        assert str(elem) == "uint8"

    def test_nested_maps(self) -> None:
        """Nested maps are allocated level by level."""
        maps = Maps()

        mapping, elem = materialize(Path.parse("outer.inner"), _slot(maps, "nested"))

        assert maps.nested == {"outer": {}}
        assert mapping is maps.nested["outer"]
        assert str(elem) == "int64"

    def test_nested_map_needs_two_segments(self) -> None:
        """A nested map addressed with a single segment is an invalid path."""
        with pytest.raises(InvalidPathError):
            materialize(Path.parse("outer"), _slot(Maps(), "nested"))

    def test_not_a_map(self) -> None:
        """Non-map slots cannot be materialized."""
        with pytest.raises(ExpectedMapError):
            materialize(Path.parse("x"), _slot(Maps(), "name"))

    def test_non_text_keys(self) -> None:
        """Maps keyed by anything but text are rejected."""
        with pytest.raises(InvalidMapKeyTypeError):
            materialize(Path.parse("1"), _slot(Maps(), "by_id"))

    def test_non_text_keys_rejected_when_allocated(self) -> None:
        """The key type is checked even when the map already exists."""
        with pytest.raises(InvalidMapKeyTypeError):
            materialize(Path.parse("1"), _slot(Maps(by_id={1: "a"}), "by_id"))

    def test_unset_map_on_frozen_owner(self) -> None:
        """An unset map that cannot be stored is not addressable."""
        with pytest.raises(NotAddressableError):
            materialize(Path.parse("team"), _slot(FrozenMaps(), "labels"))


class TestMaterializeField:
    """Test registration of map entry fields."""

    def test_registers_map_field(self) -> None:
        """The entry is registered at the full path and writes into the map."""
        maps = Maps()
        registry = hydrate(maps)
        ancestor = registry.get(Path.parse("labels"))
        path = Path.parse("labels.team")

        field = materialize_field(registry, path, ancestor)

        assert isinstance(field, MapField)
        assert field.kind is FieldKind.MAP_SLOT
        assert registry.get(path) is field
        assert field.value == ""

        field.set(7, PriorityTable().add("p"))

        assert maps.labels == {"team": "7"}

    def test_nested_entry_key_is_last_segment(self) -> None:
        """For nested maps the entry key is the final path segment."""
        maps = Maps()
        registry = hydrate(maps)

        field = materialize_field(
            registry, Path.parse("nested.a.b"), registry.get(Path.parse("nested"))
        )
        field.set("3", PriorityTable().add("p"))

        assert maps.nested == {"a": {"b": 3}}

    def test_failed_write_leaves_map_untouched(self) -> None:
        """A coercion failure stores nothing in the destination map."""
        maps = Maps()
        registry = hydrate(maps)
        field = materialize_field(
            registry, Path.parse("limits.cpu"), registry.get(Path.parse("limits"))
        )

        with pytest.raises(SetOverflowError):
            field.set(1000, PriorityTable().add("p"))

        assert maps.limits == {}

    def test_cell_starts_at_zero(self) -> None:
        """The private cell of a map entry holds the zero value."""
        assert CellSlot(describe(UInt8)).get() == 0

    def test_existing_entry_seeds_cell(self) -> None:
        """An entry already present in the destination map is the field's value."""
        maps = Maps(limits={"cpu": 4})
        registry = hydrate(maps)

        field = materialize_field(
            registry, Path.parse("limits.cpu"), registry.get(Path.parse("limits"))
        )

        assert field.value == 4  # noqa: PLR2004
        assert maps.limits == {"cpu": 4}
