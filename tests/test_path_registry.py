"""Tests for paths and the path registry."""

import pytest

from fido.core.fields import CellSlot, Field
from fido.core.kinds import describe
from fido.core.path import Path
from fido.core.registry import FieldRegistry


def _field(path: str) -> Field:
    return Field(Path.parse(path), CellSlot(describe(str)))


class TestPath:
    """Test Path equality and parsing."""

    @pytest.mark.parametrize(
        ("a", "b", "want"),
        [
            (("foo",), ("foo", "bar"), False),
            (("foo", "bar"), ("bar", "foo"), False),
            (("foo", "bar"), ("foo", "bar"), True),
        ],
    )
    def test_equality(self, a: tuple, b: tuple, want: bool) -> None:
        """Paths are equal iff same length and same segments in order."""
        assert (Path(a) == Path(b)) is want

    def test_parse_and_key(self) -> None:
        """Dotted strings split into segments and join back."""
        path = Path.parse("database.primary.host")

        assert tuple(path) == ("database", "primary", "host")
        assert path.key == "database.primary.host"
        assert str(path) == path.key

    def test_parse_empty(self) -> None:
        """An empty string is the empty path."""
        assert Path.parse("") == Path()
        assert len(Path.parse("")) == 0

    def test_parent_and_ancestry(self) -> None:
        """Parent drops the last segment; ancestry needs a strict prefix."""
        path = Path.parse("a.b.c")

        assert path.parent() == Path.parse("a.b")
        assert Path.parse("a.b").is_ancestor_of(path)
        assert not path.is_ancestor_of(path)
        assert not Path.parse("a.x").is_ancestor_of(path)


class TestFieldRegistry:
    """Test exact and closest-ancestor lookups."""

    @pytest.fixture()
    def registry(self) -> FieldRegistry:
        registry = FieldRegistry()
        registry.set(Path.parse("foo"), _field("foo"))
        registry.set(Path.parse("a.b"), _field("a.b"))
        return registry

    def test_exact(self, registry: FieldRegistry) -> None:
        """An exactly registered path resolves to its own field."""
        assert registry.get(Path.parse("foo")).path == Path.parse("foo")

    def test_closest_ancestor(self, registry: FieldRegistry) -> None:
        """An unregistered path resolves to its nearest registered ancestor."""
        assert registry.get(Path.parse("a.b.c")).path == Path.parse("a.b")
        assert registry.get(Path.parse("foo.bar.baz")).path == Path.parse("foo")

    def test_not_found(self, registry: FieldRegistry) -> None:
        """Paths with no registered ancestor are not found."""
        assert registry.get(Path.parse("bar")) is None
        assert registry.get(Path.parse("a")) is None

    def test_not_found_empty_path(self, registry: FieldRegistry) -> None:
        """The empty path is never found."""
        assert registry.get(Path()) is None

    def test_set_replaces(self, registry: FieldRegistry) -> None:
        """Registering at an existing path replaces the old field."""
        replacement = _field("foo")
        registry.set(Path.parse("foo"), replacement)

        assert registry.get(Path.parse("foo")) is replacement
        assert len(registry) == 2  # noqa: PLR2004

    def test_contains(self, registry: FieldRegistry) -> None:
        """Membership is exact, not ancestor tolerant."""
        assert Path.parse("a.b") in registry
        assert Path.parse("a.b.c") not in registry
