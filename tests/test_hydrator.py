"""Tests for building the path registry from destination dataclasses."""

from dataclasses import dataclass, field

import pytest

from fido.core.hydrator import config_field, hydrate, lookup_tag
from fido.core.kinds import Kind, UInt16
from fido.core.path import Path
from fido.framework.errors import (
    DestinationInvalidError,
    DestinationNilError,
    DestinationNotInstanceError,
    ErrorCode,
    StructTagNotFoundError,
)


@dataclass
class Database:
    host: str = config_field("host", default="localhost")
    port: UInt16 = config_field("port", default=5432)


@dataclass
class Config:
    name: str = config_field("name", default="")
    db: Database = config_field("database", default_factory=Database)
    replica: Database | None = config_field("replica", default=None)
    labels: dict[str, str] | None = config_field("labels", default=None)


@dataclass
class Untagged:
    name: str = config_field("name", default="")
    scratch: int = 0


@dataclass
class CustomTag:
    name: str = config_field("name,omitempty", tag="cfg", default="")


@dataclass
class WithOtherMetadata:
    name: str = field(default="", metadata={"fido": "name", "doc": "the name"})


class TestHydrate:
    """Test registry construction."""

    def test_leaf_paths(self) -> None:
        """Leaves are registered by tag path; nested dataclasses are recursed into."""
        registry = hydrate(Config())

        assert sorted(p.key for p in registry.paths()) == [
            "database.host",
            "database.port",
            "labels",
            "name",
            "replica",
        ]

    def test_nested_dataclass_not_registered(self) -> None:
        """A populated nested dataclass only registers its own fields."""
        registry = hydrate(Config())

        assert Path.parse("database") not in registry

    def test_unset_nested_registered_as_leaf(self) -> None:
        """An unset optional nested dataclass is a leaf of its own."""
        registry = hydrate(Config())

        assert registry.get(Path.parse("replica")).descriptor.kind is Kind.OPTIONAL

    def test_fields_bound_to_instance(self) -> None:
        """Registered fields read and write the given instance."""
        cfg = Config()
        registry = hydrate(cfg)
        port = registry.get(Path.parse("database.port"))

        assert port.value == 5432  # noqa: PLR2004
        port.slot.set(6543)
        assert cfg.db.port == 6543  # noqa: PLR2004

    def test_custom_tag_and_options(self) -> None:
        """The tag name is configurable; options after a comma are ignored."""
        registry = hydrate(CustomTag(), tag="cfg")

        assert [p.key for p in registry.paths()] == ["name"]

    def test_other_metadata_kept(self) -> None:
        """Tags can live beside unrelated metadata."""
        assert [p.key for p in hydrate(WithOtherMetadata()).paths()] == ["name"]

    def test_missing_tag_raises(self) -> None:
        """An untagged field fails hydration by default."""
        with pytest.raises(StructTagNotFoundError) as exc_info:
            hydrate(Untagged())

        assert exc_info.value.code is ErrorCode.STRUCT_TAG_NOT_FOUND
        assert "scratch" in str(exc_info.value)

    def test_missing_tag_skipped(self) -> None:
        """With error_on_missing_tag off, untagged fields are skipped."""
        registry = hydrate(Untagged(), error_on_missing_tag=False)

        assert [p.key for p in registry.paths()] == ["name"]

    def test_fresh_registry_per_call(self) -> None:
        """Each hydration builds a new registry."""
        cfg = Config()

        assert hydrate(cfg) is not hydrate(cfg)


class TestDestinationErrors:
    """Test rejection of unusable destinations."""

    def test_none(self) -> None:
        """None is rejected as nil."""
        with pytest.raises(DestinationNilError):
            hydrate(None)

    def test_class(self) -> None:
        """A dataclass type rather than an instance is rejected."""
        with pytest.raises(DestinationNotInstanceError):
            hydrate(Config)

    @pytest.mark.parametrize("dst", [{"name": "x"}, "text", 42, object()])
    def test_not_a_dataclass(self, dst: object) -> None:
        """Anything that is not a dataclass instance is invalid."""
        with pytest.raises(DestinationInvalidError):
            hydrate(dst)


class TestLookupTag:
    """Test tag decoding."""

    def test_options_split(self) -> None:
        """The first component is the name, the rest are options."""
        tagged = CustomTag.__dataclass_fields__["name"]
        tag = lookup_tag("cfg", tagged)

        assert tag.name == "name"
        assert tag.options == ("omitempty",)
        assert tag.field_name == "name"

    def test_missing(self) -> None:
        """A field without the tag raises StructTagNotFoundError."""
        scratch = Untagged.__dataclass_fields__["scratch"]

        with pytest.raises(StructTagNotFoundError):
            lookup_tag("fido", scratch)
