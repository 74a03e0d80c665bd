"""Tests for the stock providers."""

from dataclasses import dataclass

import pytest

from fido.core.context import Context
from fido.core.hydrator import config_field
from fido.core.path import Path
from fido.core.walk import walk_map
from fido.fido import Fido
from fido.framework.errors import CancelledError, ProviderError
from fido.providers import (
    CloseProvider,
    DecodeError,
    FileProvider,
    InMemoryProvider,
    InvalidMapKeyError,
    JSONProvider,
    NotifyProvider,
    Provider,
    ReadProvider,
    YAMLProvider,
    from_bytes,
    from_files,
    from_string,
)


@dataclass
class Service:
    host: str = config_field("host", default="")
    port: int = config_field("port", default=0)
    tags: list[str] = config_field("tags", default_factory=list)
    labels: dict[str, str] | None = config_field("labels", default=None)


def _collect(provider, ctx: Context | None = None) -> list[tuple[str, object]]:
    pairs: list[tuple[str, object]] = []
    provider.values(
        ctx or Context(), lambda path, value: pairs.append((Path.parse(path).key, value))
    )
    return pairs


class TestWalkMap:
    """Test flattening nested mappings into leaf pairs."""

    def test_leaves_only(self) -> None:
        """Nested mappings are descended into, never emitted."""
        pairs: list = []
        src = {"a": {"b": 1, "c": [1]}, "d": "x"}
        walk_map(Context(), src, Path(), lambda p, v: pairs.append((p.key, v)))

        assert pairs == [("a.b", 1), ("a.c", [1]), ("d", "x")]

    def test_prefix(self) -> None:
        """Leaf paths are prefixed with the starting path."""
        pairs: list = []
        walk_map(Context(), {"b": 1}, Path.parse("a"), lambda p, v: pairs.append(p.key))

        assert pairs == ["a.b"]

    def test_cancelled(self) -> None:
        """A cancelled context stops the walk."""
        ctx = Context()
        ctx.cancel()

        with pytest.raises(CancelledError):
            walk_map(ctx, {"a": 1}, Path(), lambda p, v: None)


class TestInMemoryProvider:
    """Test the dict-backed provider."""

    def test_values(self) -> None:
        """Initial values are walked as leaf pairs."""
        provider = InMemoryProvider({"server": {"host": "h", "port": 1}})

        assert _collect(provider) == [("server.host", "h"), ("server.port", 1)]

    def test_add_creates_intermediate_dicts(self) -> None:
        """add() accepts dotted keys and builds the nesting."""
        provider = InMemoryProvider()
        provider.add("server.host", "h")
        provider.add("server.port", 1)
        provider.add("name", "n")

        assert _collect(provider) == [("server.host", "h"), ("server.port", 1), ("name", "n")]

    def test_add_replaces_leaf_with_mapping(self) -> None:
        """Adding below an existing leaf replaces the leaf."""
        provider = InMemoryProvider({"server": "flat"})
        provider.add("server.host", "h")

        assert _collect(provider) == [("server.host", "h")]

    def test_non_text_key(self) -> None:
        """Mappings with non-text keys are rejected."""
        with pytest.raises(InvalidMapKeyError) as exc_info:
            _collect(InMemoryProvider({"labels": {1: "a"}}))

        assert exc_info.value.details["path"] == "labels"

    def test_signal_without_watcher(self) -> None:
        """update() without a watcher only stores the value."""
        provider = InMemoryProvider()

        provider.update("name", "n")

        assert _collect(provider) == [("name", "n")]

    def test_signals_coalesce(self) -> None:
        """Pending change signals are not duplicated."""
        provider = InMemoryProvider()
        changes = provider.notify()

        provider.update("a", 1)
        provider.update("b", 2)

        assert len(changes) == 1
        assert changes.receive(timeout=1) is provider

    def test_close(self) -> None:
        """close() closes the change channel; later signals are dropped."""
        provider = InMemoryProvider()
        changes = provider.notify()

        provider.close()
        provider.update("a", 1)

        assert changes.closed

    def test_capabilities(self) -> None:
        """InMemoryProvider can be closed and watched."""
        provider = InMemoryProvider(name="defaults")

        assert isinstance(provider, Provider)
        assert isinstance(provider, CloseProvider)
        assert isinstance(provider, NotifyProvider)
        assert str(provider) == "defaults"


class TestReadProviders:
    """Test JSON and YAML decoding."""

    def test_json(self) -> None:
        """A JSON object is walked into leaf pairs."""
        provider = from_string(JSONProvider(), '{"host": "h", "labels": {"a": "b"}}')

        assert _collect(provider) == [("host", "h"), ("labels.a", "b")]
        assert str(provider) == "json.String"

    def test_yaml_bytes(self) -> None:
        """YAML mappings decode from bytes too."""
        provider = from_bytes(YAMLProvider(), b"host: h\nport: 80\ntags: [a, b]\n")

        assert _collect(provider) == [("host", "h"), ("port", 80), ("tags", ["a", "b"])]
        assert str(provider) == "yaml.Bytes"

    def test_empty_yaml(self) -> None:
        """An empty YAML document provides nothing."""
        assert _collect(from_string(YAMLProvider(), "")) == []

    @pytest.mark.parametrize(
        ("reader", "text"),
        [
            (JSONProvider(), "{not json"),
            (JSONProvider(), "[1, 2]"),
            (YAMLProvider(), "key: [unclosed"),
            (YAMLProvider(), "- a\n- b\n"),
        ],
    )
    def test_decode_errors(self, reader: ReadProvider, text: str) -> None:
        """Malformed documents and non-mapping roots fail with DecodeError."""
        with pytest.raises(DecodeError):
            _collect(from_string(reader, text))

    def test_read_provider_protocol(self) -> None:
        """Decoders are read providers, their adapters regular providers."""
        assert isinstance(JSONProvider(), ReadProvider)
        assert isinstance(from_string(JSONProvider(), "{}"), Provider)


class TestFileProvider:
    """Test reading files matched by glob patterns."""

    def test_glob_in_sorted_order(self, tmp_path) -> None:
        """Matching files are read in name order, so later files override earlier ones."""
        (tmp_path / "10-base.yaml").write_text("host: base\nport: 1\n")
        (tmp_path / "20-local.yaml").write_text("host: local\n")
        service = Service()

        provider = from_files(YAMLProvider(), str(tmp_path / "*.yaml"))
        Fido(service, auto_watch=False).fetch(provider)

        assert service.host == "local"
        assert service.port == 1

    def test_each_file_read_once(self, tmp_path) -> None:
        """Files already read are skipped on later rounds; new matches are read."""
        (tmp_path / "a.json").write_text('{"host": "a"}')
        provider = from_files(JSONProvider(), str(tmp_path / "*.json"))

        assert _collect(provider) == [("host", "a")]
        assert _collect(provider) == []

        (tmp_path / "b.json").write_text('{"port": 2}')
        assert _collect(provider) == [("port", 2)]
        assert str(provider) == "json.Files"

    def test_open_failure(self, tmp_path) -> None:
        """Files that cannot be opened fail the round with ProviderError."""
        (tmp_path / "a.json").write_text("{}")

        def opener(name: str):
            raise PermissionError(name)

        provider = FileProvider(JSONProvider(), [str(tmp_path / "*.json")], opener=opener)

        with pytest.raises(ProviderError) as exc_info:
            _collect(provider)

        assert isinstance(exc_info.value.__cause__, PermissionError)

    def test_no_matches(self, tmp_path) -> None:
        """Patterns matching nothing provide nothing."""
        assert _collect(from_files(JSONProvider(), str(tmp_path / "*.json"))) == []

    def test_cancelled(self, tmp_path) -> None:
        """A cancelled context stops before the first pattern."""
        (tmp_path / "a.json").write_text('{"host": "a"}')
        ctx = Context()
        ctx.cancel()

        with pytest.raises(CancelledError):
            _collect(from_files(JSONProvider(), str(tmp_path / "*.json")), ctx)
