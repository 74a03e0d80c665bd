from collections.abc import Callable
from typing import Any

import pytest

from fido.config import loader
from fido.core.channel import Channel
from fido.core.context import Context


class StaticProvider:
    """Provides a fixed list of (path, value) pairs, or delegates to ``fn``."""

    def __init__(
        self,
        pairs: list[tuple[str, Any]] | None = None,
        name: str = "static",
        fn: Callable[[Context, Callable], None] | None = None,
    ) -> None:
        self.pairs = list(pairs or [])
        self.name = name
        self.fn = fn
        self.calls = 0

    def __str__(self) -> str:
        return self.name

    def values(self, ctx: Context, callback: Callable) -> None:
        self.calls += 1
        if self.fn is not None:
            self.fn(ctx, callback)
            return
        for path, value in self.pairs:
            ctx.check()
            callback(path, value)


class NotifyingProvider(StaticProvider):
    """StaticProvider with a change channel the test drives by hand."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.changes: Channel[Any] = Channel()

    def notify(self) -> Channel[Any]:
        return self.changes


@pytest.fixture(autouse=True)
def _reset_config_cache():
    yield
    loader._CONFIG_CACHE = None


@pytest.fixture()
def ctx() -> Context:
    return Context()


@pytest.fixture()
def make_provider() -> type[StaticProvider]:
    return StaticProvider


@pytest.fixture()
def make_notifying_provider() -> type[NotifyingProvider]:
    return NotifyingProvider
