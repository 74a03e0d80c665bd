"""Helper for providers that hold their values as nested dicts."""

from collections.abc import Callable, Mapping
from typing import Any

from fido.core.context import Context
from fido.core.path import Path


def walk_map(
    ctx: Context,
    src: Mapping[str, Any],
    path: Path,
    callback: Callable[[Path, Any], None],
) -> None:
    """
    Depth-first walk of a nested mapping, calling ``callback`` once per leaf.

    Nested mappings are descended into and never passed to the callback, so
    ``{"db": {"host": "x"}}`` produces a single ``(db.host, "x")`` pair.

    Args:
        ctx: Cancellation context, checked before every item
        src: Mapping to walk
        path: Path prefix of ``src``
        callback: Receives each leaf path and value

    Raises:
        CancelledError: If ctx is cancelled mid-walk
    """
    for key, value in src.items():
        ctx.check()

        if isinstance(value, Mapping):
            walk_map(ctx, value, path.child(key), callback)
            continue

        callback(path.child(key), value)


__all__ = ["walk_map"]
