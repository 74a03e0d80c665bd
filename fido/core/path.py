"""Dot-delimited paths addressing locations in a destination record."""

from collections.abc import Iterable

PATH_SEPARATOR = "."


class Path(tuple):
    """An ordered sequence of string segments, e.g. ``Path(("foo", "bar"))`` is ``foo.bar``.

    Paths compare equal iff they have the same segments in the same order. The
    canonical joined form returned by :attr:`key` is what the registry indexes on.
    """

    __slots__ = ()

    def __new__(cls, segments: Iterable[str] = ()) -> "Path":
        return super().__new__(cls, (str(s) for s in segments))

    @classmethod
    def parse(cls, value: "str | Iterable[str]") -> "Path":
        """Build a path from a dotted string or an iterable of segments."""
        if isinstance(value, Path):
            return value
        if isinstance(value, str):
            return cls(value.split(PATH_SEPARATOR)) if value else cls()
        return cls(value)

    @property
    def key(self) -> str:
        return PATH_SEPARATOR.join(self)

    def parent(self) -> "Path":
        """Return this path with its last segment dropped."""
        return Path(self[:-1])

    def child(self, segment: str) -> "Path":
        return Path((*self, segment))

    def is_ancestor_of(self, other: "Path") -> bool:
        """True when ``other`` extends this path by at least one segment."""
        return len(self) < len(other) and tuple(other[: len(self)]) == tuple(self)

    def __str__(self) -> str:
        return self.key

    def __repr__(self) -> str:
        return f"Path({self.key!r})"
