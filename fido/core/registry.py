"""Path registry mapping destination paths to fields."""

from collections.abc import Iterator

from fido.core.fields import Field
from fido.core.path import Path


class FieldRegistry:
    """
    Index of fields by canonical path key.

    Lookups are ancestor tolerant: a path that is not registered resolves to
    its closest registered ancestor, which is how providers address locations
    deeper than the declared shape (entries of a map field).
    """

    def __init__(self) -> None:
        self._fields: dict[str, Field] = {}

    def set(self, path: Path, field: Field) -> None:
        """Register ``field`` at ``path``, replacing any existing entry."""
        self._fields[path.key] = field

    def get(self, path: Path) -> Field | None:
        """
        Find the field for ``path`` or its closest registered ancestor.

        Args:
            path: Path to resolve

        Returns:
            The matching field, or None when neither the path nor any non-empty
            ancestor is registered
        """
        while path:
            field = self._fields.get(path.key)
            if field is not None:
                return field
            path = path.parent()
        return None

    def paths(self) -> list[Path]:
        return [Path.parse(key) for key in self._fields]

    def __contains__(self, path: object) -> bool:
        return isinstance(path, Path) and path.key in self._fields

    def __iter__(self) -> Iterator[Field]:
        return iter(list(self._fields.values()))

    def __len__(self) -> int:
        return len(self._fields)
