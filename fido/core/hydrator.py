"""
Hydrator: builds the path registry from a destination dataclass.

Each dataclass field carries its path segment in ``dataclasses.field``
metadata under the configured tag name (default ``"fido"``):

    @dataclass
    class Database:
        host: str = config_field("host", default="localhost")
        port: UInt16 = config_field("port", default=5432)

    @dataclass
    class Config:
        db: Database = config_field("database", default_factory=Database)
        labels: dict[str, str] | None = config_field("labels", default=None)

registers ``database.host``, ``database.port`` and ``labels``. Nested
dataclasses are recursed into and never registered themselves.
"""

import dataclasses
import logging
import typing
from dataclasses import dataclass
from typing import Any

from fido.core.fields import AttributeSlot, Field
from fido.core.kinds import describe
from fido.core.path import Path
from fido.core.registry import FieldRegistry
from fido.framework.errors import (
    DestinationInvalidError,
    DestinationNilError,
    DestinationNotInstanceError,
    StructTagNotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_STRUCT_TAG = "fido"


@dataclass(frozen=True)
class Tag:
    """A decoded path tag.

    Attributes:
        raw: The tag value as written
        name: First comma-separated component, the path segment
        field_name: Name of the dataclass field carrying the tag
        options: Remaining components, unused by the engine
    """

    raw: str
    name: str
    field_name: str
    options: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.field_name}: {self.raw}"


def lookup_tag(tag: str, field: dataclasses.Field) -> Tag:
    """
    Read and decode the path tag of a dataclass field.

    Args:
        tag: Metadata key to look for
        field: The dataclass field

    Returns:
        The decoded Tag

    Raises:
        StructTagNotFoundError: If the field has no such metadata entry
    """
    raw = field.metadata.get(tag)
    if raw is None:
        raise StructTagNotFoundError(tag, field.name)

    name, *options = str(raw).split(",")
    return Tag(raw=str(raw), name=name, field_name=field.name, options=tuple(options))


def config_field(name: str, *, tag: str = DEFAULT_STRUCT_TAG, **kwargs: Any) -> Any:
    """
    Declare a dataclass field carrying a path tag.

    Args:
        name: Path segment, optionally followed by comma-separated options
        tag: Metadata key, must match the tag the Fido instance is configured with
        **kwargs: Passed through to ``dataclasses.field``

    Returns:
        A ``dataclasses.field`` with the tag added to its metadata
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[tag] = name
    return dataclasses.field(metadata=metadata, **kwargs)


def hydrate(
    dst: Any,
    tag: str = DEFAULT_STRUCT_TAG,
    error_on_missing_tag: bool = True,
) -> FieldRegistry:
    """
    Walk a destination dataclass instance and register every leaf field.

    Args:
        dst: The destination dataclass instance
        tag: Metadata key holding each field's path segment
        error_on_missing_tag: Raise on an untagged field instead of skipping it

    Returns:
        A new, fully populated FieldRegistry

    Raises:
        DestinationNilError: If dst is None
        DestinationNotInstanceError: If dst is a class rather than an instance
        DestinationInvalidError: If dst is not a dataclass instance
        StructTagNotFoundError: If a field is untagged and error_on_missing_tag is set
    """
    if dst is None:
        raise DestinationNilError
    if isinstance(dst, type):
        raise DestinationNotInstanceError(dst)
    if not dataclasses.is_dataclass(dst):
        raise DestinationInvalidError(dst)

    registry = FieldRegistry()
    _hydrate(registry, Path(), dst, tag, error_on_missing_tag)

    logger.debug("Hydrated %d fields from %s", len(registry), type(dst).__name__)

    return registry


def _hydrate(
    registry: FieldRegistry,
    prefix: Path,
    owner: Any,
    tag: str,
    error_on_missing_tag: bool,
) -> None:
    hints = typing.get_type_hints(type(owner), include_extras=True)

    for field in dataclasses.fields(owner):
        try:
            decoded = lookup_tag(tag, field)
        except StructTagNotFoundError:
            if error_on_missing_tag:
                raise
            logger.debug("Skipping untagged field %s.%s", type(owner).__name__, field.name)
            continue

        path = prefix.child(decoded.name)
        descriptor = describe(hints.get(field.name, field.type))

        if descriptor.is_aggregate:
            nested = getattr(owner, field.name)
            if nested is not None:
                _hydrate(registry, path, nested, tag, error_on_missing_tag)
                continue

        registry.set(path, Field(path, AttributeSlot(owner, field.name, descriptor)))


__all__ = ["DEFAULT_STRUCT_TAG", "Tag", "config_field", "hydrate", "lookup_tag"]
