"""Destination type descriptors.

Dataclass field annotations are reduced once to a small closed set of kinds
(text, signed/unsigned integer, float, bool, sequence, map, aggregate and
optional indirection). The hydrator, the coercion engine and the map
materializer all work off these descriptors instead of inspecting annotations
at write time.

Integer and float widths are declared with ``typing.Annotated`` aliases:

    @dataclass
    class Limits:
        retries: Int8 = config_field("retries", default=0)
        ratio: Float32 = config_field("ratio", default=0.0)
"""

import dataclasses
import types
import typing
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Union


class Kind(str, Enum):
    """Destination kinds understood by the engine."""

    STRING = "string"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    BOOL = "bool"
    SEQUENCE = "sequence"
    MAP = "map"
    AGGREGATE = "aggregate"
    OPTIONAL = "optional"
    INVALID = "invalid"


@dataclass(frozen=True)
class Width:
    """Annotation marker declaring a numeric width (and signedness for integers)."""

    bits: int
    signed: bool = True


Int8 = Annotated[int, Width(8)]
Int16 = Annotated[int, Width(16)]
Int32 = Annotated[int, Width(32)]
Int64 = Annotated[int, Width(64)]
UInt8 = Annotated[int, Width(8, signed=False)]
UInt16 = Annotated[int, Width(16, signed=False)]
UInt32 = Annotated[int, Width(32, signed=False)]
UInt64 = Annotated[int, Width(64, signed=False)]
Float32 = Annotated[float, Width(32)]
Float64 = Annotated[float, Width(64)]


@dataclass(frozen=True)
class TypeDescriptor:
    """Describes one destination slot type.

    Attributes:
        kind: The destination kind
        annotation: The annotation this descriptor was built from
        bits: Width for numeric kinds, 0 otherwise
        elem: Element type for SEQUENCE, value type for MAP, inner type for OPTIONAL
        key: Key type for MAP
        container: Concrete type to build (list/tuple/dict or the dataclass)
    """

    kind: Kind
    annotation: Any = None
    bits: int = 0
    elem: "TypeDescriptor | None" = None
    key: "TypeDescriptor | None" = None
    container: type | None = None

    def deref(self) -> "TypeDescriptor":
        """Follow OPTIONAL indirections down to the concrete type."""
        desc = self
        while desc.kind is Kind.OPTIONAL and desc.elem is not None:
            desc = desc.elem
        return desc

    @property
    def is_map(self) -> bool:
        return self.deref().kind is Kind.MAP

    @property
    def is_aggregate(self) -> bool:
        return self.kind is Kind.AGGREGATE

    def zero(self) -> Any:
        """Return the zero value for this type."""
        match self.kind:
            case Kind.STRING:
                return ""
            case Kind.INT | Kind.UINT:
                return 0
            case Kind.FLOAT:
                return 0.0
            case Kind.BOOL:
                return False
            case Kind.SEQUENCE:
                return (self.container or list)()
            case _:
                return None

    def __str__(self) -> str:
        match self.kind:
            case Kind.INT:
                return f"int{self.bits}"
            case Kind.UINT:
                return f"uint{self.bits}"
            case Kind.FLOAT:
                return f"float{self.bits}"
            case Kind.SEQUENCE:
                return f"sequence[{self.elem}]"
            case Kind.MAP:
                return f"map[{self.key}]{self.elem}"
            case Kind.OPTIONAL:
                return f"optional[{self.elem}]"
            case Kind.AGGREGATE:
                return getattr(self.container, "__name__", "aggregate")
            case _:
                return self.kind.value


_SEQUENCE_ORIGINS = (list, tuple, Sequence, MutableSequence)
_MAP_ORIGINS = (dict, Mapping, MutableMapping)


def describe(annotation: Any) -> TypeDescriptor:
    """
    Reduce a type annotation to a TypeDescriptor.

    Args:
        annotation: A resolved annotation, e.g. from ``typing.get_type_hints``

    Returns:
        The descriptor; unsupported annotations describe as ``Kind.INVALID`` so
        that writes to them fail with InvalidTypeError rather than at hydrate time.
    """
    origin = typing.get_origin(annotation)

    if origin is Annotated:
        base, *metadata = typing.get_args(annotation)
        desc = describe(base)
        for marker in metadata:
            if isinstance(marker, Width):
                desc = _with_width(desc, marker, annotation)
        return desc

    if origin is Union or origin is types.UnionType:
        members = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(members) == 1 and len(members) < len(typing.get_args(annotation)):
            return TypeDescriptor(Kind.OPTIONAL, annotation, elem=describe(members[0]))
        return TypeDescriptor(Kind.INVALID, annotation)

    # bool is an int subclass, check it first
    if annotation is bool:
        return TypeDescriptor(Kind.BOOL, annotation)
    if annotation is int:
        return TypeDescriptor(Kind.INT, annotation, bits=64)
    if annotation is float:
        return TypeDescriptor(Kind.FLOAT, annotation, bits=64)
    if annotation is str:
        return TypeDescriptor(Kind.STRING, annotation)

    if annotation in _SEQUENCE_ORIGINS or origin in _SEQUENCE_ORIGINS:
        return _describe_sequence(annotation, origin or annotation)

    if annotation in _MAP_ORIGINS or origin in _MAP_ORIGINS:
        args = typing.get_args(annotation)
        key, value = args if len(args) == 2 else (Any, Any)  # noqa: PLR2004
        return TypeDescriptor(
            Kind.MAP, annotation, key=describe(key), elem=describe(value), container=dict
        )

    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        return TypeDescriptor(Kind.AGGREGATE, annotation, container=annotation)

    return TypeDescriptor(Kind.INVALID, annotation)


def _describe_sequence(annotation: Any, origin: Any) -> TypeDescriptor:
    args = typing.get_args(annotation)
    container = tuple if origin is tuple else list

    if origin is tuple:
        # Only homogeneous tuple[T, ...] is a sequence
        if len(args) != 2 or args[1] is not Ellipsis:  # noqa: PLR2004
            return TypeDescriptor(Kind.INVALID, annotation)
        elem = args[0]
    else:
        elem = args[0] if args else Any

    return TypeDescriptor(Kind.SEQUENCE, annotation, elem=describe(elem), container=container)


def _with_width(desc: TypeDescriptor, width: Width, annotation: Any) -> TypeDescriptor:
    if desc.kind is Kind.INT:
        kind = Kind.INT if width.signed else Kind.UINT
        return TypeDescriptor(kind, annotation, bits=width.bits)
    if desc.kind is Kind.FLOAT:
        return TypeDescriptor(Kind.FLOAT, annotation, bits=width.bits)
    return desc


__all__ = [
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Kind",
    "TypeDescriptor",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "Width",
    "describe",
]
