"""
Value coercion engine.

Converts arbitrary provider values into the type of a destination slot. The
conversion is computed first and stored only on success, so a failure (for
example one bad element in a sequence) never leaves a slot half written.

Rules per destination kind:
- optional: coerce into the inner type
- string: str, bool ("true"/"false"), int (base 10) or anything with its own __str__
- int / uint: base-10 text or int, range-checked against the declared width
- float: text or float, float32 destinations range-checked
- bool: bool or boolean text ("1", "t", "TRUE", "false", ...)
- sequence: list or tuple, every element coerced into the element type
- anything else: InvalidTypeError
"""

import math
import re
from typing import Any, Protocol

from fido.core.kinds import Kind, TypeDescriptor
from fido.framework.errors import (
    InvalidTypeError,
    InvalidValueError,
    NotSetableError,
    SetOverflowError,
)

_SIGNED_TEXT = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_TEXT = re.compile(r"[0-9]+")

_TRUE_TEXT = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_TEXT = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_MAX_FLOAT32 = 3.40282346638528859811704183484516925440e38

# Types that inherit a __str__ but do not count as display text
_NOT_DISPLAY_TEXT = (float, complex, bytes, bytearray, list, tuple, dict, set, frozenset)


class Slot(Protocol):
    """A writable destination location."""

    descriptor: TypeDescriptor

    @property
    def writable(self) -> bool: ...

    def get(self) -> Any: ...

    def set(self, value: Any) -> None: ...


def assign(slot: Slot, value: Any) -> Any:
    """
    Coerce ``value`` into the slot's type and store it.

    Args:
        slot: Destination slot
        value: Raw provider value

    Returns:
        The coerced value that was stored

    Raises:
        NotSetableError: If the slot cannot be written
        InvalidTypeError, InvalidValueError, SetOverflowError: If coercion fails
    """
    if not slot.writable:
        raise NotSetableError(str(slot))

    coerced = coerce(slot.descriptor, value)
    slot.set(coerced)
    return coerced


def coerce(desc: TypeDescriptor, value: Any) -> Any:
    """Return ``value`` converted to the type described by ``desc``."""
    match desc.kind:
        case Kind.OPTIONAL:
            return coerce(desc.elem, value)
        case Kind.STRING:
            return _to_string(desc, value)
        case Kind.INT:
            return _to_int(desc, value)
        case Kind.UINT:
            return _to_uint(desc, value)
        case Kind.FLOAT:
            return _to_float(desc, value)
        case Kind.BOOL:
            return _to_bool(desc, value)
        case Kind.SEQUENCE:
            return _to_sequence(desc, value)
        case _:
            raise InvalidTypeError(str(desc), value)


def _has_display_text(value: Any) -> bool:
    if isinstance(value, _NOT_DISPLAY_TEXT):
        return False
    return type(value).__str__ is not object.__str__


def _to_string(desc: TypeDescriptor, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if _has_display_text(value):
        return str(value)
    raise InvalidTypeError(str(desc), value)


def _signed_range(bits: int) -> tuple[int, int]:
    return -(1 << (bits - 1)), (1 << (bits - 1)) - 1


def _to_int(desc: TypeDescriptor, value: Any) -> int:
    if isinstance(value, str):
        if not _SIGNED_TEXT.fullmatch(value):
            raise InvalidValueError("int64", value)
        number = int(value, 10)
        low, high = _signed_range(64)
        if not low <= number <= high:
            raise InvalidValueError("int64", value)
    elif isinstance(value, int) and not isinstance(value, bool):
        number = value
    else:
        raise InvalidTypeError(str(desc), value)

    low, high = _signed_range(desc.bits)
    if not low <= number <= high:
        raise SetOverflowError(str(desc), value)

    return number


def _to_uint(desc: TypeDescriptor, value: Any) -> int:
    if isinstance(value, str):
        if not _UNSIGNED_TEXT.fullmatch(value):
            raise InvalidValueError("uint64", value)
        number = int(value, 10)
        if number >= 1 << 64:
            raise InvalidValueError("uint64", value)
    elif isinstance(value, int) and not isinstance(value, bool):
        number = value
    else:
        raise InvalidTypeError(str(desc), value)

    if not 0 <= number < 1 << desc.bits:
        raise SetOverflowError(str(desc), value)

    return number


def _to_float(desc: TypeDescriptor, value: Any) -> float:
    if isinstance(value, str):
        if value != value.strip():
            raise InvalidValueError("float64", value)
        try:
            number = float(value)
        except ValueError as e:
            raise InvalidValueError("float64", value) from e
        # "1e999" parses to inf; only spelled-out infinities are accepted
        if math.isinf(number) and "inf" not in value.lower():
            raise InvalidValueError("float64", value)
    elif isinstance(value, float):
        number = value
    else:
        raise InvalidTypeError(str(desc), value)

    if desc.bits == 32 and math.isfinite(number) and abs(number) > _MAX_FLOAT32:  # noqa: PLR2004
        raise SetOverflowError(str(desc), value)

    return number


def _to_bool(desc: TypeDescriptor, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value in _TRUE_TEXT:
            return True
        if value in _FALSE_TEXT:
            return False
        raise InvalidValueError("bool", value)
    raise InvalidTypeError(str(desc), value)


def _to_sequence(desc: TypeDescriptor, value: Any) -> list | tuple:
    if not isinstance(value, list | tuple):
        raise InvalidTypeError(str(desc), value)

    items = [coerce(desc.elem, item) for item in value]
    if desc.container is tuple:
        return tuple(items)
    return items


def values_equal(a: Any, b: Any) -> bool:
    """
    Compare a stored value with an incoming one.

    Values of different types are never equal, so ``True`` does not match ``1``
    and ``"1"`` does not match ``1``. Sequences compare element-wise and dicts
    by key set and per-key value.
    """
    if type(a) is not type(b):
        return False
    if isinstance(a, list | tuple):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b, strict=True))
    if isinstance(a, dict):
        return a.keys() == b.keys() and all(values_equal(a[k], b[k]) for k in a)
    return a == b


__all__ = ["Slot", "assign", "coerce", "values_equal"]
