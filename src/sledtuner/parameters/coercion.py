"""Value coercion between GenericValue and host native types.

Coercion is total in both directions: every input maps to a GenericValue
or to a Coerced result, and failures are represented as data. Nothing in
this module raises for bad input.

- to_generic: live native value -> GenericValue (read path)
- to_native: GenericValue -> value of the member's native type (write path)

Numeric narrowing follows the target numpy dtype: float32 rounds,
integers truncate toward zero, and values outside the dtype's range are
rejected rather than wrapped.
"""

import logging
import math
import re
from typing import Any, NamedTuple, Optional

import numpy as np

from .types import GenericValue, NativeKind, NativeType, ValueKind, MAX_EXACT_INT, Vec3

logger = logging.getLogger(__name__)

ZERO_VECTOR: Vec3 = (0.0, 0.0, 0.0)

# Separators accepted between vector components: commas and/or whitespace
_VECTOR_SPLIT = re.compile(r"\s*,\s*|\s+")

_TRUE_TEXT = {"true", "1", "yes", "on"}
_FALSE_TEXT = {"false", "0", "no", "off"}


class Coerced(NamedTuple):
    """Result of converting a GenericValue to a native value.

    Attributes:
        value: Native value to write (None when not ok)
        ok: Whether value may be written to the host
        reason: Why conversion failed (empty when ok)
        warning: Non-fatal substitution that happened (empty if none)
    """
    value: Any
    ok: bool
    reason: str = ""
    warning: str = ""


def _fail(reason: str) -> Coerced:
    return Coerced(None, False, reason)


def parse_vector3(text: str) -> Optional[Vec3]:
    """Parse "x,y,z", "(x, y, z)" or "x y z" with invariant float formatting.

    Returns:
        The parsed triple, or None when text is not exactly three finite floats
    """
    if not isinstance(text, str):
        return None
    body = text.strip()
    if body.startswith("(") and body.endswith(")"):
        body = body[1:-1].strip()
    if not body:
        return None

    parts = _VECTOR_SPLIT.split(body)
    if len(parts) != 3:
        return None
    try:
        values = tuple(float(p) for p in parts)
    except ValueError:
        return None
    if not all(math.isfinite(v) for v in values):
        return None
    return values[0], values[1], values[2]


def _parse_number(text: str) -> Optional[float]:
    try:
        value = float(text.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def to_generic(native: Any, native_type: Optional[NativeType]) -> GenericValue:
    """Convert a live native value to a GenericValue.

    Args:
        native: Value read from the host member
        native_type: Declared type of the member (None to classify from value)

    Returns:
        GenericValue; UNSUPPORTED for host references, complex types,
        non-finite numbers and integers beyond exact float range
    """
    if native_type is None:
        native_type = NativeType.of_value(native)
    if native is None:
        return GenericValue.unsupported("null")

    kind = native_type.kind
    try:
        if kind is NativeKind.OBJECT_REF:
            return GenericValue.unsupported("Skipped host object")
        if kind is NativeKind.COMPLEX:
            return GenericValue.unsupported("Skipped complex type")
        if kind is NativeKind.BOOL:
            return GenericValue.boolean(bool(native))
        if kind is NativeKind.INTEGER:
            as_int = int(native)
            if abs(as_int) > MAX_EXACT_INT:
                return GenericValue.unsupported(f"integer {as_int} exceeds exact float range")
            return GenericValue.number(as_int)
        if kind is NativeKind.FLOAT:
            as_float = float(native)
            if not math.isfinite(as_float):
                return GenericValue.unsupported(f"non-finite number {as_float}")
            return GenericValue.number(as_float)
        if kind is NativeKind.TEXT:
            return GenericValue.text(str(native))
        if kind is NativeKind.ENUM:
            return GenericValue.text(native.name)
        if kind is NativeKind.VECTOR3:
            wrapped = GenericValue.of(native)
            if wrapped.kind is ValueKind.VECTOR3:
                return wrapped
            return GenericValue.unsupported(f"malformed vector {native!r}")
    except (TypeError, ValueError, AttributeError, OverflowError) as e:
        return GenericValue.unsupported(f"unreadable {kind.value}: {e}")

    return GenericValue.unsupported(f"unknown native kind {kind}")


def _narrow_number(x: float, native_type: NativeType) -> Coerced:
    """Apply the dtype's own narrowing rules, rejecting out-of-range values."""
    dtype = native_type.dtype
    if not math.isfinite(x):
        return _fail(f"non-finite number {x}")

    if native_type.kind is NativeKind.INTEGER:
        truncated = math.trunc(x)
        info = np.iinfo(dtype)
        if truncated < info.min or truncated > info.max:
            return _fail(f"{x} outside {dtype.name} range [{info.min}, {info.max}]")
        if native_type.pytype is int:
            return Coerced(int(truncated), True)
        return Coerced(dtype.type(truncated), True)

    info = np.finfo(dtype)
    if abs(x) > float(info.max):
        return _fail(f"{x} outside {dtype.name} range")
    if native_type.pytype is float:
        return Coerced(float(x), True)
    return Coerced(dtype.type(x), True)


def _to_number(generic: GenericValue) -> Optional[float]:
    if generic.kind is ValueKind.NUMBER:
        return generic.value
    if generic.kind is ValueKind.BOOL:
        return 1.0 if generic.value else 0.0
    if generic.kind is ValueKind.TEXT:
        return _parse_number(generic.value)
    return None


def _build_vector(triple: Vec3, native_type: NativeType) -> Any:
    pytype = native_type.pytype
    if pytype is None or pytype is tuple:
        return tuple(triple)
    return pytype(*triple)


def to_native(generic: Any, native_type: Optional[NativeType]) -> Coerced:
    """Convert a GenericValue (or plain value) to a member's native type.

    Args:
        generic: GenericValue, or a plain value wrapped via GenericValue.of
        native_type: Target member type

    Returns:
        Coerced result; never raises
    """
    if native_type is None:
        return _fail("unknown native type")
    generic = GenericValue.of(generic)

    if generic.kind is ValueKind.UNSUPPORTED:
        return _fail(f"unsupported value: {generic.value}")

    kind = native_type.kind
    try:
        if kind in (NativeKind.OBJECT_REF, NativeKind.COMPLEX):
            return _fail(f"{kind.value} members are read-only")

        if kind in (NativeKind.INTEGER, NativeKind.FLOAT):
            number = _to_number(generic)
            if number is None:
                return _fail(f"cannot convert {generic.display()} to {native_type}")
            return _narrow_number(number, native_type)

        if kind is NativeKind.BOOL:
            if generic.kind is ValueKind.BOOL:
                return Coerced(generic.value, True)
            if generic.kind is ValueKind.NUMBER:
                return Coerced(generic.value != 0.0, True)
            if generic.kind is ValueKind.TEXT:
                lowered = generic.value.strip().lower()
                if lowered in _TRUE_TEXT:
                    return Coerced(True, True)
                if lowered in _FALSE_TEXT:
                    return Coerced(False, True)
            return _fail(f"cannot convert {generic.display()} to bool")

        if kind is NativeKind.TEXT:
            return Coerced(generic.display(), True)

        if kind is NativeKind.ENUM:
            enum_type = native_type.pytype
            if generic.kind is ValueKind.TEXT:
                member = enum_type.__members__.get(generic.value.strip())
                if member is not None:
                    return Coerced(member, True)
            number = _to_number(generic)
            if number is not None:
                for member in enum_type:
                    if member.value == number:
                        return Coerced(member, True)
            return _fail(f"{generic.display()} is not a member of {enum_type.__name__}")

        if kind is NativeKind.VECTOR3:
            if generic.kind is ValueKind.VECTOR3:
                return Coerced(_build_vector(generic.value, native_type), True)
            if generic.kind is ValueKind.TEXT:
                triple = parse_vector3(generic.value)
                if triple is not None:
                    return Coerced(_build_vector(triple, native_type), True)
                warning = f"unparsable vector text {generic.value!r}, using zero vector"
                logger.warning(warning)
                return Coerced(_build_vector(ZERO_VECTOR, native_type), True, "", warning)
            return _fail(f"cannot convert {generic.display()} to vector3")

    except (TypeError, ValueError, OverflowError, AttributeError) as e:
        return _fail(f"conversion to {native_type} failed: {e}")

    return _fail(f"unknown native kind {kind}")


def coerce_channel(generic: Any, lower: float = 0.0, upper: float = 1.0) -> Coerced:
    """Convert a composite channel value (e.g. a colour component), clamped.

    Args:
        generic: GenericValue or plain value for the channel
        lower: Minimum channel value
        upper: Maximum channel value

    Returns:
        Coerced float clamped into [lower, upper]
    """
    generic = GenericValue.of(generic)
    number = _to_number(generic) if generic.kind is not ValueKind.BOOL else None
    if number is None or not math.isfinite(number):
        return _fail(f"cannot convert {generic.display()} to a channel value")
    return Coerced(min(upper, max(lower, float(number))), True)

