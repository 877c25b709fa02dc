"""Core value types for the binding engine.

This module implements the two type vocabularies the engine translates
between:
- GenericValue: serializable tagged value used for snapshots, editors and
  presets (number, bool, text, 3-vector, or unsupported)
- NativeType: classification of a live host member's type, with numeric
  kinds described by a numpy dtype that fixes their range and narrowing

GenericValue is immutable; snapshots hold GenericValues only.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union
import math
import typing

import numpy as np

from ..host.base import is_host_reference, is_host_reference_type

# Largest integer a float64 represents exactly
MAX_EXACT_INT = 2 ** 53

Vec3 = Tuple[float, float, float]


class ValueKind(str, Enum):
    """Tag of a GenericValue."""

    NUMBER = "number"
    BOOL = "bool"
    TEXT = "text"
    VECTOR3 = "vector3"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class GenericValue:
    """Tagged, serializable parameter value.

    Attributes:
        kind: Which variant this value is
        value: float for NUMBER, bool for BOOL, str for TEXT,
               (x, y, z) floats for VECTOR3, reason string for UNSUPPORTED
    """
    kind: ValueKind
    value: Any = None

    @classmethod
    def number(cls, x: Union[int, float]) -> "GenericValue":
        return cls(ValueKind.NUMBER, float(x))

    @classmethod
    def boolean(cls, flag: bool) -> "GenericValue":
        return cls(ValueKind.BOOL, bool(flag))

    @classmethod
    def text(cls, s: str) -> "GenericValue":
        return cls(ValueKind.TEXT, str(s))

    @classmethod
    def vector3(cls, x: float, y: float, z: float) -> "GenericValue":
        return cls(ValueKind.VECTOR3, (float(x), float(y), float(z)))

    @classmethod
    def unsupported(cls, reason: str) -> "GenericValue":
        return cls(ValueKind.UNSUPPORTED, str(reason))

    @classmethod
    def of(cls, raw: Any) -> "GenericValue":
        """Wrap a plain Python/numpy value (or JSON-decoded value).

        Booleans are checked before numbers (bool is an int subclass).
        3-element numeric sequences, {x, y, z} mappings and objects with
        x/y/z attributes become VECTOR3. Anything else that is not a
        number, bool or string becomes UNSUPPORTED.
        """
        if isinstance(raw, GenericValue):
            return raw
        if raw is None:
            return cls.unsupported("null")
        if isinstance(raw, (bool, np.bool_)):
            return cls.boolean(bool(raw))
        if isinstance(raw, (int, np.integer)):
            if abs(int(raw)) > MAX_EXACT_INT:
                return cls.unsupported(f"integer {raw} exceeds exact float range")
            return cls.number(int(raw))
        if isinstance(raw, (float, np.floating)):
            if not math.isfinite(float(raw)):
                return cls.unsupported(f"non-finite number {raw}")
            return cls.number(float(raw))
        if isinstance(raw, str):
            return cls.text(raw)

        triple = _as_triple(raw)
        if triple is not None:
            return cls.vector3(*triple)
        return cls.unsupported(f"unsupported value type {type(raw).__name__}")

    @property
    def is_supported(self) -> bool:
        return self.kind is not ValueKind.UNSUPPORTED

    def to_plain(self) -> Any:
        """JSON-ready form: numbers, bools, strings, vectors as {x, y, z}."""
        if self.kind is ValueKind.VECTOR3:
            x, y, z = self.value
            return {"x": x, "y": y, "z": z}
        return self.value

    def display(self) -> str:
        """Invariant text rendering used by editors and reports."""
        if self.kind is ValueKind.NUMBER:
            return repr(self.value)
        if self.kind is ValueKind.BOOL:
            return "true" if self.value else "false"
        if self.kind is ValueKind.VECTOR3:
            return ",".join(repr(c) for c in self.value)
        if self.kind is ValueKind.UNSUPPORTED:
            return f"({self.value})"
        return self.value

    def __repr__(self) -> str:
        return f"GenericValue.{self.kind.value}({self.value!r})"


def _as_triple(raw: Any) -> Optional[Vec3]:
    """Extract a finite (x, y, z) from mappings, sequences or vector objects."""
    if isinstance(raw, Mapping):
        if not {"x", "y", "z"} <= set(raw.keys()):
            return None
        parts = (raw["x"], raw["y"], raw["z"])
    elif isinstance(raw, (list, tuple, np.ndarray)):
        if len(raw) != 3:
            return None
        parts = tuple(raw)
    elif all(hasattr(raw, axis) for axis in ("x", "y", "z")):
        parts = (raw.x, raw.y, raw.z)
    else:
        return None

    values = []
    for part in parts:
        if isinstance(part, (bool, np.bool_)) or not isinstance(part, (int, float, np.number)):
            return None
        value = float(part)
        if not math.isfinite(value):
            return None
        values.append(value)
    return values[0], values[1], values[2]


class NativeKind(str, Enum):
    """Classification of a host member's native type."""

    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    TEXT = "text"
    ENUM = "enum"
    VECTOR3 = "vector3"
    OBJECT_REF = "object_ref"
    COMPLEX = "complex"


# GenericValue kind produced when reading each native kind
_GENERIC_FOR_NATIVE: Dict[NativeKind, ValueKind] = {
    NativeKind.INTEGER: ValueKind.NUMBER,
    NativeKind.FLOAT: ValueKind.NUMBER,
    NativeKind.BOOL: ValueKind.BOOL,
    NativeKind.TEXT: ValueKind.TEXT,
    NativeKind.ENUM: ValueKind.TEXT,
    NativeKind.VECTOR3: ValueKind.VECTOR3,
    NativeKind.OBJECT_REF: ValueKind.UNSUPPORTED,
    NativeKind.COMPLEX: ValueKind.UNSUPPORTED,
}


@dataclass(frozen=True)
class NativeType:
    """Type tag of a live host member.

    Attributes:
        kind: Native classification
        pytype: The Python class of the member (used to build values)
        dtype: numpy dtype for INTEGER/FLOAT kinds, None otherwise
    """
    kind: NativeKind
    pytype: Optional[type] = None
    dtype: Optional[np.dtype] = None

    @property
    def generic_kind(self) -> ValueKind:
        return _GENERIC_FOR_NATIVE[self.kind]

    @property
    def is_editable(self) -> bool:
        """False for opaque host references and other complex types."""
        return self.kind not in (NativeKind.OBJECT_REF, NativeKind.COMPLEX)

    @property
    def is_numeric(self) -> bool:
        return self.kind in (NativeKind.INTEGER, NativeKind.FLOAT)

    @classmethod
    def from_annotation(cls, tp: Any) -> Optional["NativeType"]:
        """Classify a declared type; None when tp carries no information."""
        if tp is None or tp is Any or tp is type(None):
            return None

        if not isinstance(tp, type):
            # Optional[X] and friends: unwrap a single non-None argument
            args = [a for a in typing.get_args(tp) if a is not type(None)]
            if typing.get_origin(tp) is Union and len(args) == 1:
                return cls.from_annotation(args[0])
            return cls(NativeKind.COMPLEX)

        if issubclass(tp, (bool, np.bool_)):
            return cls(NativeKind.BOOL, bool)
        if issubclass(tp, Enum):
            return cls(NativeKind.ENUM, tp)
        if issubclass(tp, np.integer):
            return cls(NativeKind.INTEGER, tp, np.dtype(tp))
        if issubclass(tp, int):
            return cls(NativeKind.INTEGER, int, np.dtype(np.int64))
        if issubclass(tp, np.floating):
            return cls(NativeKind.FLOAT, tp, np.dtype(tp))
        if issubclass(tp, float):
            return cls(NativeKind.FLOAT, float, np.dtype(np.float64))
        if issubclass(tp, str):
            return cls(NativeKind.TEXT, str)
        if is_host_reference_type(tp):
            return cls(NativeKind.OBJECT_REF, tp)
        if is_vector_type(tp):
            return cls(NativeKind.VECTOR3, tp)
        return cls(NativeKind.COMPLEX, tp)

    @classmethod
    def of_value(cls, value: Any) -> "NativeType":
        """Classify from a live value when no declaration is available."""
        if value is None:
            return cls(NativeKind.COMPLEX)
        if is_host_reference(value):
            return cls(NativeKind.OBJECT_REF, type(value))
        return cls.from_annotation(type(value)) or cls(NativeKind.COMPLEX)

    def __str__(self) -> str:
        if self.dtype is not None:
            return f"{self.kind.value}[{self.dtype.name}]"
        if self.pytype is not None:
            return f"{self.kind.value}[{self.pytype.__name__}]"
        return self.kind.value


def is_vector_type(tp: type) -> bool:
    """True for classes shaped like a host 3-vector (x, y, z fields)."""
    fields = getattr(tp, "_fields", None)
    if fields is None:
        fields = ()
        for klass in reversed(tp.__mro__):
            fields += tuple(getattr(klass, "__annotations__", {}).keys())
    return tuple(f for f in fields if f in ("x", "y", "z")) == ("x", "y", "z") and len(set(fields)) == 3
