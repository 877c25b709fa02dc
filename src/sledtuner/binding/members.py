"""Member resolution against live host objects.

MemberResolver maps a (component, field) pair to a concrete attribute on a
live object. The host's attribute names are not always the names the
schema uses (renamed APIs, misspellings, private backing attributes), so
each field has an ordered list of candidate names. Alternate spellings are
data in an AlternateNames table; adding a fallback never needs new code.

Resolution produces a ResolvedMember: an immutable description of the
slot (attribute name, access kind, native type, read/write capability)
that holds no reference to the live object. Reads and writes go through
read_member/write_member with the owning object supplied by the caller.
"""

import inspect
import logging
import typing
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..constants import NOT_FOUND
from ..parameters.types import NativeType

logger = logging.getLogger(__name__)

# Prefixes tried for each candidate to reach private backing attributes
PRIVATE_PREFIXES: Tuple[str, ...] = ("_",)


class MemberAccess(str, Enum):
    FIELD = "field"
    PROPERTY = "property"


@dataclass(frozen=True)
class ResolvedMember:
    """A typed, capability-tagged slot on a live object.

    Attributes:
        component: Logical component name
        field: Schema field name
        attribute: Host attribute actually used
        access: Plain attribute or property
        native_type: Type tag of the slot
        readable: Whether the slot can be read
        writable: Whether the slot can be written (and the type is editable)
    """
    component: str
    field: str
    attribute: str
    access: MemberAccess
    native_type: NativeType
    readable: bool = True
    writable: bool = True

    @property
    def key(self) -> Tuple[str, str]:
        return self.component, self.field


@dataclass(frozen=True)
class MemberLookup:
    """Outcome of a resolution attempt: a member, or the reason there is none."""
    member: Optional[ResolvedMember] = None
    reason: str = ""

    @property
    def found(self) -> bool:
        return self.member is not None


class AlternateNames:
    """Ordered alternate host names per (component, field).

    Alternates registered for component "*" apply to every component.
    """

    def __init__(self, table: Optional[Mapping[Tuple[str, str], Sequence[str]]] = None):
        self._table: Dict[Tuple[str, str], Tuple[str, ...]] = {}
        for key, names in (table or {}).items():
            self.add(key[0], key[1], *names)

    def add(self, component: str, field_name: str, *names: str) -> None:
        """Append alternates for a field, keeping earlier entries first."""
        existing = self._table.get((component, field_name), ())
        merged = existing + tuple(n for n in names if n not in existing)
        self._table[(component, field_name)] = merged

    def for_field(self, component: str, field_name: str) -> Tuple[str, ...]:
        return self._table.get((component, field_name), ()) + self._table.get(("*", field_name), ())

    def candidates(self, component: str, field_name: str) -> Tuple[str, ...]:
        """Primary name, then alternates, then private-prefixed variants of each."""
        base = (field_name,) + self.for_field(component, field_name)
        ordered = list(dict.fromkeys(base))
        for prefix in PRIVATE_PREFIXES:
            ordered.extend(prefix + name for name in base if not name.startswith(prefix))
        return tuple(dict.fromkeys(ordered))

    def to_dict(self) -> Dict[str, Tuple[str, ...]]:
        return {f"{c}.{f}": names for (c, f), names in self._table.items()}


DEFAULT_ALTERNATES: Mapping[Tuple[str, str], Tuple[str, ...]] = MappingProxyType({
    # Unity 6 renamed the damping properties
    ("Rigidbody", "drag"): ("linearDamping",),
    ("Rigidbody", "angularDrag"): ("angularDamping",),
    ("SnowmobileController", "driverTorgueFactorRoll"): ("driverTorqueFactorRoll",),
    ("SnowmobileController", "driverTorgueFactorPitch"): ("driverTorqueFactorPitch",),
    ("SnowmobileController", "snowmobileTorgueFactor"): ("snowmobileTorqueFactor",),
    ("MeshInterpretter", "breakForce"): ("brakeForce",),
    ("SnowmobileControllerBase", "switchBackLeanDistance"): ("switchbackLeanDistance",),
})


def _declared_type(owner_type: type, name: str) -> Any:
    """Annotation for name on owner_type (or its bases), None if undeclared."""
    try:
        hints = typing.get_type_hints(owner_type)
    except Exception:
        # Unresolvable forward references: fall back to raw annotations
        hints = {}
        for klass in reversed(owner_type.__mro__):
            hints.update(getattr(klass, "__annotations__", {}))
    hint = hints.get(name)
    return None if isinstance(hint, str) else hint


def _property_type(prop: property) -> Any:
    if prop.fget is None:
        return None
    try:
        return typing.get_type_hints(prop.fget).get("return")
    except Exception:
        return None


def _is_method(static: Any) -> bool:
    return (
        inspect.isfunction(static)
        or (inspect.ismethoddescriptor(static) and not inspect.isdatadescriptor(static))
        or isinstance(static, (staticmethod, classmethod))
    )


class MemberResolver:
    """Finds readable/writable members on live objects by name with fallbacks.

    resolve() never raises: every failure, including exceptions thrown by
    the host object while being inspected, becomes a MemberLookup with a
    reason.
    """

    def __init__(self, alternates: Optional[AlternateNames] = None):
        self.alternates = alternates if alternates is not None else AlternateNames(DEFAULT_ALTERNATES)

    def candidates(self, component: str, field_name: str) -> Tuple[str, ...]:
        return self.alternates.candidates(component, field_name)

    def resolve(self, component: str, field_name: str, target: Any) -> MemberLookup:
        """Resolve field_name on target, trying each candidate name in order."""
        if target is None:
            return MemberLookup(reason=f"component {component} not bound")

        for name in self.candidates(component, field_name):
            try:
                member = self._inspect(component, field_name, name, target)
            except Exception as e:
                logger.debug(f"Inspecting {component}.{name} raised {type(e).__name__}: {e}")
                continue
            if member is not None:
                if name != field_name:
                    logger.debug(f"Resolved {component}.{field_name} via alternate '{name}'")
                return MemberLookup(member=member)

        return MemberLookup(reason=f"{NOT_FOUND}: {field_name}")

    def _inspect(self, component: str, field_name: str, name: str, target: Any) -> Optional[ResolvedMember]:
        try:
            static = inspect.getattr_static(target, name)
        except AttributeError:
            return None

        owner_type = type(target)
        if isinstance(static, property):
            declared = _property_type(static)
            native = NativeType.from_annotation(declared)
            if native is None:
                native = NativeType.of_value(getattr(target, name)) if static.fget else None
            if native is None:
                return None
            return ResolvedMember(
                component=component,
                field=field_name,
                attribute=name,
                access=MemberAccess.PROPERTY,
                native_type=native,
                readable=static.fget is not None,
                writable=static.fset is not None and native.is_editable,
            )

        if _is_method(static):
            return None

        native = NativeType.from_annotation(_declared_type(owner_type, name))
        if native is None:
            native = NativeType.of_value(getattr(target, name))
        return ResolvedMember(
            component=component,
            field=field_name,
            attribute=name,
            access=MemberAccess.FIELD,
            native_type=native,
            readable=True,
            writable=native.is_editable,
        )


def read_member(target: Any, member: ResolvedMember) -> Any:
    """Read the raw native value of member from target.

    Raises:
        PermissionError: If the member is not readable
    """
    if not member.readable:
        raise PermissionError(f"{member.component}.{member.field} is write-only")
    return getattr(target, member.attribute)


def write_member(target: Any, member: ResolvedMember, value: Any) -> None:
    """Write a native value to member on target.

    Raises:
        PermissionError: If the member is read-only
    """
    if not member.writable:
        raise PermissionError(f"{member.component}.{member.field} is read-only")
    setattr(target, member.attribute, value)
