"""Binding engine: locating live components and resolving their members."""

from .members import (
    AlternateNames,
    DEFAULT_ALTERNATES,
    MemberAccess,
    MemberLookup,
    MemberResolver,
    ResolvedMember,
    read_member,
    write_member,
)
from .cache import ComponentBinding, ReflectionCache
from .locator import (
    DEFAULT_LOCATIONS,
    LocateResult,
    ObjectLocator,
    OnChild,
    OnRoot,
    RootQuery,
    VehicleNameQuery,
)

__all__ = [
    "AlternateNames",
    "DEFAULT_ALTERNATES",
    "MemberAccess",
    "MemberLookup",
    "MemberResolver",
    "ResolvedMember",
    "read_member",
    "write_member",
    "ComponentBinding",
    "ReflectionCache",
    "DEFAULT_LOCATIONS",
    "LocateResult",
    "ObjectLocator",
    "OnChild",
    "OnRoot",
    "RootQuery",
    "VehicleNameQuery",
]
