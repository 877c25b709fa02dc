"""Locating the vehicle root and its logical components in the host graph.

ObjectLocator turns a logical component name ("Rigidbody", "Light",
"Shock", ...) into a live component object by trying an ordered list of
strategies. Strategies are plain data:

- OnChild(path, type_name): component of type_name on the child at path
  below the vehicle body
- OnRoot(type_name): component of type_name on the body itself

Finding the vehicle root is itself multi-strategy: known names, then
tags, then a name-substring scan over every object. Failing to find the
root fails the whole cycle; failing to find a component does not.

All host queries are read-only. Exceptions raised by the host are logged
and treated as a miss for that strategy.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from ..constants import NOT_FOUND, VEHICLE_NAME_SUFFIX
from ..host.base import HostGraph, HostObject
from .cache import ComponentBinding
from .members import MemberResolver, read_member

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OnChild:
    """Component type_name on the body's descendant at path."""
    path: str
    type_name: str

    def describe(self) -> str:
        return f"{self.path}:{self.type_name}"


@dataclass(frozen=True)
class OnRoot:
    """Component type_name on the body object itself."""
    type_name: str

    def describe(self) -> str:
        return f"<body>:{self.type_name}"


Strategy = Union[OnChild, OnRoot]

DEFAULT_LOCATIONS: Mapping[str, Tuple[Strategy, ...]] = MappingProxyType({
    "Rigidbody": (OnRoot("Rigidbody"),),
    "Light": (OnChild("Spot Light", "Light"),),
    "RagDollCollisionController": (
        OnChild("IK Player (Drivers)", "RagDollCollisionController"),
        OnChild("Driver", "RagDollCollisionController"),
    ),
    "RagDollManager": (
        OnChild("IK Player (Drivers)", "RagDollManager"),
        OnChild("Driver", "RagDollManager"),
    ),
    "Shock": (
        OnChild("Front Suspension", "Shock"),
        OnChild("Rear Suspension", "Shock"),
    ),
})


@dataclass(frozen=True)
class RootQuery:
    """How to find the vehicle root and its body.

    Attributes:
        names: Exact object names or paths, tried in order
        tags: Tags tried after names
        substrings: Case-insensitive name fragments for the last-resort scan
        body_path: Child of the root holding the components ("" for the root itself)
    """
    names: Tuple[str, ...] = ("Snowmobile(Clone)", "Snowmobile")
    tags: Tuple[str, ...] = ("Vehicle",)
    substrings: Tuple[str, ...] = ("snowmobile",)
    body_path: str = "Body"


@dataclass(frozen=True)
class LocateResult:
    """Outcome of a locate call.

    Attributes:
        target: The located object (None when not found)
        source: Which strategy matched
        reason: Why nothing matched (empty when found)
    """
    target: Any = None
    source: str = ""
    reason: str = ""

    @property
    def found(self) -> bool:
        return self.target is not None


@dataclass(frozen=True)
class VehicleNameQuery:
    """Where the vehicle's display name lives on the body."""
    component: str = "SnowmobileController"
    field: str = "GKMNAIKNNMJ"
    alternates: Tuple[str, ...] = ("vehicleName", "VehicleName", "vehicle")
    suffix: str = VEHICLE_NAME_SUFFIX


def _guard(description: str, query: Callable[[], Any]) -> Any:
    """Run a host query, logging and swallowing host exceptions."""
    try:
        return query()
    except Exception as e:
        logger.debug(f"Host query {description} raised {type(e).__name__}: {e}")
        return None


class ObjectLocator:
    """Resolves the vehicle root and logical components in a host graph."""

    def __init__(
        self,
        graph: HostGraph,
        root_query: Optional[RootQuery] = None,
        locations: Optional[Mapping[str, Tuple[Strategy, ...]]] = None,
    ):
        self.graph = graph
        self.root_query = root_query or RootQuery()
        self.locations = dict(DEFAULT_LOCATIONS if locations is None else locations)

    def strategies_for(self, logical_name: str) -> Tuple[Strategy, ...]:
        """Ordered strategies for a name; unknown names try a same-named child, then the body."""
        known = self.locations.get(logical_name)
        if known:
            return tuple(known)
        return OnChild(logical_name, logical_name), OnRoot(logical_name)

    def locate_root(self) -> LocateResult:
        """Find the vehicle body: names, then tags, then substring scan."""
        query = self.root_query
        root = None
        source = ""

        for name in query.names:
            root = _guard(f"find({name!r})", lambda: self.graph.find(name))
            if root is not None:
                source = f"name:{name}"
                break

        if root is None:
            for tag in query.tags:
                root = _guard(f"find_with_tag({tag!r})", lambda: self.graph.find_with_tag(tag))
                if root is not None:
                    source = f"tag:{tag}"
                    break

        if root is None and query.substrings:
            root = self._scan_by_substring(query.substrings)
            if root is not None:
                source = f"scan:{root.name}"

        if root is None:
            return LocateResult(reason=f"vehicle root {NOT_FOUND} (tried names {list(query.names)}, "
                                       f"tags {list(query.tags)}, substrings {list(query.substrings)})")

        if not query.body_path:
            return LocateResult(target=root, source=source)

        body = _guard(f"{root.name}.find({query.body_path!r})", lambda: root.find(query.body_path))
        if body is None:
            return LocateResult(reason=f"'{query.body_path}' {NOT_FOUND} under '{root.name}'")
        return LocateResult(target=body, source=f"{source}/{query.body_path}")

    def _scan_by_substring(self, substrings: Tuple[str, ...]) -> Optional[HostObject]:
        objects = _guard("objects()", lambda: list(self.graph.objects())) or []
        lowered = [s.lower() for s in substrings]
        for obj in objects:
            name = (getattr(obj, "name", "") or "").lower()
            if any(s in name for s in lowered):
                return obj
        return None

    def locate(self, logical_name: str, body: HostObject) -> LocateResult:
        """Find the live component for logical_name under body.

        Returns:
            LocateResult; not found is an ordinary outcome, never an error
        """
        if body is None:
            return LocateResult(reason=f"vehicle root {NOT_FOUND}")

        for strategy in self.strategies_for(logical_name):
            component = self._apply(strategy, body)
            if component is not None:
                return LocateResult(target=component, source=strategy.describe())

        tried = ", ".join(s.describe() for s in self.strategies_for(logical_name))
        logger.debug(f"Component '{logical_name}' {NOT_FOUND} (tried {tried})")
        return LocateResult(reason=NOT_FOUND)

    def bind(self, body: HostObject, logical_name: str) -> Optional[ComponentBinding]:
        """Locate logical_name and pair it with its live object, None when absent."""
        result = self.locate(logical_name, body)
        if not result.found:
            return None
        return ComponentBinding(logical_name, result.target, result.source)

    def _apply(self, strategy: Strategy, body: HostObject) -> Any:
        if isinstance(strategy, OnRoot):
            return _guard(f"get_component({strategy.type_name!r})",
                          lambda: body.get_component(strategy.type_name))

        child = _guard(f"find({strategy.path!r})", lambda: body.find(strategy.path))
        if child is None:
            return None
        return _guard(f"{strategy.path}.get_component({strategy.type_name!r})",
                      lambda: child.get_component(strategy.type_name))

    def vehicle_name(
        self,
        body: HostObject,
        resolver: Optional[MemberResolver] = None,
        query: Optional[VehicleNameQuery] = None,
    ) -> Optional[str]:
        """Read the vehicle's display name from its controller.

        Returns:
            The name with the scriptable-object suffix removed, or None
        """
        query = query or VehicleNameQuery()
        if body is None:
            return None
        controller = self.locate(query.component, body)
        if not controller.found:
            logger.warning(f"{query.component} {NOT_FOUND} on vehicle body")
            return None

        resolver = resolver or MemberResolver()
        member = None
        for name in (query.field,) + query.alternates:
            lookup = resolver.resolve(query.component, name, controller.target)
            if lookup.found and lookup.member.readable:
                member = lookup.member
                break
        if member is None:
            logger.warning(f"Vehicle name member {query.field} {NOT_FOUND} or unreadable")
            return None

        try:
            value = read_member(controller.target, member)
        except Exception as e:
            logger.warning(f"Error reading vehicle name: {e}")
            return None
        if value is None:
            return None

        name = str(value)
        if query.suffix and name.endswith(query.suffix):
            name = name[: -len(query.suffix)]
        return name
