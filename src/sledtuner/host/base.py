"""Abstract boundary to the external host object graph.

The engine never owns host objects. It only queries them through the two
interfaces below and treats every call as potentially failing: a host
implementation may raise from any method and the engine degrades to
"not found" for that lookup.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional


class Component:
    """Marker base for host-managed components.

    Anything deriving from Component (or HostObject) is an opaque host
    reference: the engine can display it but never edits it.
    """

    owner: Optional["HostObject"] = None


class HostObject(ABC):
    """A named node of the host graph that carries components."""

    name: str
    tag: str

    @abstractmethod
    def find(self, path: str) -> Optional["HostObject"]:
        """Find a descendant by slash-separated relative path."""

    @abstractmethod
    def children(self) -> Iterable["HostObject"]:
        """Direct children of this node."""

    @abstractmethod
    def get_component(self, type_name: str) -> Optional[object]:
        """Component of the given type name attached to this node, if any."""


class HostGraph(ABC):
    """Global queries over the running host scene."""

    @abstractmethod
    def find(self, path: str) -> Optional[HostObject]:
        """Find an object by name or by absolute slash-separated path."""

    @abstractmethod
    def find_with_tag(self, tag: str) -> Optional[HostObject]:
        """First object carrying the given tag."""

    @abstractmethod
    def objects(self) -> Iterable[HostObject]:
        """Every object currently in the scene."""


def is_host_reference(value: object) -> bool:
    """True when value is an opaque host-managed object."""
    return isinstance(value, (HostObject, Component))


def is_host_reference_type(tp: object) -> bool:
    """True when tp is a class whose instances are host-managed objects."""
    return isinstance(tp, type) and issubclass(tp, (HostObject, Component))
