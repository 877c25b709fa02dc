"""In-memory host graph.

A small scene-graph implementation of the host interfaces. It mirrors the
shape of a live game scene (named objects with tags, children and typed
components) and is used to drive the engine outside the real host.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

from .base import Component, HostGraph, HostObject


@dataclass
class Vector3:
    """Host 3-component spatial value."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))


@dataclass
class Color:
    """Host RGBA colour value."""
    r: float = 1.0
    g: float = 1.0
    b: float = 1.0
    a: float = 1.0


class SceneObject(HostObject):
    """Scene node holding components keyed by their type name."""

    def __init__(self, name: str, tag: str = "Untagged", components: Iterable[object] = ()):
        self.name = name
        self.tag = tag
        self.parent: Optional["SceneObject"] = None
        self._children: List["SceneObject"] = []
        self._components: Dict[str, object] = {}
        for component in components:
            self.add_component(component)

    def add_child(self, child: "SceneObject") -> "SceneObject":
        """Attach child and return it (for chaining in scene builders)."""
        child.parent = self
        self._children.append(child)
        return child

    def add_component(self, component: object, type_name: Optional[str] = None) -> object:
        """Attach component under its class name unless type_name is given."""
        key = type_name or type(component).__name__
        self._components[key] = component
        if isinstance(component, Component):
            component.owner = self
        return component

    def remove_component(self, type_name: str) -> None:
        self._components.pop(type_name, None)

    def children(self) -> List["SceneObject"]:
        return list(self._children)

    def child(self, name: str) -> Optional["SceneObject"]:
        for candidate in self._children:
            if candidate.name == name:
                return candidate
        return None

    def find(self, path: str) -> Optional["SceneObject"]:
        node: Optional[SceneObject] = self
        for part in path.split("/"):
            if not part:
                continue
            node = node.child(part) if node is not None else None
        return node if node is not self else None

    def get_component(self, type_name: str) -> Optional[object]:
        return self._components.get(type_name)

    def walk(self) -> Iterator["SceneObject"]:
        """Depth-first iteration over this node and its descendants."""
        yield self
        for child in self._children:
            yield from child.walk()

    def __repr__(self) -> str:
        return f"SceneObject({self.name!r}, {len(self._children)} children, {sorted(self._components)})"


class Scene(HostGraph):
    """Collection of root scene objects."""

    def __init__(self, roots: Iterable[SceneObject] = ()):
        self.roots: List[SceneObject] = list(roots)

    def add(self, root: SceneObject) -> SceneObject:
        self.roots.append(root)
        return root

    def find(self, path: str) -> Optional[SceneObject]:
        """Resolve "Root/Child/..." paths, or a bare name anywhere in the scene."""
        head, _, rest = path.partition("/")
        if rest:
            for root in self.roots:
                if root.name == head:
                    found = root.find(rest)
                    if found is not None:
                        return found
            return None
        for obj in self.objects():
            if obj.name == head:
                return obj
        return None

    def find_with_tag(self, tag: str) -> Optional[SceneObject]:
        for obj in self.objects():
            if obj.tag == tag:
                return obj
        return None

    def objects(self) -> Iterator[SceneObject]:
        for root in self.roots:
            yield from root.walk()
