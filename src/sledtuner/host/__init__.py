"""Host object graph interfaces and the in-memory scene implementation."""

from .base import (
    Component,
    HostObject,
    HostGraph,
    is_host_reference,
    is_host_reference_type,
)
from .memory import Scene, SceneObject, Vector3, Color

__all__ = [
    "Component",
    "HostObject",
    "HostGraph",
    "is_host_reference",
    "is_host_reference_type",
    "Scene",
    "SceneObject",
    "Vector3",
    "Color",
]
