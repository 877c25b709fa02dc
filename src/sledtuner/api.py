"""Public API for sledtuner.

This module provides the complete public API of the tuner: the parameter
vocabulary, the binding engine, the store and its supervisor, presets and
configuration.
"""

# Host boundary
from .host import Component, HostObject, HostGraph, Scene, SceneObject, Vector3, Color

# Parameters
from .parameters import (
    GenericValue,
    ValueKind,
    NativeKind,
    NativeType,
    ComponentSpec,
    CompositeSpec,
    ParameterSchema,
    DEFAULT_SCHEMA,
    Coerced,
    to_generic,
    to_native,
    parse_vector3,
    ControlType,
    ParameterMetadata,
    DEFAULT_METADATA,
)

# Binding engine
from .binding import (
    AlternateNames,
    MemberResolver,
    ResolvedMember,
    ReflectionCache,
    ComponentBinding,
    ObjectLocator,
    OnChild,
    OnRoot,
    RootQuery,
)

# Store and supervision
from .errors import ErrorKind, Issue
from .store import ParameterStore, StoreState, InitializationOutcome, ApplyReport
from .supervisor import (
    InitializationSupervisor,
    SupervisorState,
    Scheduler,
    TickScheduler,
)

# Presets, snapshots and session
from .presets import Preset, PresetStore, preset_hash
from .serialization import snapshot_to_plain, snapshot_from_plain, dumps_snapshot, loads_snapshot
from .session import TunerSession

# Configuration
from .config import TunerSettings, load_settings, validate_settings, write_settings

# Constants
from .constants import MAX_AUTO_RETRIES, NOT_FOUND

# Version
try:
    from importlib.metadata import version
    __version__ = version("sledtuner")
except Exception:
    __version__ = "0.1.0"

# Public API Export List
__all__ = [
    # Host
    "Component",
    "HostObject",
    "HostGraph",
    "Scene",
    "SceneObject",
    "Vector3",
    "Color",

    # Parameters
    "GenericValue",
    "ValueKind",
    "NativeKind",
    "NativeType",
    "ComponentSpec",
    "CompositeSpec",
    "ParameterSchema",
    "DEFAULT_SCHEMA",
    "Coerced",
    "to_generic",
    "to_native",
    "parse_vector3",
    "ControlType",
    "ParameterMetadata",
    "DEFAULT_METADATA",

    # Binding
    "AlternateNames",
    "MemberResolver",
    "ResolvedMember",
    "ReflectionCache",
    "ComponentBinding",
    "ObjectLocator",
    "OnChild",
    "OnRoot",
    "RootQuery",

    # Store
    "ErrorKind",
    "Issue",
    "ParameterStore",
    "StoreState",
    "InitializationOutcome",
    "ApplyReport",
    "InitializationSupervisor",
    "SupervisorState",
    "Scheduler",
    "TickScheduler",

    # Presets and session
    "Preset",
    "PresetStore",
    "preset_hash",
    "snapshot_to_plain",
    "snapshot_from_plain",
    "dumps_snapshot",
    "loads_snapshot",
    "TunerSession",

    # Configuration
    "TunerSettings",
    "load_settings",
    "validate_settings",
    "write_settings",

    # Constants
    "MAX_AUTO_RETRIES",
    "NOT_FOUND",

    # Version
    "__version__",
]
