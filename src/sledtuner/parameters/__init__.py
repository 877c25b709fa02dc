"""Parameter vocabulary for the tuner.

This module provides the schema of tunable components, the generic value
representation shared with editors and presets, native type tags for host
members, and the coercion functions between them.
"""

from .types import (
    GenericValue,
    ValueKind,
    NativeKind,
    NativeType,
    is_vector_type,
)
from .schema import (
    CompositeSpec,
    ComponentSpec,
    ParameterSchema,
    DEFAULT_SCHEMA,
)
from .coercion import (
    Coerced,
    to_generic,
    to_native,
    parse_vector3,
    coerce_channel,
    ZERO_VECTOR,
)
from .metadata import (
    ControlType,
    ParameterMetadata,
    DEFAULT_METADATA,
    slider_range,
    suggest_control,
)

__all__ = [
    # Types
    "GenericValue",
    "ValueKind",
    "NativeKind",
    "NativeType",
    "is_vector_type",
    # Schema
    "CompositeSpec",
    "ComponentSpec",
    "ParameterSchema",
    "DEFAULT_SCHEMA",
    # Coercion
    "Coerced",
    "to_generic",
    "to_native",
    "parse_vector3",
    "coerce_channel",
    "ZERO_VECTOR",
    # Metadata
    "ControlType",
    "ParameterMetadata",
    "DEFAULT_METADATA",
    "slider_range",
    "suggest_control",
]
