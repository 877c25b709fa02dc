"""Snapshot conversion between GenericValue form and plain JSON data.

A snapshot is a nested mapping component -> field -> value. Inside the
engine values are GenericValues; at the persistence boundary they are
plain numbers, bools, strings and {"x", "y", "z"} vectors.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional

from .parameters.schema import ParameterSchema
from .parameters.types import GenericValue

logger = logging.getLogger(__name__)

Snapshot = Dict[str, Dict[str, GenericValue]]
PlainSnapshot = Dict[str, Dict[str, Any]]


def snapshot_to_plain(snapshot: Mapping[str, Mapping[str, GenericValue]]) -> PlainSnapshot:
    """Convert a snapshot to plain, JSON-ready values.

    Unsupported values are written as their reason string so a reloaded
    snapshot still shows why the field could not be read.
    """
    return {
        component: {name: GenericValue.of(value).to_plain() for name, value in fields.items()}
        for component, fields in snapshot.items()
    }


def snapshot_from_plain(
    data: Mapping[str, Any],
    schema: Optional[ParameterSchema] = None,
) -> Snapshot:
    """Build a snapshot from plain data.

    Args:
        data: component -> field -> plain value
        schema: When given, components and fields it does not declare are dropped

    Returns:
        Snapshot of GenericValues

    Raises:
        TypeError: If data or one of its components is not a mapping
    """
    if not isinstance(data, Mapping):
        raise TypeError(f"Snapshot must be a mapping, got {type(data).__name__}")

    result: Snapshot = {}
    for component, fields in data.items():
        if not isinstance(fields, Mapping):
            raise TypeError(f"Component {component} must map fields to values, got {type(fields).__name__}")
        for name, value in fields.items():
            if schema is not None and (component, name) not in schema:
                logger.debug(f"Dropping {component}.{name}: not in schema")
                continue
            result.setdefault(component, {})[name] = GenericValue.of(value)
    return result


def copy_snapshot(snapshot: Mapping[str, Mapping[str, GenericValue]]) -> Snapshot:
    """Copy the nesting; GenericValues are immutable and shared."""
    return {component: dict(fields) for component, fields in snapshot.items()}


def dumps_snapshot(snapshot: Mapping[str, Mapping[str, GenericValue]], indent: Optional[int] = 2) -> str:
    return json.dumps(snapshot_to_plain(snapshot), indent=indent)


def loads_snapshot(text: str, schema: Optional[ParameterSchema] = None) -> Snapshot:
    """Parse JSON text into a snapshot.

    Raises:
        ValueError: If text is not valid JSON
        TypeError: If the JSON is not shaped like a snapshot
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid snapshot JSON: {e}") from e
    return snapshot_from_plain(data, schema)
