"""Tests for ParameterSchema, ComponentSpec and editor metadata."""

from enum import Enum

import numpy as np
import pytest

from sledtuner.host import Color, Component, Vector3
from sledtuner.parameters import (
    ComponentSpec,
    CompositeSpec,
    ControlType,
    DEFAULT_METADATA,
    DEFAULT_SCHEMA,
    NativeKind,
    NativeType,
    ParameterMetadata,
    ParameterSchema,
    slider_range,
    suggest_control,
)


class Gear(Enum):
    LOW = 1
    HIGH = 2


class TestComponentSpec:
    """Validation of a single component."""

    def test_fields_frozen(self):
        spec = ComponentSpec("Shock", ["compression", "mass"])
        assert spec.fields == ("compression", "mass")

    def test_duplicate_fields_rejected(self):
        with pytest.raises(ValueError, match="duplicate fields"):
            ComponentSpec("Shock", ("mass", "mass"))

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            ComponentSpec("")

    def test_composite_channels_must_be_fields(self):
        with pytest.raises(ValueError, match="not declared fields"):
            ComponentSpec("Light", ("r",), composite=CompositeSpec("color", ("r", "g")))

    def test_composite_bounds(self):
        with pytest.raises(ValueError, match="lower"):
            CompositeSpec("color", ("r",), lower=1.0, upper=0.0)


class TestParameterSchema:
    """Schema lookups."""

    def test_duplicate_components_rejected(self):
        with pytest.raises(ValueError, match="Duplicate component"):
            ParameterSchema([ComponentSpec("A", ("x",)), ComponentSpec("A", ("y",))])

    def test_contains_name_and_pair(self):
        assert "Rigidbody" in DEFAULT_SCHEMA
        assert ("Rigidbody", "drag") in DEFAULT_SCHEMA
        assert ("Rigidbody", "inertia") not in DEFAULT_SCHEMA

    def test_unknown_component_lists_available(self):
        with pytest.raises(KeyError, match="Available"):
            DEFAULT_SCHEMA.get_component("Wing")

    def test_default_schema_shape(self):
        assert len(DEFAULT_SCHEMA) == 10
        assert DEFAULT_SCHEMA.names()[0] == "SnowmobileController"
        assert DEFAULT_SCHEMA.fields("Light") == ("r", "g", "b", "a")
        assert DEFAULT_SCHEMA.is_composite_channel("Light", "a")
        assert not DEFAULT_SCHEMA.is_composite_channel("Rigidbody", "mass")

    def test_pairs_in_order(self):
        schema = ParameterSchema([ComponentSpec("A", ("x", "y")), ComponentSpec("B", ("z",))])
        assert schema.pairs() == [("A", "x"), ("A", "y"), ("B", "z")]

    def test_to_dict(self):
        data = DEFAULT_SCHEMA.to_dict()
        light = next(c for c in data["components"] if c["name"] == "Light")
        assert light["composite"]["channels"] == ["r", "g", "b", "a"]


class TestMetadata:
    """Editor hints."""

    def test_slider_range_default(self):
        assert slider_range(DEFAULT_METADATA, "Rigidbody", "mass") == (-100.0, 100.0)

    def test_slider_range_from_metadata(self):
        assert slider_range(DEFAULT_METADATA, "Light", "r") == (0.0, 1.0)

    def test_min_above_max_rejected(self):
        with pytest.raises(ValueError):
            ParameterMetadata("Broken", min_value=5, max_value=1)

    @pytest.mark.parametrize("tp,control", [
        (bool, ControlType.TOGGLE),
        (float, ControlType.SLIDER),
        (int, ControlType.SLIDER),
        (np.float32, ControlType.SLIDER),
        (str, ControlType.TEXT),
        (Gear, ControlType.DROPDOWN),
        (Vector3, ControlType.TEXT),
        (Component, ControlType.TEXT),
        (Color, ControlType.TEXT),
    ])
    def test_suggest_control(self, tp, control):
        assert suggest_control(NativeType.from_annotation(tp)) is control

    def test_suggest_control_unknown(self):
        assert suggest_control(None) is ControlType.TEXT

    def test_every_native_kind_has_a_control(self):
        for kind in NativeKind:
            assert isinstance(suggest_control(NativeType(kind)), ControlType)
