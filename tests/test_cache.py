"""Tests for the ReflectionCache."""

import pytest

from sledtuner.binding import ComponentBinding, ReflectionCache
from sledtuner.parameters import GenericValue, ValueKind


@pytest.fixture
def bindings(sled):
    return {
        "Rigidbody": ComponentBinding("Rigidbody", sled.rigidbody),
        "SnowmobileController": ComponentBinding("SnowmobileController", sled.controller),
        "Light": ComponentBinding("Light", sled.light),
    }


@pytest.fixture
def cache(small_schema, bindings):
    cache = ReflectionCache()
    cache.build(small_schema, bindings)
    return cache


class TestBuild:
    """Resolving the schema against bound objects."""

    def test_resolves_bound_fields(self, cache):
        assert cache.is_built
        assert ("Rigidbody", "mass") in cache
        assert cache.get("Rigidbody", "drag").attribute == "linearDamping"

    def test_composite_channels_are_special(self, cache):
        assert cache.is_special("Light", "r")
        assert cache.get("Light", "r") is None

    def test_missing_member_recorded(self, cache):
        missing = cache.missing()
        assert missing["SnowmobileController"] == {"wheelieThreshold": "not found: wheelieThreshold"}

    def test_unbound_components_missing_entirely(self, cache):
        missing = cache.missing()
        assert missing["Shock"] == {"compression": "component not found", "mass": "component not found"}
        assert set(missing["RagDollCollisionController"]) == {"ragdollThreshold", "ragdollThresholdDownFactor"}

    def test_build_returns_read_only_view(self, small_schema, bindings):
        members = ReflectionCache().build(small_schema, bindings)
        with pytest.raises(TypeError):
            members[("Rigidbody", "mass")] = None

    def test_rebuild_replaces_previous_cycle(self, cache, small_schema):
        cache.build(small_schema, {})
        assert len(cache) == 0
        assert "Rigidbody" in cache.missing()

    def test_clear(self, cache):
        cache.clear()
        assert not cache.is_built
        assert len(cache) == 0
        assert cache.missing() == {}


class TestRead:
    """Reading through cached members."""

    def test_reads_generic_values(self, cache, bindings):
        assert cache.read(bindings["Rigidbody"], "mass") == GenericValue.number(250.0)
        assert cache.read(bindings["Rigidbody"], "useGravity") == GenericValue.boolean(True)
        assert cache.read(bindings["SnowmobileController"], "throttleExponent") == GenericValue.number(2.0)

    def test_object_reference_unsupported(self, cache, bindings):
        value = cache.read(bindings["SnowmobileController"], "rider")
        assert value == GenericValue.unsupported("Skipped host object")

    def test_missing_member_unsupported(self, cache, bindings):
        value = cache.read(bindings["SnowmobileController"], "wheelieThreshold")
        assert value.kind is ValueKind.UNSUPPORTED
        assert "not found" in value.value

    def test_host_error_while_reading(self, cache, bindings, sled):
        del sled.rigidbody.mass
        value = cache.read(bindings["Rigidbody"], "mass")
        assert value.kind is ValueKind.UNSUPPORTED
        assert value.value.startswith("Error reading 'mass'")
