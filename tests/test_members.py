"""Tests for member resolution and the alternate-name table."""

import pytest

from sledtuner.binding import (
    AlternateNames,
    DEFAULT_ALTERNATES,
    MemberAccess,
    MemberResolver,
    read_member,
    write_member,
)
from sledtuner.parameters import NativeKind


class Exploding:
    """Host object whose properties raise when touched."""

    @property
    def mass(self) -> float:
        raise RuntimeError("destroyed")


class ExplodingUntyped:
    @property
    def mass(self):
        raise RuntimeError("destroyed")


class Private:
    def __init__(self):
        self._power = 40.0

    def power_curve(self):
        return []


class TestAlternateNames:
    """Ordered candidate names."""

    def test_candidates_order(self):
        table = AlternateNames({("Rigidbody", "drag"): ("linearDamping",)})
        assert table.candidates("Rigidbody", "drag") == ("drag", "linearDamping", "_drag", "_linearDamping")

    def test_add_is_additive(self):
        table = AlternateNames()
        table.add("Shock", "compression", "comp")
        table.add("Shock", "compression", "comp", "compressionAmount")
        assert table.for_field("Shock", "compression") == ("comp", "compressionAmount")

    def test_wildcard_component(self):
        table = AlternateNames()
        table.add("*", "mass", "weight")
        assert "weight" in table.candidates("Shock", "mass")

    def test_defaults_cover_renamed_damping(self):
        table = AlternateNames(DEFAULT_ALTERNATES)
        assert table.for_field("Rigidbody", "angularDrag") == ("angularDamping",)
        assert table.to_dict()["MeshInterpretter.breakForce"] == ("brakeForce",)


class TestMemberResolver:
    """Resolving (component, field) pairs on live objects."""

    @pytest.fixture
    def resolver(self):
        return MemberResolver()

    def test_declared_field(self, resolver, sled):
        lookup = resolver.resolve("Rigidbody", "mass", sled.rigidbody)
        assert lookup.found
        member = lookup.member
        assert member.access is MemberAccess.FIELD
        assert member.native_type.kind is NativeKind.FLOAT
        assert member.readable and member.writable
        assert member.key == ("Rigidbody", "mass")

    def test_alternate_name(self, resolver, sled):
        member = resolver.resolve("Rigidbody", "drag", sled.rigidbody).member
        assert member.attribute == "linearDamping"
        assert member.field == "drag"

    def test_misspelled_host_name(self, resolver, sled):
        member = resolver.resolve("SnowmobileController", "driverTorgueFactorRoll", sled.controller).member
        assert member.attribute == "driverTorqueFactorRoll"

    def test_private_backing_attribute(self, resolver):
        member = resolver.resolve("MeshInterpretter", "power", Private()).member
        assert member.attribute == "_power"
        assert member.native_type.kind is NativeKind.FLOAT

    def test_methods_are_not_members(self, resolver):
        assert not resolver.resolve("MeshInterpretter", "power_curve", Private()).found

    def test_read_only_property(self, resolver, sled):
        member = resolver.resolve("SnowmobileController", "isStuck", sled.controller).member
        assert member.access is MemberAccess.PROPERTY
        assert member.readable
        assert not member.writable

    def test_object_reference_read_only(self, resolver, sled):
        member = resolver.resolve("SnowmobileController", "rider", sled.controller).member
        assert member.native_type.kind is NativeKind.OBJECT_REF
        assert not member.writable

    def test_missing_member(self, resolver, sled):
        lookup = resolver.resolve("Rigidbody", "inertia", sled.rigidbody)
        assert not lookup.found
        assert lookup.reason == "not found: inertia"

    def test_unbound_target(self, resolver):
        assert "not bound" in resolver.resolve("Shock", "mass", None).reason

    def test_typed_property_resolves_without_reading(self, resolver):
        lookup = resolver.resolve("Rigidbody", "mass", Exploding())
        assert lookup.found
        assert lookup.member.native_type.kind is NativeKind.FLOAT

    def test_untyped_raising_property_is_a_miss(self, resolver):
        assert not resolver.resolve("Rigidbody", "mass", ExplodingUntyped()).found

    def test_custom_alternates(self, sled):
        table = AlternateNames()
        table.add("Rigidbody", "weight", "mass")
        member = MemberResolver(table).resolve("Rigidbody", "weight", sled.rigidbody).member
        assert member.attribute == "mass"


class TestReadWrite:
    """Reading and writing through ResolvedMember."""

    def test_write_then_read(self, sled):
        member = MemberResolver().resolve("Rigidbody", "drag", sled.rigidbody).member
        write_member(sled.rigidbody, member, 0.2)
        assert sled.rigidbody.linearDamping == 0.2
        assert read_member(sled.rigidbody, member) == 0.2

    def test_write_read_only_raises(self, sled):
        member = MemberResolver().resolve("SnowmobileController", "isStuck", sled.controller).member
        with pytest.raises(PermissionError, match="read-only"):
            write_member(sled.controller, member, True)
