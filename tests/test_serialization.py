"""Tests for snapshot conversion to and from plain JSON data."""

import json

import pytest

from sledtuner.parameters import DEFAULT_SCHEMA, GenericValue
from sledtuner.serialization import (
    copy_snapshot,
    dumps_snapshot,
    loads_snapshot,
    snapshot_from_plain,
    snapshot_to_plain,
)


@pytest.fixture
def snapshot():
    return {
        "Rigidbody": {"mass": GenericValue.number(250), "useGravity": GenericValue.boolean(True)},
        "SnowmobileController": {"rider": GenericValue.unsupported("Skipped host object")},
        "Stabilizer": {"idleGyro": GenericValue.vector3(0, 1, 0)},
    }


class TestPlainConversion:
    """GenericValue snapshots as plain data."""

    def test_to_plain(self, snapshot):
        plain = snapshot_to_plain(snapshot)
        assert plain["Rigidbody"] == {"mass": 250.0, "useGravity": True}
        assert plain["SnowmobileController"]["rider"] == "Skipped host object"
        assert plain["Stabilizer"]["idleGyro"] == {"x": 0.0, "y": 1.0, "z": 0.0}

    def test_from_plain(self):
        result = snapshot_from_plain({"Rigidbody": {"mass": 300, "drag": "0.1"}})
        assert result["Rigidbody"]["mass"] == GenericValue.number(300)
        assert result["Rigidbody"]["drag"] == GenericValue.text("0.1")

    def test_from_plain_drops_unknown_fields(self):
        result = snapshot_from_plain(
            {"Rigidbody": {"mass": 1, "inertia": 2}, "Wing": {"lift": 3}},
            DEFAULT_SCHEMA,
        )
        assert result == {"Rigidbody": {"mass": GenericValue.number(1)}}

    def test_from_plain_rejects_bad_shapes(self):
        with pytest.raises(TypeError):
            snapshot_from_plain([1, 2, 3])
        with pytest.raises(TypeError, match="Rigidbody"):
            snapshot_from_plain({"Rigidbody": 5})

    def test_copy_is_detached(self, snapshot):
        copied = copy_snapshot(snapshot)
        copied["Rigidbody"]["mass"] = GenericValue.number(1)
        assert snapshot["Rigidbody"]["mass"] == GenericValue.number(250)


class TestJson:
    """JSON text."""

    def test_dumps_is_plain_json(self, snapshot):
        data = json.loads(dumps_snapshot(snapshot))
        assert data["Rigidbody"]["mass"] == 250.0

    def test_loads(self):
        result = loads_snapshot('{"Light": {"r": 0.75}}')
        assert result["Light"]["r"] == GenericValue.number(0.75)

    def test_loads_invalid_json(self):
        with pytest.raises(ValueError, match="Invalid snapshot JSON"):
            loads_snapshot("{not json")
