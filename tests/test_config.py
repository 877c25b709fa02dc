"""Tests for [tool.sledtuner] settings."""

from pathlib import Path

import pytest
import toml

from sledtuner.config import (
    TunerSettings,
    load_settings,
    read_settings_table,
    settings_from_dict,
    validate_settings,
    write_settings,
)
from sledtuner.constants import DEFAULT_VALID_SCENES, MAX_AUTO_RETRIES

PYPROJECT = """
[project]
name = "my-sled-mods"

[tool.sledtuner]
presets_dir = "Mods/SledTuner/Presets"
max_auto_retries = 5
base_delay = 0.5
valid_scenes = ["Woodland"]

[tool.sledtuner.alternates]
"Shock.compression" = ["compressionAmount"]
"""


@pytest.fixture
def pyproject(tmp_path):
    path = tmp_path / "pyproject.toml"
    path.write_text(PYPROJECT, encoding="utf-8")
    return path


class TestValidateSettings:
    """Error messages for malformed tables."""

    def test_valid(self):
        assert validate_settings({"max_auto_retries": 2, "valid_scenes": ["Idaho"]}) == []

    def test_empty_is_valid(self):
        assert validate_settings({}) == []

    @pytest.mark.parametrize("table,message", [
        ({"max_auto_retries": 0}, "max_auto_retries"),
        ({"max_auto_retries": True}, "max_auto_retries"),
        ({"base_delay": -1}, "base_delay"),
        ({"presets_dir": 3}, "presets_dir"),
        ({"valid_scenes": "Woodland"}, "valid_scenes"),
        ({"colour": "red"}, "Unknown setting: colour"),
        ({"alternates": {"compression": ["c"]}}, "Component.field"),
        ({"alternates": {"Shock.mass": "weight"}}, "list of strings"),
    ])
    def test_errors(self, table, message):
        errors = validate_settings(table)
        assert any(message in e for e in errors), errors

    @pytest.mark.parametrize("table", [
        {"valid_scenes": 5},
        {"valid_scenes": 5, "invalid_scenes": ["Garage"]},
        {"valid_scenes": ["Garage"], "invalid_scenes": "Garage"},
    ])
    def test_non_list_scenes_reported(self, table):
        errors = validate_settings(table)
        assert len(errors) == 1
        assert "must be a list of strings" in errors[0]

    def test_overlapping_scenes(self):
        errors = validate_settings({"valid_scenes": ["Garage"], "invalid_scenes": ["Garage"]})
        assert errors == ["Scenes listed as both valid and invalid: ['Garage']"]


class TestLoadSettings:
    """Reading settings from TOML."""

    def test_read_table(self, pyproject):
        assert read_settings_table(pyproject)["max_auto_retries"] == 5

    def test_load(self, pyproject):
        settings = load_settings(pyproject)
        assert settings.presets_dir == Path("Mods/SledTuner/Presets")
        assert settings.max_auto_retries == 5
        assert settings.base_delay == 0.5
        assert settings.valid_scenes == ("Woodland",)
        assert settings.alternates == {"Shock.compression": ("compressionAmount",)}

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.toml")
        assert settings == TunerSettings()
        assert settings.max_auto_retries == MAX_AUTO_RETRIES
        assert settings.valid_scenes == DEFAULT_VALID_SCENES

    def test_read_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_settings_table(tmp_path / "absent.toml")

    def test_invalid_table_raises(self):
        with pytest.raises(ValueError, match="Invalid"):
            settings_from_dict({"base_delay": "soon"})

    def test_build_alternates_extends_defaults(self, pyproject):
        table = load_settings(pyproject).build_alternates()
        assert table.for_field("Shock", "compression") == ("compressionAmount",)
        assert table.for_field("Rigidbody", "drag") == ("linearDamping",)


class TestWriteSettings:
    """Writing settings back."""

    def test_round_trip_keeps_other_tables(self, pyproject):
        settings = TunerSettings(presets_dir=Path("out"), max_auto_retries=2)
        write_settings(settings, pyproject)
        data = toml.load(pyproject)
        assert data["project"]["name"] == "my-sled-mods"
        assert load_settings(pyproject) == settings

    def test_creates_file(self, tmp_path):
        path = tmp_path / "sledtuner.toml"
        write_settings(TunerSettings(), path)
        assert load_settings(path) == TunerSettings()
