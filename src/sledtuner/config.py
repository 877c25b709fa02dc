"""Tuner settings stored in the [tool.sledtuner] table of a TOML file.

Reads with tomllib and writes back with toml, preserving the other tables
of the file (typically pyproject.toml).
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import tomllib
import toml

from .binding.members import DEFAULT_ALTERNATES, AlternateNames
from .constants import (
    BASE_RETRY_DELAY,
    DEFAULT_INVALID_SCENES,
    DEFAULT_VALID_SCENES,
    MAX_AUTO_RETRIES,
)

TOOL_KEY = "sledtuner"
DEFAULT_PRESETS_DIR = "presets"


@dataclass(frozen=True)
class TunerSettings:
    """Validated tuner configuration.

    Attributes:
        presets_dir: Folder holding preset JSON files
        max_auto_retries: Automatic initialization attempts before giving up
        base_delay: Seconds between attempts, multiplied by the attempt number
        valid_scenes: Scenes that trigger automatic initialization
        invalid_scenes: Scenes that never hold a vehicle
        alternates: Extra alternate member names, "Component.field" -> names
    """
    presets_dir: Path = Path(DEFAULT_PRESETS_DIR)
    max_auto_retries: int = MAX_AUTO_RETRIES
    base_delay: float = BASE_RETRY_DELAY
    valid_scenes: Tuple[str, ...] = DEFAULT_VALID_SCENES
    invalid_scenes: Tuple[str, ...] = DEFAULT_INVALID_SCENES
    alternates: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def build_alternates(self) -> AlternateNames:
        """Default alternate names extended with the configured ones."""
        table = AlternateNames(DEFAULT_ALTERNATES)
        for key, names in self.alternates.items():
            component, _, field_name = key.partition(".")
            table.add(component, field_name, *names)
        return table

    def to_dict(self) -> Dict[str, Any]:
        return {
            "presets_dir": str(self.presets_dir),
            "max_auto_retries": self.max_auto_retries,
            "base_delay": self.base_delay,
            "valid_scenes": list(self.valid_scenes),
            "invalid_scenes": list(self.invalid_scenes),
            "alternates": {k: list(v) for k, v in self.alternates.items()},
        }


def read_settings_table(path: Path) -> Dict[str, Any]:
    """Read the [tool.sledtuner] table.

    Returns:
        The table, or empty dict if the file has none

    Raises:
        FileNotFoundError: If path doesn't exist
        tomllib.TOMLDecodeError: If TOML is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"{path} not found")

    with open(path, "rb") as f:
        data = tomllib.load(f)

    return data.get("tool", {}).get(TOOL_KEY, {})


def validate_settings(config: Dict[str, Any]) -> List[str]:
    """Validate a [tool.sledtuner] table.

    Args:
        config: The raw table

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    known = {"presets_dir", "max_auto_retries", "base_delay", "valid_scenes", "invalid_scenes", "alternates"}
    for key in sorted(set(config) - known):
        errors.append(f"Unknown setting: {key}")

    if "presets_dir" in config and not isinstance(config["presets_dir"], str):
        errors.append("presets_dir must be a string")

    retries = config.get("max_auto_retries", MAX_AUTO_RETRIES)
    if isinstance(retries, bool) or not isinstance(retries, int) or retries < 1:
        errors.append(f"max_auto_retries must be a positive integer, got: {retries!r}")

    delay = config.get("base_delay", BASE_RETRY_DELAY)
    if isinstance(delay, bool) or not isinstance(delay, (int, float)) or delay < 0:
        errors.append(f"base_delay must be a non-negative number, got: {delay!r}")

    scene_lists = {}
    for key in ("valid_scenes", "invalid_scenes"):
        scenes = config.get(key, [])
        if not isinstance(scenes, list) or not all(isinstance(s, str) for s in scenes):
            errors.append(f"{key} must be a list of strings")
        else:
            scene_lists[key] = scenes

    if len(scene_lists) == 2:
        overlap = set(scene_lists["valid_scenes"]) & set(scene_lists["invalid_scenes"])
        if overlap:
            errors.append(f"Scenes listed as both valid and invalid: {sorted(overlap)}")

    alternates = config.get("alternates", {})
    if not isinstance(alternates, dict):
        errors.append("alternates must be a table")
    else:
        for key, names in alternates.items():
            component, _, field_name = key.partition(".")
            if not component or not field_name:
                errors.append(f"alternates key must be 'Component.field', got: {key}")
            if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
                errors.append(f"alternates.{key} must be a list of strings")

    return errors


def settings_from_dict(config: Dict[str, Any]) -> TunerSettings:
    """Build settings from a raw table.

    Raises:
        ValueError: If the table is invalid (message lists every problem)
    """
    errors = validate_settings(config)
    if errors:
        raise ValueError("Invalid [tool.sledtuner] settings:\n  " + "\n  ".join(errors))

    return TunerSettings(
        presets_dir=Path(config.get("presets_dir", DEFAULT_PRESETS_DIR)),
        max_auto_retries=config.get("max_auto_retries", MAX_AUTO_RETRIES),
        base_delay=float(config.get("base_delay", BASE_RETRY_DELAY)),
        valid_scenes=tuple(config.get("valid_scenes", DEFAULT_VALID_SCENES)),
        invalid_scenes=tuple(config.get("invalid_scenes", DEFAULT_INVALID_SCENES)),
        alternates={k: tuple(v) for k, v in config.get("alternates", {}).items()},
    )


def load_settings(path: Optional[Path] = None) -> TunerSettings:
    """Load settings from path (./pyproject.toml by default).

    A missing file or a file without the table yields default settings.
    """
    path = Path(path) if path is not None else Path.cwd() / "pyproject.toml"
    if not path.exists():
        return TunerSettings()
    return settings_from_dict(read_settings_table(path))


def write_settings(settings: TunerSettings, path: Path) -> None:
    """Write settings into the [tool.sledtuner] table, keeping other tables."""
    path = Path(path)
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = toml.load(f)
    else:
        data = {}

    if "tool" not in data:
        data["tool"] = {}
    data["tool"][TOOL_KEY] = settings.to_dict()

    with open(path, "w", encoding="utf-8") as f:
        toml.dump(data, f)
