"""Named parameter presets persisted as JSON files.

A preset is pure data: a name, a free-text description, the vehicle it
was captured for, a creation timestamp and a plain snapshot of parameter
values. Presets are stored one per file as ``<vehicle>_<name>.json`` in a
single folder; each vehicle also has a ``<vehicle>_default.json`` baseline.

Key principles:
- Presets are immutable once built
- Names compare case-insensitively
- A broken file never prevents the others from loading
"""

import hashlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from .constants import UNKNOWN_VEHICLE
from .utils.text import make_safe_filename

logger = logging.getLogger(__name__)

DEFAULT_PRESET_NAME = "Default"


def _freeze_snapshot(parameters: Mapping[str, Mapping[str, Any]]) -> Mapping[str, Mapping[str, Any]]:
    return MappingProxyType({c: MappingProxyType(dict(f)) for c, f in parameters.items()})


@dataclass(frozen=True)
class Preset:
    """Immutable named snapshot of parameter values.

    Attributes:
        name: Display name, unique per vehicle (case-insensitive)
        description: Free-text notes
        vehicle: Vehicle the values were captured for
        created: Creation time
        parameters: component -> field -> plain value
    """
    name: str
    description: str = ""
    vehicle: str = UNKNOWN_VEHICLE
    created: datetime = field(default_factory=datetime.now)
    parameters: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Preset name cannot be empty")
        object.__setattr__(self, "parameters", _freeze_snapshot(self.parameters))

    def matches(self, name: str, vehicle: Optional[str] = None) -> bool:
        if self.name.casefold() != name.casefold():
            return False
        return vehicle is None or self.vehicle.casefold() == vehicle.casefold()

    @property
    def filename(self) -> str:
        return preset_filename(self.vehicle, self.name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "vehicle": self.vehicle,
            "created": self.created.isoformat(),
            "parameters": {c: dict(f) for c, f in self.parameters.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Preset":
        """Build a preset from its JSON form.

        Raises:
            ValueError: If required keys are missing or malformed
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Preset data must be a mapping, got {type(data).__name__}")
        if "name" not in data:
            raise ValueError(f"Preset data missing 'name' (keys: {sorted(data)})")
        for key in ("name", "description", "vehicle"):
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ValueError(f"Preset '{key}' must be a string, got {type(data[key]).__name__}")
        parameters = data.get("parameters") or {}
        if not isinstance(parameters, Mapping):
            raise ValueError(f"Preset {data['name']}: 'parameters' must be a mapping")

        created = data.get("created")
        return cls(
            name=data["name"],
            description=data.get("description") or "",
            vehicle=data.get("vehicle") or UNKNOWN_VEHICLE,
            created=datetime.fromisoformat(created) if created else datetime.now(),
            parameters=parameters,
        )

    def __repr__(self) -> str:
        fields = sum(len(f) for f in self.parameters.values())
        return f"Preset({self.name!r}, vehicle={self.vehicle!r}, {fields} values)"


def preset_filename(vehicle: str, name: str) -> str:
    return f"{make_safe_filename(vehicle)}_{make_safe_filename(name)}.json"


def preset_hash(preset: Preset) -> str:
    """Deterministic hash of a preset's values.

    Only vehicle and parameters participate, so re-saving the same values
    under a new description or timestamp keeps the hash. Keys are sorted
    before hashing so field order in the file does not matter.

    Returns:
        Hex string hash (16 characters)
    """
    content = {
        "vehicle": preset.vehicle,
        "parameters": {c: dict(f) for c, f in preset.parameters.items()},
    }
    text = json.dumps(content, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.blake2b(text.encode("utf-8"), digest_size=8).hexdigest()


PresetListener = Callable[[List[Preset]], None]


class PresetStore:
    """Folder of preset files with change notification."""

    def __init__(self, folder: Path):
        self.folder = Path(folder)
        self._presets: List[Preset] = []
        self._listeners: List[PresetListener] = []

    def add_listener(self, callback: PresetListener) -> None:
        """Register callback, called with the preset list whenever it changes."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        snapshot = list(self._presets)
        for callback in list(self._listeners):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Preset listener raised")

    def refresh(self) -> List[Preset]:
        """Reload every preset file from disk and notify listeners."""
        self.folder.mkdir(parents=True, exist_ok=True)
        loaded = []
        for path in sorted(self.folder.glob("*.json")):
            try:
                preset = Preset.from_dict(json.loads(path.read_text(encoding="utf-8")))
            except (OSError, ValueError, TypeError) as e:
                logger.warning(f"Error loading preset file {path}: {e}")
                continue
            loaded.append(preset)
            logger.debug(f"Loaded preset: {preset.name} for {preset.vehicle}")
        self._presets = loaded
        self._notify()
        return list(loaded)

    def list(self, vehicle: Optional[str] = None) -> List[Preset]:
        """Presets in the store, optionally only those for vehicle."""
        if vehicle is None:
            return list(self._presets)
        return [p for p in self._presets if p.vehicle.casefold() == vehicle.casefold()]

    def get(self, name: str, vehicle: Optional[str] = None) -> Optional[Preset]:
        """First preset matching name (case-insensitive), None when absent."""
        for preset in self._presets:
            if preset.matches(name, vehicle):
                return preset
        return None

    def path_for(self, preset: Preset) -> Path:
        if preset.name.casefold() == DEFAULT_PRESET_NAME.casefold():
            return self.default_path(preset.vehicle)
        return self.folder / preset.filename

    def save(
        self,
        name: str,
        parameters: Mapping[str, Mapping[str, Any]],
        vehicle: str = UNKNOWN_VEHICLE,
        description: str = "",
    ) -> Preset:
        """Write a preset file, replacing one with the same name and vehicle.

        Raises:
            ValueError: If name is empty
            OSError: If the file cannot be written
        """
        preset = Preset(name=name, description=description, vehicle=vehicle or UNKNOWN_VEHICLE,
                        parameters=parameters)
        path = self.path_for(preset)
        self.folder.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(preset.to_dict(), indent=2), encoding="utf-8")
        logger.info(f"Preset '{name}' saved to: {path}")
        self.refresh()
        return preset

    def delete(self, name: str, vehicle: Optional[str] = None) -> bool:
        """Delete a preset's file.

        Returns:
            True if a file was removed
        """
        preset = self.get(name, vehicle)
        if preset is None:
            logger.warning(f"Preset '{name}' not found for deletion")
            return False
        path = self.path_for(preset)
        if not path.exists():
            logger.warning(f"Preset file not found for deletion: {path}")
            return False
        path.unlink()
        logger.info(f"Deleted preset: {preset.name}")
        self.refresh()
        return True

    def default_path(self, vehicle: str) -> Path:
        return self.folder / preset_filename(vehicle, DEFAULT_PRESET_NAME.lower())

    def save_default(self, vehicle: str, parameters: Mapping[str, Mapping[str, Any]]) -> Preset:
        """Write the vehicle's default baseline file."""
        preset = Preset(
            name=DEFAULT_PRESET_NAME,
            description=f"Default configuration for {vehicle}",
            vehicle=vehicle,
            parameters=parameters,
        )
        path = self.default_path(vehicle)
        self.folder.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(preset.to_dict(), indent=2), encoding="utf-8")
        logger.info(f"Default configuration saved to: {path}")
        self.refresh()
        return preset

    def load_default(self, vehicle: str) -> Optional[Preset]:
        """Read the vehicle's default file, None when missing or unreadable."""
        path = self.default_path(vehicle)
        if not path.exists():
            logger.warning(f"Default config file not found: {path}")
            return None
        try:
            return Preset.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading configuration {path}: {e}")
            return None
