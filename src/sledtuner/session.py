"""TunerSession: the application-shell object owning store, supervisor and presets.

Editors hold a reference to one session rather than reaching for global
state. The session scopes presets to the current vehicle and tells
listeners when loaded values should be shown again (after a preset load
or a reset).
"""

import logging
from typing import Callable, List, Optional

from .config import TunerSettings
from .host.base import HostGraph
from .parameters.schema import DEFAULT_SCHEMA, ParameterSchema
from .presets import Preset, PresetStore
from .serialization import snapshot_to_plain
from .store import ApplyReport, ParameterStore
from .supervisor import InitializationSupervisor, Scheduler

logger = logging.getLogger(__name__)


class TunerSession:
    """Ties a ParameterStore, its supervisor and a PresetStore together."""

    def __init__(
        self,
        graph: HostGraph,
        settings: Optional[TunerSettings] = None,
        schema: ParameterSchema = DEFAULT_SCHEMA,
        scheduler: Optional[Scheduler] = None,
    ):
        self.settings = settings or TunerSettings()
        self.store = ParameterStore(graph, schema=schema)
        self.store.resolver.alternates = self.settings.build_alternates()
        self.supervisor = InitializationSupervisor(
            self.store,
            scheduler=scheduler,
            max_auto_retries=self.settings.max_auto_retries,
            base_delay=self.settings.base_delay,
            valid_scenes=self.settings.valid_scenes,
            invalid_scenes=self.settings.invalid_scenes,
        )
        self.presets = PresetStore(self.settings.presets_dir)
        self._loaded_listeners: List[Callable[[], None]] = []

    def add_configuration_loaded_listener(self, callback: Callable[[], None]) -> None:
        """Register callback for when editors should reload values from the store."""
        self._loaded_listeners.append(callback)

    def _configuration_loaded(self) -> None:
        for callback in list(self._loaded_listeners):
            try:
                callback()
            except Exception:
                logger.exception("Configuration listener raised")

    @property
    def vehicle(self) -> str:
        return self.store.vehicle_name()

    def presets_for_vehicle(self) -> List[Preset]:
        return self.presets.list(self.vehicle)

    def save_preset(self, name: str, description: str = "") -> Optional[Preset]:
        """Save the current values as a preset for this vehicle."""
        if not self.store.is_ready:
            logger.warning("Cannot save preset: not initialized")
            return None
        return self.presets.save(name, snapshot_to_plain(self.store.current), self.vehicle, description)

    def load_preset(self, name: str) -> Optional[ApplyReport]:
        """Load a preset into the store and apply it.

        Presets for this vehicle win over same-named presets for others.
        """
        preset = self.presets.get(name, self.vehicle) or self.presets.get(name)
        if preset is None:
            logger.warning(f"Preset '{name}' not found")
            return None
        report = self.store.load_snapshot(preset.parameters)
        logger.info(f"Loaded preset: {preset.name}")
        self._configuration_loaded()
        return report

    def delete_preset(self, name: str) -> bool:
        return self.presets.delete(name, self.vehicle) or self.presets.delete(name)

    def save_default(self) -> Optional[Preset]:
        """Store the current values as this vehicle's default."""
        if not self.store.is_ready:
            logger.warning("Cannot save default configuration: not initialized")
            return None
        return self.presets.save_default(self.vehicle, snapshot_to_plain(self.store.current))

    def load_default(self) -> Optional[ApplyReport]:
        """Load this vehicle's default, creating it from current values when missing."""
        if not self.store.is_ready:
            logger.warning("Not initialized, cannot load configuration")
            return None
        preset = self.presets.load_default(self.vehicle)
        if preset is None:
            logger.info("Creating a new default configuration")
            self.presets.save_default(self.vehicle, snapshot_to_plain(self.store.current))
            return None
        report = self.store.load_snapshot(preset.parameters)
        logger.info(f"Loaded default configuration for {self.vehicle}")
        self._configuration_loaded()
        return report

    def reset_parameters(self) -> ApplyReport:
        """Push original values back to the vehicle and tell editors to reload."""
        report = self.store.revert()
        logger.info("Parameters reset to original values")
        self._configuration_loaded()
        return report
