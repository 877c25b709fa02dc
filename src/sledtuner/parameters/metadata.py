"""Editor metadata for parameters: display names, ranges and control kinds."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..constants import DEFAULT_SLIDER_MAX, DEFAULT_SLIDER_MIN
from .types import NativeKind, NativeType


class ControlType(str, Enum):
    SLIDER = "slider"
    TOGGLE = "toggle"
    TEXT = "text"
    DROPDOWN = "dropdown"


@dataclass(frozen=True)
class ParameterMetadata:
    """Presentation hints for one field.

    Attributes:
        display_name: Label shown next to the control
        description: Tooltip text
        min_value: Slider lower bound
        max_value: Slider upper bound
        control: Preferred editing control
    """
    display_name: str
    description: str = ""
    min_value: float = DEFAULT_SLIDER_MIN
    max_value: float = DEFAULT_SLIDER_MAX
    control: ControlType = ControlType.SLIDER

    def __post_init__(self):
        if self.min_value > self.max_value:
            raise ValueError(
                f"Metadata {self.display_name}: min ({self.min_value}) > max ({self.max_value})"
            )


MetadataTable = Mapping[str, Mapping[str, ParameterMetadata]]

DEFAULT_METADATA: MetadataTable = MappingProxyType({
    "RagDollCollisionController": MappingProxyType({
        "ragdollThreshold": ParameterMetadata(
            "Ragdoll Threshold", "Threshold for ragdoll activation", 0.0, 1000.0),
        "ragdollThresholdDownFactor": ParameterMetadata(
            "Ragdoll Threshold Down Factor", "Down factor for ragdoll threshold", 0.0, 10.0),
    }),
    "Light": MappingProxyType({
        channel: ParameterMetadata(f"Headlight {label}", f"{label} channel of the headlight colour", 0.0, 1.0)
        for channel, label in (("r", "Red"), ("g", "Green"), ("b", "Blue"), ("a", "Alpha"))
    }),
})


def lookup_metadata(table: MetadataTable, component: str, field_name: str) -> Optional[ParameterMetadata]:
    return table.get(component, {}).get(field_name)


def slider_range(table: MetadataTable, component: str, field_name: str) -> Tuple[float, float]:
    """Slider bounds for a field, (-100, 100) when no metadata exists."""
    meta = lookup_metadata(table, component, field_name)
    if meta is None:
        return DEFAULT_SLIDER_MIN, DEFAULT_SLIDER_MAX
    return meta.min_value, meta.max_value


def suggest_control(native_type: Optional[NativeType]) -> ControlType:
    """Editing control suited to a member's native type."""
    if native_type is None:
        return ControlType.TEXT
    if native_type.kind is NativeKind.BOOL:
        return ControlType.TOGGLE
    if native_type.kind is NativeKind.ENUM:
        return ControlType.DROPDOWN
    if native_type.is_numeric:
        return ControlType.SLIDER
    return ControlType.TEXT
