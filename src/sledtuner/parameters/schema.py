"""Parameter schema: which components and fields the tuner exposes.

The schema is fixed at process start and immutable afterwards. Every
(component, field) pair referenced anywhere else in the engine must be
declared here.

Key types:
- CompositeSpec: a composite host value (e.g. a light colour) whose
  channels are exposed as individual schema fields
- ComponentSpec: one logical component and its ordered field names
- ParameterSchema: the complete, validated set of component specs
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class CompositeSpec:
    """Composite host value exposed channel by channel.

    Attributes:
        attribute: Host attribute holding the composite (e.g. "color")
        channels: Channel names, each also a field of the owning component
        lower: Minimum channel value (writes are clamped)
        upper: Maximum channel value (writes are clamped)
    """
    attribute: str
    channels: Tuple[str, ...]
    lower: float = 0.0
    upper: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "channels", tuple(self.channels))
        if not self.channels:
            raise ValueError(f"Composite '{self.attribute}' must declare at least one channel")
        if self.lower > self.upper:
            raise ValueError(f"Composite '{self.attribute}': lower ({self.lower}) > upper ({self.upper})")


@dataclass(frozen=True)
class ComponentSpec:
    """A logical component and the fields of interest on it.

    Attributes:
        name: Logical component name (e.g. "Rigidbody")
        fields: Ordered field names
        composite: Optional composite whose channels are part of fields
        doc: Human-readable description
    """
    name: str
    fields: Tuple[str, ...] = ()
    composite: Optional[CompositeSpec] = None
    doc: str = ""

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        if not self.name:
            raise ValueError("ComponentSpec name cannot be empty")

        if len(self.fields) != len(set(self.fields)):
            duplicates = sorted({f for f in self.fields if self.fields.count(f) > 1})
            raise ValueError(f"Component {self.name}: duplicate fields {duplicates}")

        if self.composite is not None:
            undeclared = [c for c in self.composite.channels if c not in self.fields]
            if undeclared:
                raise ValueError(
                    f"Component {self.name}: composite channels {undeclared} are not declared fields"
                )

    def is_channel(self, field_name: str) -> bool:
        return self.composite is not None and field_name in self.composite.channels


@dataclass(frozen=True)
class ParameterSchema:
    """Immutable mapping of logical component -> ordered field names.

    Attributes:
        components: Component specifications, in display order
    """
    components: List[ComponentSpec] = field(default_factory=list)

    def __post_init__(self):
        names = [spec.name for spec in self.components]
        if len(names) != len(set(names)):
            duplicates = [n for n in names if names.count(n) > 1]
            raise ValueError(f"Duplicate component names: {set(duplicates)}")

        object.__setattr__(self, "_spec_dict", MappingProxyType({s.name: s for s in self.components}))
        object.__setattr__(self, "components", tuple(self.components))

    def names(self) -> List[str]:
        """Ordered list of component names."""
        return [spec.name for spec in self.components]

    def get_component(self, name: str) -> ComponentSpec:
        """Get the specification for a component.

        Raises:
            KeyError: If the component is not in the schema
        """
        if name not in self._spec_dict:
            raise KeyError(f"Unknown component: {name}. Available: {sorted(self._spec_dict.keys())}")
        return self._spec_dict[name]

    def fields(self, name: str) -> Tuple[str, ...]:
        return self.get_component(name).fields

    def pairs(self) -> List[Tuple[str, str]]:
        """Every (component, field) pair in schema order."""
        return [(spec.name, f) for spec in self.components for f in spec.fields]

    def is_composite_channel(self, component: str, field_name: str) -> bool:
        spec = self._spec_dict.get(component)
        return spec is not None and spec.is_channel(field_name)

    def __contains__(self, key: Union[str, Tuple[str, str]]) -> bool:
        """Check a component name or a (component, field) pair."""
        if isinstance(key, tuple):
            component, field_name = key
            spec = self._spec_dict.get(component)
            return spec is not None and field_name in spec.fields
        return key in self._spec_dict

    def __len__(self) -> int:
        return len(self.components)

    def to_dict(self) -> Dict[str, Any]:
        """Export schema as a JSON-serializable dictionary."""
        return {
            "components": [
                {
                    "name": spec.name,
                    "fields": list(spec.fields),
                    "composite": (
                        {
                            "attribute": spec.composite.attribute,
                            "channels": list(spec.composite.channels),
                            "lower": spec.composite.lower,
                            "upper": spec.composite.upper,
                        }
                        if spec.composite is not None else None
                    ),
                    "doc": spec.doc,
                }
                for spec in self.components
            ]
        }


DEFAULT_SCHEMA = ParameterSchema([
    ComponentSpec("SnowmobileController", (
        "leanSteerFactorSoft", "leanSteerFactorTrail", "throttleExponent", "drowningDepth", "drowningTime",
        "isEngineOn", "isStuck", "canRespawn", "hasDrowned", "rpmSensitivity", "rpmSensitivityDown",
        "minThrottleOnClutchEngagement", "clutchRpmMin", "clutchRpmMax", "isHeadlightOn",
        "wheelieThreshold", "driverTorgueFactorRoll", "driverTorgueFactorPitch",
        "snowmobileTorgueFactor", "isWheeling",
    ), doc="Driver input, engine and clutch behaviour"),
    ComponentSpec("SnowmobileControllerBase", (
        "skisMaxAngle", "driverZCenter", "enableVerticalWeightTransfer",
        "trailLeanDistance", "switchbackTransitionTime",
        "toeAngle", "hopOverPreJump", "switchBackLeanDistance",
    ), doc="Steering geometry and rider weight transfer"),
    ComponentSpec("MeshInterpretter", (
        "power", "powerEfficiency", "breakForce", "frictionForce", "trackMass", "coefficientOfFriction",
        "snowPushForceFactor", "snowPushForceNormalizedFactor", "snowSupportForceFactor",
        "maxSupportPressure", "lugHeight", "snowOutTrackWidth", "pitchFactor",
        "drivetrainMinSpeed", "drivetrainMaxSpeed1", "drivetrainMaxSpeed2",
    ), doc="Track and drivetrain physics"),
    ComponentSpec("SnowParameters", (
        "snowNormalConstantFactor", "snowNormalDepthFactor",
        "snowFrictionFactor", "snowNormalSpeedFactor",
    ), doc="Snow contact model"),
    ComponentSpec("SuspensionController", (
        "suspensionSubSteps", "antiRollBarFactor", "skiAutoTurn",
        "trackRigidityFront", "trackRigidityRear", "reduceSuspensionForceByTilt",
    )),
    ComponentSpec("Stabilizer", (
        "trackSpeedGyroMultiplier", "idleGyro", "trackSpeedDamping",
    )),
    ComponentSpec("RagDollCollisionController", (
        "ragdollThreshold", "ragdollThresholdDownFactor",
    ), doc="Rider ejection thresholds"),
    ComponentSpec("Rigidbody", (
        "mass", "drag", "angularDrag", "useGravity", "maxAngularVelocity",
    )),
    ComponentSpec("Light", ("r", "g", "b", "a"),
                  composite=CompositeSpec("color", ("r", "g", "b", "a")),
                  doc="Headlight colour"),
    ComponentSpec("Shock", (
        "compression", "mass", "maxCompression", "velocity",
    )),
])
