"""Shared fixtures: an in-memory snowmobile scene shaped like the live game."""

from types import SimpleNamespace

import numpy as np
import pytest

from sledtuner.host import Color, Component, Scene, SceneObject
from sledtuner.parameters import ComponentSpec, CompositeSpec, ParameterSchema


class Rigidbody(Component):
    """Uses the renamed damping properties (linearDamping/angularDamping)."""

    mass: float
    linearDamping: float
    angularDamping: float
    useGravity: bool
    maxAngularVelocity: float

    def __init__(self):
        self.mass = 250.0
        self.linearDamping = 0.05
        self.angularDamping = 0.5
        self.useGravity = True
        self.maxAngularVelocity = 7.0


class SnowmobileController(Component):
    leanSteerFactorSoft: float
    throttleExponent: np.float32
    isEngineOn: bool
    clutchRpmMin: int
    driverTorqueFactorRoll: float
    rider: Component

    def __init__(self, vehicle_name: str = "Rocket (VehicleScriptableObject)"):
        self.leanSteerFactorSoft = 1.5
        self.throttleExponent = np.float32(2.0)
        self.isEngineOn = False
        self.clutchRpmMin = 1500
        self.driverTorqueFactorRoll = 0.25
        self.rider = Component()
        self._vehicle = vehicle_name
        self._stuck = False

    @property
    def isStuck(self) -> bool:
        return self._stuck

    @property
    def GKMNAIKNNMJ(self) -> str:
        return self._vehicle


class Light(Component):
    color: Color
    intensity: float

    def __init__(self):
        self.color = Color(0.5, 0.5, 0.5, 1.0)
        self.intensity = 3.0


class RagDollCollisionController(Component):
    ragdollThreshold: float
    ragdollThresholdDownFactor: float

    def __init__(self):
        self.ragdollThreshold = 120.0
        self.ragdollThresholdDownFactor = 2.0


def build_sled(root_name: str = "Snowmobile(Clone)", tag: str = "Untagged") -> SimpleNamespace:
    """Snowmobile root with a Body carrying the tunable components. No Shock."""
    root = SceneObject(root_name, tag=tag)
    body = root.add_child(SceneObject("Body"))
    rigidbody = body.add_component(Rigidbody())
    controller = body.add_component(SnowmobileController())
    light = body.add_child(SceneObject("Spot Light")).add_component(Light())
    ragdoll = body.add_child(SceneObject("IK Player (Drivers)")).add_component(RagDollCollisionController())
    scene = Scene([SceneObject("Terrain"), root])
    return SimpleNamespace(
        scene=scene,
        root=root,
        body=body,
        rigidbody=rigidbody,
        controller=controller,
        light=light,
        ragdoll=ragdoll,
    )


@pytest.fixture
def sled():
    """Fresh in-memory sled scene."""
    return build_sled()


@pytest.fixture
def empty_scene():
    """Scene without any vehicle."""
    return Scene([SceneObject("Terrain"), SceneObject("Main Camera", tag="MainCamera")])


@pytest.fixture
def small_schema():
    """Schema covering the components present in the sled fixture plus Shock."""
    return ParameterSchema([
        ComponentSpec("Rigidbody", ("mass", "drag", "angularDrag", "useGravity")),
        ComponentSpec("SnowmobileController", (
            "leanSteerFactorSoft", "throttleExponent", "isEngineOn", "clutchRpmMin",
            "driverTorgueFactorRoll", "isStuck", "rider", "wheelieThreshold",
        )),
        ComponentSpec("Light", ("r", "g", "b", "a"), composite=CompositeSpec("color", ("r", "g", "b", "a"))),
        ComponentSpec("RagDollCollisionController", ("ragdollThreshold", "ragdollThresholdDownFactor")),
        ComponentSpec("Shock", ("compression", "mass")),
    ])
