"""SledTuner: live parameter binding and presets for a running vehicle simulation.

This package locates a vehicle in a host object graph, binds its tunable
component fields, and keeps original/current snapshots that editors can
change, apply, revert and persist as presets.
"""

# Export the public API
from .api import *  # noqa: F403, F401
from .api import __all__, __version__  # noqa: F401
