"""Global constants for sledtuner.

This module centralizes the names and limits shared by the binding engine,
the supervisor and the preset layer.
"""

# Reason recorded for anything the engine could not locate
NOT_FOUND: str = "not found"

# Key under which root-level failures are reported in an InitializationOutcome
ROOT_KEY: str = "(root)"

# Retry policy defaults for the initialization supervisor
MAX_AUTO_RETRIES: int = 3
BASE_RETRY_DELAY: float = 1.0

# Fallback identity when the vehicle name cannot be read
UNKNOWN_VEHICLE: str = "UnknownSled"

# Suffix the host appends to scriptable-object names
VEHICLE_NAME_SUFFIX: str = " (VehicleScriptableObject)"

# Default editor slider range when no metadata exists
DEFAULT_SLIDER_MIN: float = -100.0
DEFAULT_SLIDER_MAX: float = 100.0

# Scenes in which the supervisor initializes automatically
DEFAULT_VALID_SCENES: tuple = ("Woodland", "Side_Cliffs_03_27", "Idaho", "Rocky Mountains", "Valley")

# Scenes that never hold a drivable vehicle
DEFAULT_INVALID_SCENES: tuple = ("TitleScreen", "Garage")
