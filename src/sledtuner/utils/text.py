"""Text helpers for preset file names."""

import re

from ..constants import UNKNOWN_VEHICLE

# Characters rejected in file names on at least one supported platform
_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def make_safe_filename(value: str, default: str = UNKNOWN_VEHICLE) -> str:
    """Replace characters that are invalid in file names with underscores.

    Args:
        value: Raw name (vehicle or preset name)
        default: Returned when nothing usable remains

    Returns:
        Name safe to embed in a file name
    """
    if not value:
        return default
    safe = _INVALID_FILENAME_CHARS.sub("_", value).strip()
    return safe or default
