"""Level normalizer.

Maps free-text proficiency labels onto the 0-5 ordinal scale used by every
scoring component. Total and pure: any string maps to an integer in [0, 5],
unknown labels map to 0.
"""

from __future__ import annotations

from typing import Optional, Union

MIN_LEVEL = 0
MAX_LEVEL = 5

LEVEL_TABLE: dict[str, int] = {
    "basic": 1,
    "foundation": 1,
    "beginner": 1,
    "intermediate": 2,
    "proficient": 3,
    "advanced": 4,
    "expert": 5,
    "leadership": 5,
    "master": 5,
}

# Applied when the source data omits a required level (skills never carry one).
DEFAULT_REQUIRED_LEVEL_LABEL = "Intermediate"


def normalize_level(label: Optional[str]) -> int:
    """Return the ordinal for *label*; 0 for unknown, empty or None."""
    if not label:
        return MIN_LEVEL
    return LEVEL_TABLE.get(label.strip().lower(), MIN_LEVEL)


def coerce_level(value: Union[str, int, float, None]) -> int:
    """Normalize a label or clamp an already-numeric level into [0, 5]."""
    if value is None:
        return MIN_LEVEL
    if isinstance(value, bool):
        return MIN_LEVEL
    if isinstance(value, (int, float)):
        return max(MIN_LEVEL, min(MAX_LEVEL, int(value)))
    return normalize_level(str(value))


def required_level_or_default(value: Union[str, int, float, None]) -> int:
    """Required level for a requirement, falling back to Intermediate when omitted."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return normalize_level(DEFAULT_REQUIRED_LEVEL_LABEL)
    return coerce_level(value)
