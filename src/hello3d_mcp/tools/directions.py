from __future__ import annotations

import re
from typing import Any, Optional

# Camera-centric compass: 0 is camera forward (north), 90 camera right (east).
DIRECTION_AZIMUTHS: dict[str, float] = {
    "north": 0,
    "east": 90,
    "south": 180,
    "west": 270,
    "northeast": 45,
    "northwest": 315,
    "southeast": 135,
    "southwest": 225,
    "n": 0,
    "e": 90,
    "s": 180,
    "w": 270,
    "ne": 45,
    "nw": 315,
    "se": 135,
    "sw": 225,
    "nne": 22.5,
    "ene": 67.5,
    "ese": 112.5,
    "sse": 157.5,
    "ssw": 202.5,
    "wsw": 247.5,
    "wnw": 292.5,
    "nnw": 337.5,
}

DIRECTION_NAMES = ", ".join(name for name in DIRECTION_AZIMUTHS if len(name) > 1)

_IGNORED = re.compile(r"[\s\-.]")


def normalize_direction_name(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value:
        return None
    return _IGNORED.sub("", value.lower().strip())


def parse_azimuth(value: Any) -> Optional[float]:
    """Numbers pass through; compass names map to degrees; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    name = normalize_direction_name(value)
    if name is None:
        return None
    return DIRECTION_AZIMUTHS.get(name)
