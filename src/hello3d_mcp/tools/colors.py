from __future__ import annotations

import re
from typing import Any, Optional

# Apple crayon palette, 48 named colors.
APPLE_CRAYON_COLORS: dict[str, str] = {
    "licorice": "#000000",
    "lead": "#1e1e1e",
    "tungsten": "#3a3a3a",
    "iron": "#545453",
    "steel": "#6e6e6e",
    "tin": "#878687",
    "nickel": "#888787",
    "aluminum": "#a09fa0",
    "magnesium": "#b8b8b8",
    "silver": "#d0d0d0",
    "mercury": "#e8e8e8",
    "snow": "#ffffff",
    "cayenne": "#891100",
    "mocha": "#894800",
    "asparagus": "#888501",
    "fern": "#458401",
    "clover": "#028401",
    "moss": "#018448",
    "teal": "#008688",
    "ocean": "#004a88",
    "midnight": "#001888",
    "eggplant": "#491a88",
    "plum": "#891e88",
    "maroon": "#891648",
    "maraschino": "#ff2101",
    "tangerine": "#ff8802",
    "lemon": "#fffa03",
    "lime": "#83f902",
    "spring": "#05f802",
    "sea foam": "#03f987",
    "turquoise": "#00fdff",
    "aqua": "#008cff",
    "blueberry": "#002eff",
    "grape": "#8931ff",
    "magenta": "#ff39ff",
    "strawberry": "#ff2987",
    "salmon": "#ff726e",
    "cantaloupe": "#ffce6e",
    "banana": "#fffb6d",
    "honeydew": "#cefa6e",
    "flora": "#68f96e",
    "spindrift": "#68fbd0",
    "ice": "#68fdff",
    "sky": "#6acfff",
    "orchid": "#6e76ff",
    "lavender": "#d278ff",
    "bubblegum": "#ff7aff",
    "carnation": "#ff7fd3",
}

_ALIASES = {"seafoam": "sea foam", "sea-foam": "sea foam"}
_HEX_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

COLOR_NAMES = ", ".join(APPLE_CRAYON_COLORS)


def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(_HEX_RE.match(value))


def normalize_color_to_hex(value: Any) -> Optional[str]:
    """Return lowercase ``#rrggbb`` for a hex code or crayon name, else None."""
    if not isinstance(value, str) or not value:
        return None
    if is_hex_color(value):
        return value.lower()
    name = value.lower().strip()
    name = _ALIASES.get(name, name)
    return APPLE_CRAYON_COLORS.get(name)


def display_color(value: str, hex_color: str) -> str:
    return hex_color if is_hex_color(value) else f"{value} ({hex_color})"
