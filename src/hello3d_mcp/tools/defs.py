from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from .colors import COLOR_NAMES
from .directions import DIRECTION_NAMES

if TYPE_CHECKING:
    from .base import ToolContext

Handler = Callable[["ToolContext", dict[str, Any]], Awaitable[str]]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    title: str
    description: str
    input_schema: dict[str, Any]
    handler: Handler


def object_schema(properties: dict[str, Any] | None = None, required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": properties or {},
        "additionalProperties": False,
    }
    if required:
        schema["required"] = required
    return schema


def number(description: str, **bounds: float) -> dict[str, Any]:
    return {"type": "number", "description": description, **bounds}


def positive(description: str) -> dict[str, Any]:
    return number(description, exclusiveMinimum=0)


COLOR = {
    "type": "string",
    "minLength": 1,
    "description": (
        'Hex color code (e.g., "#ff0000") or Apple crayon color name (e.g., "maraschino", '
        f'"turquoise", "lemon"). Available colors: {COLOR_NAMES}'
    ),
}

AZIMUTH = {
    "anyOf": [
        {"type": "number", "minimum": 0, "maximum": 360},
        {"type": "string", "minLength": 1},
    ],
    "description": (
        'Horizontal angle in degrees (0-360) or direction name (e.g., "north", "northwest", "NW"). '
        "0° = camera forward (North), 90° = camera right (East), 180° = behind camera (South), "
        f"270° = camera left (West). Available directions: {DIRECTION_NAMES}"
    ),
}

ELEVATION = number("Vertical angle in degrees (0-90), 0° = horizon, 90° = overhead", minimum=0, maximum=90)

FORCE_REFRESH = {
    "type": "boolean",
    "description": (
        "Query the browser even when a cached snapshot exists. Use after the user may have "
        "changed the scene by hand."
    ),
}

READ_SCHEMA = object_schema({"force_refresh": FORCE_REFRESH})
EMPTY_SCHEMA = object_schema()

READ_HINT = (
    "Query this before relative changes to ensure accuracy. "
    "For absolute changes, you may use recently queried state from context if no manual interactions occurred."
)
RELATIVE_HINT = (
    "This tool automatically queries fresh state before performing the change to ensure accuracy, "
    "even if the user has manually interacted with the scene."
)
