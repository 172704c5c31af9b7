"""Key and fill light tools.

Both lights expose the same controls, so the tool set is built once per
light from a small description of its name, state key and command prefix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..commands import Command, CommandType
from ..shared.errors import ToolExecutionError
from .base import ToolContext, current_state, fmt, read_value, section, send_command, value_or
from .colors import display_color, normalize_color_to_hex
from .defs import (
    AZIMUTH,
    COLOR,
    ELEVATION,
    EMPTY_SCHEMA,
    READ_HINT,
    READ_SCHEMA,
    RELATIVE_HINT,
    ToolDefinition,
    number,
    object_schema,
    positive,
)
from .directions import DIRECTION_NAMES, parse_azimuth


@dataclass(frozen=True)
class Light:
    slug: str  # "key" / "fill"
    label: str  # "Key light"
    state_key: str  # "keyLight"
    purpose: str

    @property
    def title(self) -> str:
        return self.label.title()

    def command(self, template: str) -> CommandType:
        return CommandType(template.format(self.slug.capitalize()))

    def position(self, state: Any) -> dict[str, Any]:
        return section(state, self.state_key, "position") or {"azimuth": 0, "elevation": 0, "distance": 0}


KEY_LIGHT = Light("key", "Key light", "keyLight", "main light source")
FILL_LIGHT = Light("fill", "Fill light", "fillLight", "shadow-filling light")


def _fixed(light: Light, template: str, text: str):
    async def handler(context: ToolContext, arguments: dict[str, Any]) -> str:
        send_command(context, Command.of(light.command(template)))
        return text

    return handler


def _relative(light: Light, template: str, field: str, default: int, describe):
    async def handler(context: ToolContext, arguments: dict[str, Any]) -> str:
        degrees = arguments.get("degrees")
        state = await current_state(context)
        send_command(context, Command.of(light.command(template), degrees=degrees))
        info = ""
        if state is not None:
            info = f" (from current {field}: {fmt(value_or(light.position(state), field, 0))}°)"
        return f"{describe(fmt(degrees or default))}{info}"

    return handler


def light_tools(light: Light) -> list[ToolDefinition]:
    prefix = light.slug
    label = light.label

    async def set_intensity(context: ToolContext, arguments: dict[str, Any]) -> str:
        intensity = arguments["intensity"]
        send_command(context, Command.of(light.command("set{}LightIntensity"), intensity=intensity))
        return f"{label} intensity set to {fmt(intensity)}"

    async def set_color(context: ToolContext, arguments: dict[str, Any]) -> str:
        color = arguments["color"]
        hex_color = normalize_color_to_hex(color)
        if not hex_color:
            raise ToolExecutionError(
                f'Invalid color: {color}. Please use a hex code (e.g., "#ffffff") or an Apple crayon color name.'
            )
        send_command(context, Command.of(light.command("set{}LightColor"), color=hex_color))
        return f"{label} color changed to {display_color(color, hex_color)}"

    async def set_position(context: ToolContext, arguments: dict[str, Any]) -> str:
        azimuth = arguments["azimuth"]
        elevation = arguments["elevation"]
        value = parse_azimuth(azimuth)
        if value is None:
            raise ToolExecutionError(f"Invalid azimuth: {azimuth}. Must be a number (0-360) or a direction name.")
        send_command(
            context,
            Command.of(light.command("set{}LightPositionSpherical"), azimuth=value, elevation=elevation),
        )
        shown = f"{azimuth} ({fmt(value)}°)" if isinstance(azimuth, str) else f"{fmt(value)}°"
        return f"{label} positioned at azimuth {shown}, elevation {fmt(elevation)}° (distance preserved)"

    async def set_distance(context: ToolContext, arguments: dict[str, Any]) -> str:
        distance = arguments["distance"]
        send_command(context, Command.of(light.command("set{}LightDistance"), distance=distance))
        return f"{label} distance set to {fmt(distance)} units"

    async def move_toward(context: ToolContext, arguments: dict[str, Any]) -> str:
        direction = arguments["direction"]
        degrees = arguments.get("degrees")
        target = parse_azimuth(direction)
        if target is None:
            raise ToolExecutionError(f"Invalid direction: {direction}. Must be a number (0-360) or a direction name.")
        state = await current_state(context)
        send_command(
            context,
            Command.of(light.command("move{}LightTowardDirection"), direction=target, degrees=degrees),
        )
        shown = direction if isinstance(direction, str) else f"{fmt(direction)}°"
        info = ""
        if state is not None:
            info = f" (from current azimuth: {fmt(value_or(light.position(state), 'azimuth', 0))}°)"
        return f"{label} moved {fmt(degrees or 10)}° toward {shown}{info}"

    async def get_position(context: ToolContext, arguments: dict[str, Any]) -> str:
        def render(state: Any) -> str:
            position = light.position(state)
            return (
                f"azimuth {fmt(value_or(position, 'azimuth', 0))}°, "
                f"elevation {fmt(value_or(position, 'elevation', 0))}°, "
                f"distance {fmt(value_or(position, 'distance', 0))}"
            )

        return await read_value(context, arguments, f"{prefix} light position", f"{label} position", render)

    async def get_intensity(context: ToolContext, arguments: dict[str, Any]) -> str:
        return await read_value(
            context,
            arguments,
            f"{prefix} light intensity",
            f"{label} intensity",
            lambda state: fmt(value_or(section(state, light.state_key), "intensity", 0)),
        )

    async def get_color(context: ToolContext, arguments: dict[str, Any]) -> str:
        return await read_value(
            context,
            arguments,
            f"{prefix} light color",
            f"{label} color",
            lambda state: value_or(section(state, light.state_key), "color", "#ffffff"),
        )

    async def get_size(context: ToolContext, arguments: dict[str, Any]) -> str:
        def render(state: Any) -> str:
            size = section(state, light.state_key, "size") or {"width": 1, "height": 1}
            return f"width {fmt(value_or(size, 'width', 1))}, height {fmt(value_or(size, 'height', 1))}"

        return await read_value(context, arguments, f"{prefix} light size", f"{label} size", render)

    def degrees_schema(description: str) -> dict[str, Any]:
        return object_schema({"degrees": positive(description)})

    spherical = (
        "Azimuth: 0° = camera forward (North), 90° = camera right (East), 180° = behind camera (South), "
        "270° = camera left (West). Elevation: 0° = horizon, 90° = overhead. Azimuth can be a number (0-360) "
        f"or a direction name. Available direction names: {DIRECTION_NAMES}."
    )

    tools = [
        ToolDefinition(
            name=f"set_{prefix}_light_intensity",
            title=f"Set {light.title} Intensity",
            description=f"Set the intensity of the {prefix} light ({light.purpose})",
            input_schema=object_schema(
                {"intensity": number("Light intensity value (0.0 or higher)", minimum=0)}, ["intensity"]
            ),
            handler=set_intensity,
        ),
        ToolDefinition(
            name=f"set_{prefix}_light_color",
            title=f"Set {light.title} Color",
            description=f"Set the color of the {prefix} light",
            input_schema=object_schema({"color": COLOR}, ["color"]),
            handler=set_color,
        ),
    ]

    for way in ("up", "down", "left", "right"):
        tools.append(
            ToolDefinition(
                name=f"swing_{prefix}_light_{way}",
                title=f"Swing {light.title} {way.title()}",
                description=f"Rotate the {prefix} light {way}ward in an arc around the center of the model",
                input_schema=EMPTY_SCHEMA,
                handler=_fixed(light, f"swing{{}}Light{way.title()}", f"{label} swung {way}"),
            )
        )

    for way, nearer in (("in", "closer to"), ("out", "farther from")):
        tools.append(
            ToolDefinition(
                name=f"walk_{prefix}_light_{way}",
                title=f"Walk {light.title} {way.title()}",
                description=(
                    f"Move the {prefix} light {nearer} the center of the model along the axis from the model origin"
                ),
                input_schema=EMPTY_SCHEMA,
                handler=_fixed(light, f"walk{{}}Light{way.title()}", f"{label} walked {way}"),
            )
        )

    tools += [
        ToolDefinition(
            name=f"set_{prefix}_light_position_spherical",
            title=f"Set {light.title} Position (Spherical Coordinates)",
            description=(
                f"Set the {prefix} light position using camera-centric spherical coordinates. Preserves current "
                f"distance - only changes azimuth and elevation. {spherical}"
            ),
            input_schema=object_schema({"azimuth": AZIMUTH, "elevation": ELEVATION}, ["azimuth", "elevation"]),
            handler=set_position,
        ),
        ToolDefinition(
            name=f"set_{prefix}_light_distance",
            title=f"Set {light.title} Distance",
            description=(
                f"Set the distance of the {prefix} light from the model origin. "
                "Preserves current azimuth and elevation angles."
            ),
            input_schema=object_schema(
                {"distance": positive("Distance from model origin (positive number, units)")}, ["distance"]
            ),
            handler=set_distance,
        ),
        ToolDefinition(
            name=f"rotate_{prefix}_light_clockwise",
            title=f"Rotate {light.title} Clockwise",
            description=f"Rotate the {prefix} light clockwise (decreases azimuth) relative to current position. {RELATIVE_HINT}",
            input_schema=degrees_schema("Amount to rotate in degrees (defaults to 10°)"),
            handler=_relative(
                light, "rotate{}LightClockwise", "azimuth", 10, lambda d: f"{label} rotated {d}° clockwise"
            ),
        ),
        ToolDefinition(
            name=f"rotate_{prefix}_light_counterclockwise",
            title=f"Rotate {light.title} Counterclockwise",
            description=(
                f"Rotate the {prefix} light counterclockwise (increases azimuth) relative to current position. "
                f"{RELATIVE_HINT}"
            ),
            input_schema=degrees_schema("Amount to rotate in degrees (defaults to 10°)"),
            handler=_relative(
                light,
                "rotate{}LightCounterclockwise",
                "azimuth",
                10,
                lambda d: f"{label} rotated {d}° counterclockwise",
            ),
        ),
        ToolDefinition(
            name=f"nudge_{prefix}_light_elevation_up",
            title=f"Nudge {light.title} Elevation Up",
            description=f"Adjust the {prefix} light elevation upward relative to current position. {RELATIVE_HINT}",
            input_schema=degrees_schema("Amount to increase elevation in degrees (defaults to 5°)"),
            handler=_relative(
                light,
                "nudge{}LightElevationUp",
                "elevation",
                5,
                lambda d: f"{label} elevation increased by {d}°",
            ),
        ),
        ToolDefinition(
            name=f"nudge_{prefix}_light_elevation_down",
            title=f"Nudge {light.title} Elevation Down",
            description=f"Adjust the {prefix} light elevation downward relative to current position. {RELATIVE_HINT}",
            input_schema=degrees_schema("Amount to decrease elevation in degrees (defaults to 5°)"),
            handler=_relative(
                light,
                "nudge{}LightElevationDown",
                "elevation",
                5,
                lambda d: f"{label} elevation decreased by {d}°",
            ),
        ),
        ToolDefinition(
            name=f"move_{prefix}_light_toward_direction",
            title=f"Move {light.title} Toward Direction",
            description=(
                f"Move the {prefix} light toward a specific direction relative to current position. {RELATIVE_HINT} "
                f"Available directions: {DIRECTION_NAMES}."
            ),
            input_schema=object_schema(
                {
                    "direction": AZIMUTH,
                    "degrees": positive("Amount to move toward target direction in degrees (defaults to 10°)"),
                },
                ["direction"],
            ),
            handler=move_toward,
        ),
        ToolDefinition(
            name=f"get_{prefix}_light_position_spherical",
            title=f"Get {light.title} Position (Spherical Coordinates)",
            description=f"Get the current {prefix} light position in camera-centric spherical coordinates. {READ_HINT}",
            input_schema=READ_SCHEMA,
            handler=get_position,
        ),
        ToolDefinition(
            name=f"get_{prefix}_light_intensity",
            title=f"Get {light.title} Intensity",
            description=f"Get the current {prefix} light intensity value (0.0 or higher). {READ_HINT}",
            input_schema=READ_SCHEMA,
            handler=get_intensity,
        ),
        ToolDefinition(
            name=f"get_{prefix}_light_color",
            title=f"Get {light.title} Color",
            description=f'Get the current {prefix} light color as a hex color code (e.g., "#ffffff"). {READ_HINT}',
            input_schema=READ_SCHEMA,
            handler=get_color,
        ),
        ToolDefinition(
            name=f"get_{prefix}_light_size",
            title=f"Get {light.title} Size",
            description=f"Get the current {prefix} light area size (width and height in units). {READ_HINT}",
            input_schema=READ_SCHEMA,
            handler=get_size,
        ),
    ]
    return tools


TOOLS: list[ToolDefinition] = light_tools(KEY_LIGHT) + light_tools(FILL_LIGHT)
