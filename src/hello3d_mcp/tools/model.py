from __future__ import annotations

from typing import Any

from ..commands import Command, CommandType
from ..shared.errors import ToolExecutionError
from .base import ToolContext, current_state, fmt, read_value, section, send_command, value_or
from .colors import display_color, normalize_color_to_hex
from .defs import COLOR, READ_HINT, READ_SCHEMA, RELATIVE_HINT, ToolDefinition, number, object_schema, positive

_ZERO = {"x": 0, "y": 0, "z": 0}


def _rotation(state: Any) -> dict[str, Any]:
    return section(state, "model", "rotation") or _ZERO


async def change_model_color(context: ToolContext, arguments: dict[str, Any]) -> str:
    color = arguments["color"]
    hex_color = normalize_color_to_hex(color)
    if not hex_color:
        raise ToolExecutionError(
            f'Invalid color: {color}. Please use a hex code (e.g., "#ff0000") or an Apple crayon color name.'
        )
    send_command(context, Command.of(CommandType.CHANGE_COLOR, color=hex_color))
    return f"Model color changed to {display_color(color, hex_color)}"


async def change_model_size(context: ToolContext, arguments: dict[str, Any]) -> str:
    size = arguments["size"]
    send_command(context, Command.of(CommandType.CHANGE_SIZE, size=size))
    return f"Model size changed to {fmt(size)}"


async def scale_model(context: ToolContext, arguments: dict[str, Any]) -> str:
    x, y, z = arguments["x"], arguments["y"], arguments["z"]
    send_command(context, Command.of(CommandType.SCALE_MODEL, x=x, y=y, z=z))
    return f"Model scaled to ({fmt(x)}, {fmt(y)}, {fmt(z)})"


async def set_model_rotation(context: ToolContext, arguments: dict[str, Any]) -> str:
    x, y, z = arguments["x"], arguments["y"], arguments["z"]
    send_command(context, Command.of(CommandType.SET_MODEL_ROTATION, x=x, y=y, z=z))
    return f"Model rotation set to X: {fmt(x)}°, Y: {fmt(y)}°, Z: {fmt(z)}°"


def _yaw_tool(direction: str, command_type: CommandType):
    async def handler(context: ToolContext, arguments: dict[str, Any]) -> str:
        degrees = arguments.get("degrees")
        state = await current_state(context)
        send_command(context, Command.of(command_type, degrees=degrees))
        info = f" (from current rotation: Y={fmt(value_or(_rotation(state), 'y', 0))}°)" if state is not None else ""
        return f"Model rotated {fmt(degrees or 10)}° {direction}{info}"

    return handler


def _pitch_tool(verb: str, command_type: CommandType):
    async def handler(context: ToolContext, arguments: dict[str, Any]) -> str:
        degrees = arguments.get("degrees")
        state = await current_state(context)
        send_command(context, Command.of(command_type, degrees=degrees))
        info = f" (from current pitch: X={fmt(value_or(_rotation(state), 'x', 0))}°)" if state is not None else ""
        return f"Model pitch {verb} by {fmt(degrees or 5)}°{info}"

    return handler


async def nudge_model_roll(context: ToolContext, arguments: dict[str, Any]) -> str:
    degrees = arguments.get("degrees")
    state = await current_state(context)
    # The client has no default for roll, so one is always sent.
    send_command(context, Command.of(CommandType.NUDGE_MODEL_ROLL, degrees=5 if degrees is None else degrees))
    info = f" (from current roll: Z={fmt(value_or(_rotation(state), 'z', 0))}°)" if state is not None else ""
    if degrees:
        return f"Model roll adjusted by {fmt(degrees)}°{info}"
    return f"Model roll adjusted by 5° clockwise{info}"


async def get_model_color(context: ToolContext, arguments: dict[str, Any]) -> str:
    return await read_value(
        context,
        arguments,
        "model color",
        "Model color",
        lambda state: value_or(section(state, "model"), "color", "#808080"),
    )


async def get_model_rotation(context: ToolContext, arguments: dict[str, Any]) -> str:
    def render(state: Any) -> str:
        rotation = _rotation(state)
        return (
            f"X (pitch): {fmt(value_or(rotation, 'x', 0))}°, "
            f"Y (yaw): {fmt(value_or(rotation, 'y', 0))}°, "
            f"Z (roll): {fmt(value_or(rotation, 'z', 0))}°"
        )

    return await read_value(context, arguments, "model rotation", "Model rotation", render)


async def get_model_scale(context: ToolContext, arguments: dict[str, Any]) -> str:
    def render(state: Any) -> str:
        scale = section(state, "model", "scale") or {"x": 1, "y": 1, "z": 1}
        return f"X: {fmt(value_or(scale, 'x', 1))}, Y: {fmt(value_or(scale, 'y', 1))}, Z: {fmt(value_or(scale, 'z', 1))}"

    return await read_value(context, arguments, "model scale", "Model scale", render)


def _degrees(description: str, signed: bool = False) -> dict[str, Any]:
    return number(description) if signed else positive(description)


_XYZ_SCALE = object_schema(
    {
        "x": positive("Scale factor for X axis"),
        "y": positive("Scale factor for Y axis"),
        "z": positive("Scale factor for Z axis"),
    },
    ["x", "y", "z"],
)

_XYZ_ROTATION = object_schema(
    {
        "x": number("Rotation around X axis in degrees (pitch)"),
        "y": number("Rotation around Y axis in degrees (yaw)"),
        "z": number("Rotation around Z axis in degrees (roll)"),
    },
    ["x", "y", "z"],
)

TOOLS: list[ToolDefinition] = [
    ToolDefinition(
        name="change_model_color",
        title="Change Model Color",
        description="Change the color of the 3D model in the scene",
        input_schema=object_schema({"color": COLOR}, ["color"]),
        handler=change_model_color,
    ),
    ToolDefinition(
        name="change_model_size",
        title="Change Model Size",
        description="Change the uniform size of the 3D model",
        input_schema=object_schema({"size": positive("New size value (uniform scaling)")}, ["size"]),
        handler=change_model_size,
    ),
    ToolDefinition(
        name="scale_model",
        title="Scale Model",
        description="Scale the 3D model independently in each dimension (x, y, z)",
        input_schema=_XYZ_SCALE,
        handler=scale_model,
    ),
    ToolDefinition(
        name="set_model_rotation",
        title="Set Model Rotation",
        description=(
            "Set the model rotation using Euler angles in degrees (XYZ order). X = pitch (rotation around X axis), "
            "Y = yaw (rotation around Y axis), Z = roll (rotation around Z axis)."
        ),
        input_schema=_XYZ_ROTATION,
        handler=set_model_rotation,
    ),
    ToolDefinition(
        name="rotate_model_clockwise",
        title="Rotate Model Clockwise",
        description=f"Rotate the model clockwise around Y axis (yaw) relative to current rotation. {RELATIVE_HINT}",
        input_schema=object_schema({"degrees": _degrees("Amount to rotate in degrees (defaults to 10°)")}),
        handler=_yaw_tool("clockwise", CommandType.ROTATE_MODEL_CLOCKWISE),
    ),
    ToolDefinition(
        name="rotate_model_counterclockwise",
        title="Rotate Model Counterclockwise",
        description=f"Rotate the model counterclockwise around Y axis (yaw) relative to current rotation. {RELATIVE_HINT}",
        input_schema=object_schema({"degrees": _degrees("Amount to rotate in degrees (defaults to 10°)")}),
        handler=_yaw_tool("counterclockwise", CommandType.ROTATE_MODEL_COUNTERCLOCKWISE),
    ),
    ToolDefinition(
        name="nudge_model_pitch_up",
        title="Nudge Model Pitch Up",
        description=f"Adjust the model pitch (X axis rotation) upward relative to current rotation. {RELATIVE_HINT}",
        input_schema=object_schema({"degrees": _degrees("Amount to increase pitch in degrees (defaults to 5°)")}),
        handler=_pitch_tool("increased", CommandType.NUDGE_MODEL_PITCH_UP),
    ),
    ToolDefinition(
        name="nudge_model_pitch_down",
        title="Nudge Model Pitch Down",
        description=f"Adjust the model pitch (X axis rotation) downward relative to current rotation. {RELATIVE_HINT}",
        input_schema=object_schema({"degrees": _degrees("Amount to decrease pitch in degrees (defaults to 5°)")}),
        handler=_pitch_tool("decreased", CommandType.NUDGE_MODEL_PITCH_DOWN),
    ),
    ToolDefinition(
        name="nudge_model_roll",
        title="Nudge Model Roll",
        description=(
            "Adjust the model roll (Z axis rotation) relative to current rotation. Positive values rotate clockwise. "
            f"{RELATIVE_HINT}"
        ),
        input_schema=object_schema(
            {"degrees": _degrees("Amount to adjust roll in degrees (defaults to 5°, positive = clockwise)", signed=True)}
        ),
        handler=nudge_model_roll,
    ),
    ToolDefinition(
        name="get_model_color",
        title="Get Model Color",
        description=f'Get the current model color as a hex color code (e.g., "#ff0000"). {READ_HINT}',
        input_schema=READ_SCHEMA,
        handler=get_model_color,
    ),
    ToolDefinition(
        name="get_model_rotation",
        title="Get Model Rotation",
        description=(
            "Get the current model rotation as Euler angles in degrees (XYZ order). "
            f"Returns pitch (x), yaw (y), and roll (z) angles. {READ_HINT}"
        ),
        input_schema=READ_SCHEMA,
        handler=get_model_rotation,
    ),
    ToolDefinition(
        name="get_model_scale",
        title="Get Model Scale",
        description=f"Get the current model scale in each dimension (x, y, z) as scale factors. {READ_HINT}",
        input_schema=READ_SCHEMA,
        handler=get_model_scale,
    ),
]
