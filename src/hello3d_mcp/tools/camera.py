from __future__ import annotations

from typing import Any

from ..commands import Command, CommandType
from .base import ToolContext, fmt, read_value, section, send_command, value_or
from .defs import READ_HINT, READ_SCHEMA, ToolDefinition, object_schema, positive


async def dolly_camera(context: ToolContext, arguments: dict[str, Any]) -> str:
    distance = arguments["distance"]
    send_command(context, Command.of(CommandType.DOLLY_CAMERA, distance=distance))
    return f"Camera distance set to {fmt(distance)}"


async def dolly_camera_in(context: ToolContext, arguments: dict[str, Any]) -> str:
    amount = arguments.get("amount")
    send_command(context, Command.of(CommandType.DOLLY_CAMERA_IN, amount=amount))
    return f"Camera moved {fmt(amount)} units closer" if amount else "Camera moved closer"


async def dolly_camera_out(context: ToolContext, arguments: dict[str, Any]) -> str:
    amount = arguments.get("amount")
    send_command(context, Command.of(CommandType.DOLLY_CAMERA_OUT, amount=amount))
    return f"Camera moved {fmt(amount)} units farther" if amount else "Camera moved farther"


async def set_camera_fov(context: ToolContext, arguments: dict[str, Any]) -> str:
    fov = arguments["fov"]
    send_command(context, Command.of(CommandType.SET_CAMERA_FOV, fov=fov))
    return f"Camera field of view set to {fmt(fov)}"


async def increase_camera_fov(context: ToolContext, arguments: dict[str, Any]) -> str:
    amount = arguments.get("amount")
    send_command(context, Command.of(CommandType.INCREASE_CAMERA_FOV, amount=amount))
    return f"Camera FOV increased by {fmt(amount)}" if amount else "Camera FOV increased (wider angle)"


async def decrease_camera_fov(context: ToolContext, arguments: dict[str, Any]) -> str:
    amount = arguments.get("amount")
    send_command(context, Command.of(CommandType.DECREASE_CAMERA_FOV, amount=amount))
    return f"Camera FOV decreased by {fmt(amount)}" if amount else "Camera FOV decreased (more zoomed in)"


async def get_camera_distance(context: ToolContext, arguments: dict[str, Any]) -> str:
    return await read_value(
        context,
        arguments,
        "camera distance",
        "Camera distance",
        lambda state: fmt(value_or(section(state, "camera"), "distance", 0)),
    )


async def get_camera_fov(context: ToolContext, arguments: dict[str, Any]) -> str:
    return await read_value(
        context,
        arguments,
        "camera FOV",
        "Camera FOV",
        lambda state: fmt(value_or(section(state, "camera"), "fov", 0)),
    )


def _amount(description: str) -> dict[str, Any]:
    return object_schema({"amount": positive(description)})


TOOLS: list[ToolDefinition] = [
    ToolDefinition(
        name="dolly_camera",
        title="Dolly Camera",
        description=(
            "Set the camera distance from the origin (dollying). Moves the camera closer or farther from the subject."
        ),
        input_schema=object_schema({"distance": positive("Distance from origin (camera position.z)")}, ["distance"]),
        handler=dolly_camera,
    ),
    ToolDefinition(
        name="dolly_camera_in",
        title="Dolly Camera In",
        description="Move the camera closer to the subject (dolly in)",
        input_schema=_amount("Optional amount to move closer (defaults to configured dolly speed)"),
        handler=dolly_camera_in,
    ),
    ToolDefinition(
        name="dolly_camera_out",
        title="Dolly Camera Out",
        description="Move the camera farther from the subject (dolly out)",
        input_schema=_amount("Optional amount to move farther (defaults to configured dolly speed)"),
        handler=dolly_camera_out,
    ),
    ToolDefinition(
        name="set_camera_fov",
        title="Set Camera Field of View",
        description=(
            "Set the camera field of view (FOV). Lower values = wider angle (more of scene visible), "
            "higher values = narrower angle (more zoomed in)."
        ),
        input_schema=object_schema(
            {"fov": positive("Field of view value (typically 0.5-5.0, where lower = wider angle)")}, ["fov"]
        ),
        handler=set_camera_fov,
    ),
    ToolDefinition(
        name="increase_camera_fov",
        title="Increase Camera Field of View",
        description="Increase the camera field of view (wider angle, see more of the scene)",
        input_schema=_amount("Optional amount to increase (defaults to configured FOV speed)"),
        handler=increase_camera_fov,
    ),
    ToolDefinition(
        name="decrease_camera_fov",
        title="Decrease Camera Field of View",
        description="Decrease the camera field of view (narrower angle, more zoomed in)",
        input_schema=_amount("Optional amount to decrease (defaults to configured FOV speed)"),
        handler=decrease_camera_fov,
    ),
    ToolDefinition(
        name="get_camera_distance",
        title="Get Camera Distance",
        description=f"Get the current camera distance from origin (dolly position). {READ_HINT}",
        input_schema=READ_SCHEMA,
        handler=get_camera_distance,
    ),
    ToolDefinition(
        name="get_camera_fov",
        title="Get Camera Field of View",
        description=f"Get the current camera field of view (FOV) value. {READ_HINT}",
        input_schema=READ_SCHEMA,
        handler=get_camera_fov,
    ),
]
