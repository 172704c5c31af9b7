from __future__ import annotations

from typing import Any

from ..bridge.state_cache import utcnow
from ..commands import Command, CommandType
from ..shared.errors import ToolExecutionError
from .base import ToolContext, read_value, section, send_command, value_or
from .colors import display_color, normalize_color_to_hex
from .defs import COLOR, EMPTY_SCHEMA, READ_HINT, READ_SCHEMA, ToolDefinition, object_schema


async def change_background_color(context: ToolContext, arguments: dict[str, Any]) -> str:
    color = arguments["color"]
    hex_color = normalize_color_to_hex(color)
    if not hex_color:
        raise ToolExecutionError(
            f'Invalid color: {color}. Please use a hex code (e.g., "#000000") or an Apple crayon color name.'
        )
    send_command(context, Command.of(CommandType.CHANGE_BACKGROUND_COLOR, color=hex_color))
    return f"Background color changed to {display_color(color, hex_color)}"


async def get_background_color(context: ToolContext, arguments: dict[str, Any]) -> str:
    return await read_value(
        context,
        arguments,
        "background color",
        "Background color",
        lambda state: value_or(section(state), "background", "#000000"),
    )


async def get_browser_connection_url(context: ToolContext, arguments: dict[str, Any]) -> str:
    session_id = context.session_id()
    if not session_id:
        raise ToolExecutionError(
            "Error: No active session found. Please ensure the MCP connection is properly initialized."
        )
    url = f"{context.browser_url}?sessionId={session_id}"
    return (
        "To connect your browser to the 3D visualization app, open this URL:\n\n"
        f"{url}\n\n"
        "Copy and paste this URL into your web browser to begin interacting with the 3D scene."
    )


async def get_connection_status(context: ToolContext, arguments: dict[str, Any]) -> str:
    session_id = context.require_session()
    hub = context.hub
    session = hub.sessions.get_session(session_id)
    connected = hub.registry.lookup(session_id) is not None
    lines = [
        f"Session: {session_id}",
        f"Mode: {context.mode}",
        f"Status: {session.status.value if session else 'unregistered'}",
        f"Browser connected: {'yes' if connected else 'no'}",
    ]
    snapshot = hub.cache.get(session_id)
    if snapshot is None:
        lines.append("Cached state: none")
    else:
        age = (utcnow() - snapshot.captured_at).total_seconds()
        lines.append(
            f"Cached state: {snapshot.provenance.value}, captured at {snapshot.captured_at.isoformat()} "
            f"({age:.1f}s ago)"
        )
    if not connected:
        lines.append("Use get_browser_connection_url to connect a browser.")
    return "\n".join(lines)


TOOLS: list[ToolDefinition] = [
    ToolDefinition(
        name="change_background_color",
        title="Change Background Color",
        description="Change the background color of the 3D scene",
        input_schema=object_schema({"color": COLOR}, ["color"]),
        handler=change_background_color,
    ),
    ToolDefinition(
        name="get_background_color",
        title="Get Background Color",
        description=f'Get the current scene background color as a hex color code (e.g., "#000000"). {READ_HINT}',
        input_schema=READ_SCHEMA,
        handler=get_background_color,
    ),
    ToolDefinition(
        name="get_browser_connection_url",
        title="Get Browser Connection URL",
        description=(
            "Get the URL to open in your browser to connect the 3D visualization app. "
            "Use this when users ask how to connect or how to open the 3D app."
        ),
        input_schema=EMPTY_SCHEMA,
        handler=get_browser_connection_url,
    ),
    ToolDefinition(
        name="get_connection_status",
        title="Get Connection Status",
        description=(
            "Report whether a browser is connected to this session and how old the cached scene state is."
        ),
        input_schema=EMPTY_SCHEMA,
        handler=get_connection_status,
    ),
]
