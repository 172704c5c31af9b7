"""Shared plumbing for tool handlers.

Handlers never see a session id in their arguments; they ask the context,
which asks the hub's resolver for whatever session the current call is
bound to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..bridge.hub import BrowserHub
from ..bridge.reconcile import StateReading, format_reading
from ..commands import Command
from ..shared.errors import Hello3DError, NoSession, ToolExecutionError

logger = logging.getLogger(__name__)

NO_SESSION_MESSAGE = "Error: No active session found."
NOT_DELIVERED_MESSAGE = (
    "No browser is connected to this session, so the command was not delivered. "
    "Call get_browser_connection_url and open the URL in a browser first."
)


@dataclass
class ToolContext:
    hub: BrowserHub
    browser_url: str
    mode: str = "stdio"

    def session_id(self) -> Optional[str]:
        return self.hub.resolver.current_session()

    def require_session(self) -> str:
        session_id = self.session_id()
        if not session_id:
            raise NoSession(NO_SESSION_MESSAGE)
        return session_id


def fmt(value: Any) -> str:
    """Render a JSON number the way the browser wrote it (``2`` not ``2.0``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def section(state: Optional[Mapping[str, Any]], *path: str) -> dict[str, Any]:
    node: Any = state or {}
    for key in path:
        node = node.get(key) if isinstance(node, Mapping) else None
    return node if isinstance(node, dict) else {}


def value_or(node: Mapping[str, Any], key: str, default: Any) -> Any:
    value = node.get(key)
    return default if value is None else value


def send_command(context: ToolContext, command: Command) -> None:
    if not context.hub.router.route_to_current(command):
        raise ToolExecutionError(NOT_DELIVERED_MESSAGE)


async def read_state(context: ToolContext, arguments: Mapping[str, Any], what: str) -> StateReading:
    session_id = context.require_session()
    try:
        return await context.hub.reconciler.get_state(
            session_id, force_refresh=bool(arguments.get("force_refresh", False))
        )
    except Hello3DError as exc:
        raise ToolExecutionError(f"Error retrieving {what}: {exc}") from exc


async def read_value(
    context: ToolContext,
    arguments: Mapping[str, Any],
    what: str,
    label: str,
    render,
) -> str:
    reading = await read_state(context, arguments, what)
    return format_reading(label, render(reading.state), reading)


async def current_state(context: ToolContext) -> Optional[dict[str, Any]]:
    """Live snapshot for a relative change, or None when none can be had."""
    session_id = context.require_session()
    try:
        reading = await context.hub.reconciler.get_state(session_id, force_refresh=True)
    except Hello3DError as exc:
        logger.warning("Failed to query state before relative change: %s", exc)
        return None
    return reading.state
