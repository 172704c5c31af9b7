"""Envelope helpers for the browser WebSocket channel.

Every frame is a JSON object tagged by its ``type`` field.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from .shared.errors import ProtocolError

REGISTER_SESSION = "registerSession"
SESSION_REGISTERED = "sessionRegistered"
REQUEST_STATE = "requestState"
STATE_RESPONSE = "stateResponse"
STATE_ERROR = "stateError"
STATE_UPDATE = "stateUpdate"
ERROR = "error"

UNREGISTERED_MESSAGE = "Session not registered. Please send registerSession message first."


def parse_message(raw: str | bytes) -> Dict[str, Any]:
    """Parse one inbound frame into a tagged message."""
    try:
        message = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProtocolError("Invalid JSON") from exc
    if not isinstance(message, dict):
        raise ProtocolError("Message must be a JSON object")
    if not isinstance(message.get("type"), str):
        raise ProtocolError("Message must carry a string 'type'")
    return message


def serialize_message(message: Dict[str, Any]) -> str:
    return json.dumps(message, separators=(",", ":"))


def make_session_registered(session_id: str) -> Dict[str, Any]:
    return {"type": SESSION_REGISTERED, "sessionId": session_id}


def make_request_state(request_id: str, force_refresh: bool) -> Dict[str, Any]:
    return {"type": REQUEST_STATE, "requestId": request_id, "forceRefresh": force_refresh}


def make_error(message: str) -> Dict[str, Any]:
    return {"type": ERROR, "message": message}
