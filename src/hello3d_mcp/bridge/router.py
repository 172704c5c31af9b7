from __future__ import annotations

import logging
from typing import Any, Dict, Union

from ..commands import Command
from ..sessions import SessionResolver
from .registry import TransportRegistry

logger = logging.getLogger(__name__)

Payload = Union[Command, Dict[str, Any]]


def _as_message(command: Payload) -> Dict[str, Any]:
    return command.to_message() if isinstance(command, Command) else dict(command)


class CommandRouter:
    """Delivers commands to exactly one browser connection.

    The payload is opaque cargo. The router never retries or queues; the only
    time it writes to more than one connection is the degraded broadcast in
    ``route_to_current`` when no session can be resolved at all, and only for
    resolvers that serve a single session.
    """

    def __init__(self, registry: TransportRegistry, resolver: SessionResolver, broadcast_fallback: bool = True) -> None:
        self.registry = registry
        self.resolver = resolver
        self.broadcast_fallback = broadcast_fallback

    def send(self, session_id: str, command: Payload) -> bool:
        message = _as_message(command)
        connection = self.registry.lookup(session_id)
        if connection is None:
            logger.warning("No active WebSocket connection found for session: %s", session_id)
            return False
        delivered = connection.send(message)
        if delivered:
            logger.debug("Routed %s to session %s", message.get("type"), session_id)
        else:
            logger.warning("Connection for session %s refused %s", session_id, message.get("type"))
        return delivered

    def route_to_current(self, command: Payload) -> bool:
        session_id = self.resolver.current_session()
        if session_id:
            return self.send(session_id, command)

        message = _as_message(command)
        fallback = self.broadcast_fallback and self.resolver.allows_degraded_broadcast
        if not fallback or len(self.registry) == 0:
            logger.warning("No session context and no broadcast target. Command not routed: %s", message.get("type"))
            return False
        return self.broadcast(message)

    def broadcast(self, command: Payload) -> bool:
        message = _as_message(command)
        logger.warning(
            "Degraded broadcast of %s: session unresolved, sending to %d connection(s)",
            message.get("type"),
            len(self.registry),
        )
        delivered = 0
        for connection in self.registry.connections():
            if connection.is_open and connection.send(message):
                delivered += 1
        return delivered > 0
