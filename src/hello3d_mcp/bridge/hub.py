from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..protocol import (
    REGISTER_SESSION,
    STATE_ERROR,
    STATE_RESPONSE,
    STATE_UPDATE,
    UNREGISTERED_MESSAGE,
    make_error,
    make_session_registered,
    parse_message,
)
from ..sessions import SessionManager, SessionResolver
from ..shared.config import BridgeConfig
from ..shared.errors import MalformedReply, ProtocolError, StateQueryFailed, TransportLost
from .correlation import CorrelationTable
from .reconcile import StateReconciler
from .registry import Connection, TransportRegistry
from .router import CommandRouter
from .state_cache import Provenance, StateCache, timestamp_from_millis

logger = logging.getLogger(__name__)


class BrowserHub:
    """Owns the per-process maps and reacts to browser traffic.

    All handlers here are synchronous: nothing between a lookup and the
    mutation that depends on it can be interleaved with other work.
    """

    def __init__(
        self,
        resolver: SessionResolver,
        config: Optional[BridgeConfig] = None,
        sessions: Optional[SessionManager] = None,
    ) -> None:
        config = config or BridgeConfig()
        self.resolver = resolver
        self.sessions = sessions or SessionManager()
        self.registry = TransportRegistry()
        self.pending = CorrelationTable(default_timeout_ms=config.state_query_timeout_ms)
        self.cache = StateCache()
        self.router = CommandRouter(self.registry, resolver, broadcast_fallback=config.broadcast_fallback)
        self.reconciler = StateReconciler(self.registry, self.router, self.pending, self.cache)

    def handle_message(self, connection: Connection, raw: str | bytes) -> None:
        try:
            message = parse_message(raw)
        except ProtocolError as exc:
            logger.warning("Error parsing WebSocket message: %s", exc)
            connection.send(make_error(str(exc)))
            return

        message_type = message["type"]
        if message_type == REGISTER_SESSION:
            self._register(connection, message)
            return

        session_id = connection.session_id
        if not session_id:
            logger.warning("Received message from unregistered client")
            connection.send(make_error(UNREGISTERED_MESSAGE))
            return

        if message_type == STATE_RESPONSE:
            self._state_response(session_id, message)
        elif message_type == STATE_ERROR:
            self._state_error(message)
        elif message_type == STATE_UPDATE:
            self._state_update(session_id, message)
        else:
            logger.debug("Ignoring %s from browser (session %s)", message_type, session_id)

    def disconnect(self, connection: Connection) -> None:
        session_id = self.registry.unregister(connection)
        cancelled = self.pending.cancel_all_for(connection, TransportLost("Browser disconnected"))
        if session_id is None:
            logger.info(
                "Browser client disconnected (%s)",
                f"superseded session: {connection.session_id}" if connection.session_id else "unregistered",
            )
            return
        self.cache.evict(session_id)
        self.sessions.transport_lost(session_id)
        logger.info("Browser client disconnected (session: %s, %d pending query(ies) failed)", session_id, cancelled)

    def shutdown(self) -> None:
        self.pending.reject_all(TransportLost("Server shutting down"))
        for connection in self.registry.connections():
            connection.close()
        for session_id in self.registry.session_ids():
            self.sessions.transport_lost(session_id)
        self.registry.clear()
        self.cache.clear()

    def status(self) -> Dict[str, Any]:
        return {"browsers": len(self.registry), "pending_queries": len(self.pending), "cached_sessions": len(self.cache)}

    def _register(self, connection: Connection, message: Dict[str, Any]) -> None:
        session_id = message.get("sessionId")
        if not isinstance(session_id, str) or not session_id:
            connection.send(make_error("registerSession requires a sessionId"))
            return
        superseded = self.registry.register(session_id, connection)
        if superseded is not None:
            # The old connection can no longer be reached by this id; its in-flight
            # queries would never be answered.
            self.pending.cancel_all_for(superseded, TransportLost("Browser connection superseded"))
        self.sessions.transport_bound(session_id)
        logger.info("Browser client registered with session ID: %s", session_id)
        connection.send(make_session_registered(session_id))

    def _state_response(self, session_id: str, message: Dict[str, Any]) -> None:
        request_id = message.get("requestId")
        if not isinstance(request_id, str):
            logger.warning("Dropping stateResponse without requestId (session %s)", session_id)
            return
        state = message.get("state")
        if not isinstance(state, dict):
            self.pending.reject(request_id, MalformedReply("Browser returned no state object"))
            return
        self.pending.resolve(request_id, state)

    def _state_error(self, message: Dict[str, Any]) -> None:
        request_id = message.get("requestId")
        if not isinstance(request_id, str):
            logger.warning("Dropping stateError without requestId")
            return
        self.pending.reject(request_id, StateQueryFailed(str(message.get("error") or "State query failed")))

    def _state_update(self, session_id: str, message: Dict[str, Any]) -> None:
        state = message.get("state")
        if not isinstance(state, dict):
            logger.warning("Dropping stateUpdate without a state object (session %s)", session_id)
            return
        captured_at = timestamp_from_millis(message.get("timestamp"))
        self.cache.store(session_id, state, Provenance.PUSHED, captured_at)
