from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterator, Optional, Protocol

from ..protocol import serialize_message

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """A duplex channel to one browser client."""

    session_id: Optional[str]

    @property
    def is_open(self) -> bool:
        ...

    def send(self, message: Dict[str, Any]) -> bool:
        ...

    def close(self) -> None:
        ...


_CLOSE = object()


class WebSocketConnection:
    """Wraps a Starlette WebSocket with an ordered, non-blocking outbox.

    ``send`` only enqueues; ``pump`` is the single writer and must run as a
    task for as long as the socket is open.
    """

    def __init__(self, websocket: Any) -> None:
        self.websocket = websocket
        self.session_id: Optional[str] = None
        self._outbox: asyncio.Queue[Any] = asyncio.Queue()
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def send(self, message: Dict[str, Any]) -> bool:
        if not self._open:
            return False
        self._outbox.put_nowait(serialize_message(message))
        return True

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        self._outbox.put_nowait(_CLOSE)

    async def pump(self) -> None:
        while True:
            item = await self._outbox.get()
            if item is _CLOSE:
                try:
                    await self.websocket.close()
                except Exception as exc:
                    logger.debug("Browser socket already closed (session: %s): %s", self.session_id, exc)
                return
            try:
                await self.websocket.send_text(item)
            except Exception:
                logger.warning("Write to browser failed (session: %s), closing", self.session_id or "unregistered")
                self._open = False
                return


class TransportRegistry:
    """Maps a session id to its single live connection."""

    def __init__(self) -> None:
        self._by_session: Dict[str, Connection] = {}

    def register(self, session_id: str, connection: Connection) -> Optional[Connection]:
        """Bind ``connection`` to ``session_id``; returns the connection it superseded."""
        previous_id = connection.session_id
        if previous_id and previous_id != session_id and self._by_session.get(previous_id) is connection:
            del self._by_session[previous_id]

        superseded = self._by_session.get(session_id)
        if superseded is connection:
            superseded = None
        self._by_session[session_id] = connection
        connection.session_id = session_id
        if superseded is not None:
            logger.info("Session %s rebound to a new browser connection", session_id)
        return superseded

    def lookup(self, session_id: str) -> Optional[Connection]:
        connection = self._by_session.get(session_id)
        if connection is None or not connection.is_open:
            return None
        return connection

    def unregister(self, connection: Connection) -> Optional[str]:
        """Drop whatever binding points at ``connection``.

        Returns the session id only when ``connection`` was still the live
        binding; a superseded connection unbinds nothing.
        """
        for session_id, bound in list(self._by_session.items()):
            if bound is connection:
                del self._by_session[session_id]
                return session_id
        return None

    def connections(self) -> Iterator[Connection]:
        return iter(list(self._by_session.values()))

    def session_ids(self) -> list[str]:
        return list(self._by_session)

    def clear(self) -> None:
        self._by_session.clear()

    def __len__(self) -> int:
        return len(self._by_session)
