from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..shared.errors import Hello3DError, QueryTimeout

logger = logging.getLogger(__name__)


@dataclass
class PendingRequest:
    request_id: str
    session_id: str
    connection: Any
    future: asyncio.Future
    timer: asyncio.TimerHandle


class CorrelationTable:
    """Matches asynchronous browser replies to the callers waiting on them.

    Every entry leaves the table exactly once: on reply, error reply, timeout,
    transport loss, or cancellation of the waiting caller. Settling an id that
    is no longer present is a logged no-op.
    """

    def __init__(self, default_timeout_ms: int = 2000) -> None:
        self.default_timeout_ms = default_timeout_ms
        self._pending: Dict[str, PendingRequest] = {}

    def issue(
        self,
        session_id: str,
        connection: Any,
        timeout_ms: Optional[int] = None,
    ) -> tuple[str, asyncio.Future]:
        loop = asyncio.get_running_loop()
        request_id = str(uuid.uuid4())
        while request_id in self._pending:
            request_id = str(uuid.uuid4())

        timeout_s = (self.default_timeout_ms if timeout_ms is None else timeout_ms) / 1000.0
        future = loop.create_future()
        timer = loop.call_later(timeout_s, self._expire, request_id)
        self._pending[request_id] = PendingRequest(
            request_id=request_id,
            session_id=session_id,
            connection=connection,
            future=future,
            timer=timer,
        )
        future.add_done_callback(lambda _f, rid=request_id: self._forget_cancelled(rid, _f))
        return request_id, future

    def resolve(self, request_id: str, value: Any) -> bool:
        entry = self._pop(request_id)
        if entry is None:
            logger.warning("Received state response for unknown requestId: %s", request_id)
            return False
        if not entry.future.done():
            entry.future.set_result(value)
        return True

    def reject(self, request_id: str, error: Exception) -> bool:
        entry = self._pop(request_id)
        if entry is None:
            logger.warning("Received state error for unknown requestId: %s", request_id)
            return False
        if not entry.future.done():
            entry.future.set_exception(error)
        return True

    def cancel_all_for(self, connection: Any, error: Hello3DError) -> int:
        """Reject every request that went out over ``connection``."""
        doomed = [rid for rid, entry in self._pending.items() if entry.connection is connection]
        for request_id in doomed:
            self.reject(request_id, error)
        return len(doomed)

    def reject_all(self, error: Hello3DError) -> int:
        doomed = list(self._pending)
        for request_id in doomed:
            self.reject(request_id, error)
        return len(doomed)

    def pending_for(self, session_id: str) -> int:
        return sum(1 for entry in self._pending.values() if entry.session_id == session_id)

    def __contains__(self, request_id: str) -> bool:
        return request_id in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def _pop(self, request_id: str) -> Optional[PendingRequest]:
        entry = self._pending.pop(request_id, None)
        if entry is not None:
            entry.timer.cancel()
        return entry

    def _expire(self, request_id: str) -> None:
        entry = self._pop(request_id)
        if entry is None:
            return
        logger.warning("State query %s for session %s timed out", request_id, entry.session_id)
        if not entry.future.done():
            entry.future.set_exception(QueryTimeout("State query timeout"))

    def _forget_cancelled(self, request_id: str, future: asyncio.Future) -> None:
        if future.cancelled():
            self._pop(request_id)
