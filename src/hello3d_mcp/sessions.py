from __future__ import annotations

import contextvars
import time
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterator, Optional, TypeVar

T = TypeVar("T")


class SessionStatus(str, Enum):
    UNREGISTERED = "unregistered"
    TRANSPORT_BOUND = "transport-bound"
    ACTIVE = "active"
    TRANSPORT_LOST = "transport-lost"
    TERMINATED = "terminated"


@dataclass
class Session:
    id: str
    created_at: float
    last_seen: float
    status: SessionStatus = SessionStatus.UNREGISTERED


class SessionManager:
    """Lifecycle bookkeeping for logical sessions.

    A session may be announced by the agent side (an MCP session starts) or by
    the browser side (a ``registerSession`` frame arrives); both paths land on
    the same record because they share the id.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    def create_session(self, session_id: Optional[str] = None) -> Session:
        sid = session_id or str(uuid.uuid4())
        existing = self._sessions.get(sid)
        if existing is not None and existing.status != SessionStatus.TERMINATED:
            return existing
        now = time.time()
        session = Session(id=sid, created_at=now, last_seen=now)
        self._sessions[sid] = session
        return session

    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def close_session(self, session_id: str) -> bool:
        session = self._sessions.get(session_id)
        if not session:
            return False
        session.status = SessionStatus.TERMINATED
        session.last_seen = time.time()
        return True

    def touch_session(self, session_id: str) -> bool:
        """Record agent activity; a transport-bound session becomes active."""
        session = self._sessions.get(session_id)
        if not session:
            return False
        session.last_seen = time.time()
        if session.status == SessionStatus.TRANSPORT_BOUND:
            session.status = SessionStatus.ACTIVE
        return True

    def transport_bound(self, session_id: str) -> Session:
        session = self.create_session(session_id)
        session.status = SessionStatus.TRANSPORT_BOUND
        session.last_seen = time.time()
        return session

    def transport_lost(self, session_id: str) -> bool:
        session = self._sessions.get(session_id)
        if not session or session.status == SessionStatus.TERMINATED:
            return False
        session.status = SessionStatus.TRANSPORT_LOST
        session.last_seen = time.time()
        return True


# Per-request binding; only ScopedSessionResolver reads or writes it.
_request_session: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "hello3d_request_session", default=None
)


class SessionResolver(ABC):
    """Answers "which session is this work for?" from anywhere in a request."""

    # An unresolved write may fall back to every connection only in a
    # single-session process.
    allows_degraded_broadcast = False

    @abstractmethod
    def current_session(self) -> Optional[str]:
        ...

    @abstractmethod
    @contextmanager
    def bind(self, session_id: Optional[str]) -> Iterator[None]:
        ...

    async def run(self, session_id: Optional[str], work: Callable[[], Awaitable[T]]) -> T:
        """Run ``work`` with ``session_id`` ambient for everything it awaits."""
        with self.bind(session_id):
            return await work()


class AmbientSessionResolver(SessionResolver):
    """One process, one session, fixed at startup."""

    allows_degraded_broadcast = True

    def __init__(self, session_id: Optional[str] = None) -> None:
        self.session_id = session_id or str(uuid.uuid4())

    def current_session(self) -> Optional[str]:
        return self.session_id

    @contextmanager
    def bind(self, session_id: Optional[str]) -> Iterator[None]:
        yield


class ScopedSessionResolver(SessionResolver):
    """Many sessions multiplexed through one process, bound per inbound request."""

    def current_session(self) -> Optional[str]:
        return _request_session.get()

    @contextmanager
    def bind(self, session_id: Optional[str]) -> Iterator[None]:
        token = _request_session.set(session_id)
        try:
            yield
        finally:
            _request_session.reset(token)
