"""Cache/live hybrid for answering state questions about a session.

Decision table for ``get_state(session_id, force_refresh)``:

============  ======  =======================================================
force         cached  behaviour
============  ======  =======================================================
True          any     live query; on failure fall back to the cache, else raise
False         yes     return the cached snapshot, no traffic
False         no      live query; on failure raise
============  ======  =======================================================

Manual edits made in the browser are not pushed by the client, so a cache
hit can be stale; ``force_refresh`` is the way around that.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..protocol import make_request_state
from ..shared.errors import Hello3DError, NoRoute, StateUnavailable
from .correlation import CorrelationTable
from .registry import TransportRegistry
from .router import CommandRouter
from .state_cache import Provenance, Snapshot, StateCache

logger = logging.getLogger(__name__)

CACHE_NOTE = (
    "using cached state - changes made directly in the browser since then are not reflected; "
    "pass force_refresh for a live query"
)
PUSHED_NOTE = "last pushed by the browser after applying a command; manual browser edits are not pushed"
FALLBACK_NOTE = "using cached state - browser may be disconnected"


@dataclass(frozen=True)
class StateReading:
    state: Dict[str, Any]
    source: Provenance
    captured_at: datetime
    note: Optional[str] = None

    @property
    def timestamp(self) -> str:
        return self.captured_at.isoformat()


def format_reading(label: str, value: Any, reading: StateReading) -> str:
    """Render ``<label>: <value> (queried at <ISO-8601>, source: <src>[, note])``."""
    note = f", {reading.note}" if reading.note else ""
    return f"{label}: {value} (queried at {reading.timestamp}, source: {reading.source.value}{note})"


class StateReconciler:
    def __init__(
        self,
        registry: TransportRegistry,
        router: CommandRouter,
        pending: CorrelationTable,
        cache: StateCache,
    ) -> None:
        self.registry = registry
        self.router = router
        self.pending = pending
        self.cache = cache

    async def get_state(self, session_id: str, force_refresh: bool = False) -> StateReading:
        cached = self.cache.get(session_id)
        if not force_refresh and cached is not None:
            return self._from_cache(cached)

        try:
            state = await self.query_live(session_id, force_refresh=force_refresh)
        except Hello3DError as exc:
            # The cache may have been written (pushed) while we were waiting.
            cached = self.cache.get(session_id)
            if cached is None:
                raise StateUnavailable(
                    f"Unable to retrieve state: {exc}. Browser may be disconnected."
                ) from exc
            logger.warning(
                "Browser query failed for session %s, returning cached state: %s", session_id, exc
            )
            return StateReading(
                state=cached.state,
                source=Provenance.CACHE,
                captured_at=cached.captured_at,
                note=FALLBACK_NOTE,
            )

        snapshot = self.cache.store(session_id, state, Provenance.FRESH)
        return StateReading(state=snapshot.state, source=Provenance.FRESH, captured_at=snapshot.captured_at)

    async def query_live(self, session_id: str, force_refresh: bool = True) -> Dict[str, Any]:
        connection = self.registry.lookup(session_id)
        if connection is None:
            raise NoRoute("Browser not connected")

        request_id, future = self.pending.issue(session_id, connection)
        if not self.router.send(session_id, make_request_state(request_id, force_refresh)):
            self.pending.reject(request_id, NoRoute("Browser not connected"))
        return await future

    def _from_cache(self, snapshot: Snapshot) -> StateReading:
        if snapshot.provenance == Provenance.PUSHED:
            return StateReading(
                state=snapshot.state,
                source=Provenance.PUSHED,
                captured_at=snapshot.captured_at,
                note=PUSHED_NOTE,
            )
        return StateReading(
            state=snapshot.state,
            source=Provenance.CACHE,
            captured_at=snapshot.captured_at,
            note=CACHE_NOTE,
        )
