from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class Provenance(str, Enum):
    FRESH = "fresh"
    CACHE = "cache"
    PUSHED = "pushed"


@dataclass(frozen=True)
class Snapshot:
    """The full client state as last reported, never a partial merge."""

    state: Dict[str, Any]
    captured_at: datetime
    provenance: Provenance


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_from_millis(value: Any) -> Optional[datetime]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


class StateCache:
    def __init__(self) -> None:
        self._snapshots: Dict[str, Snapshot] = {}

    def get(self, session_id: str) -> Optional[Snapshot]:
        return self._snapshots.get(session_id)

    def store(
        self,
        session_id: str,
        state: Dict[str, Any],
        provenance: Provenance,
        captured_at: Optional[datetime] = None,
    ) -> Snapshot:
        if not isinstance(state, dict):
            raise TypeError("state snapshot must be a JSON object")
        snapshot = Snapshot(state=state, captured_at=captured_at or utcnow(), provenance=provenance)
        self._snapshots[session_id] = snapshot
        logger.debug("State cache updated for session %s (%s)", session_id, provenance.value)
        return snapshot

    def evict(self, session_id: str) -> bool:
        return self._snapshots.pop(session_id, None) is not None

    def clear(self) -> None:
        self._snapshots.clear()

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)
