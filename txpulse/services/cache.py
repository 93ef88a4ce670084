"""
Last-known-good snapshot cache.
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Protocol

from txpulse.schemas import DailySnapshot
from txpulse.utils import now_utc


class SnapshotCache(Protocol):
    def save(self, snapshot: DailySnapshot) -> None:
        ...

    def load(self) -> Optional[DailySnapshot]:
        ...


class MemorySnapshotCache:
    """In-process cache. Each save replaces the whole value; readers never see a partial one.

    The stored copy is stamped with `cached_at` so a later reader can tell how old it is.
    """

    def __init__(self, clock: Callable[[], datetime] = now_utc):
        self._snapshot: Optional[DailySnapshot] = None
        self._clock = clock

    def save(self, snapshot: DailySnapshot) -> None:
        self._snapshot = snapshot.model_copy(update={"cached_at": self._clock().isoformat()})

    def load(self) -> Optional[DailySnapshot]:
        return self._snapshot
