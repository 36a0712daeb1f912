"""In-memory ingestion cache keyed by source URL.

Entries carry a monotonic capture time and are valid for `ttl_seconds`.
Expired entries are ignored on lookup and overwritten by the next capture;
there is no sweeping or size-based eviction.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Dict, Optional, Sequence, Tuple

from config import CACHE_TTL_SECONDS
from core.models import RetrievedFile


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: str
    captured_at: float  # time.monotonic()
    files: Tuple[RetrievedFile, ...]


class IngestionCache:
    def __init__(
        self,
        *,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    def _now(self) -> float:
        # Resolved at call time so tests can monkeypatch time.monotonic
        return (self._clock or time.monotonic)()

    def get(self, key: str) -> Optional[Tuple[RetrievedFile, ...]]:
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._now() - entry.captured_at >= self._ttl:
            return None
        return entry.files

    def set(self, key: str, files: Sequence[RetrievedFile]) -> None:
        # Replace, never merge: the newest capture wins
        self._store[key] = CacheEntry(key=key, captured_at=self._now(), files=tuple(files))

    @asynccontextmanager
    async def exclusive(self, key: str) -> AsyncIterator[None]:
        """Hold the per-key lock; concurrent identical requests share a clone.

        The lock is dropped once no task holds or awaits it, so the lock
        table only carries keys that are in flight.
        """
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                self._locks.pop(key, None)

    def in_flight(self) -> int:
        return len(self._locks)


_default_cache: Optional[IngestionCache] = None


def get_default_cache() -> IngestionCache:
    """Process-wide cache shared by every clone-backed source."""
    global _default_cache
    if _default_cache is None:
        _default_cache = IngestionCache()
    return _default_cache
