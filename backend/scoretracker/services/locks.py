"""Per-season write serialization.

Registering or reverting a match reads every participant's current rating and
writes the next one, so two writers on the same season would compute deltas
from the same starting point. These locks make the write path single-writer
per season inside one process. Across processes the
``uq_match_season_id_sequence`` constraint rejects the second commit.
"""

from __future__ import annotations

from asyncio import Lock
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class SeasonLocks:
    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: dict[str, Lock] = {}

    async def _lock_for(self, season_id: str) -> Lock:
        async with self._guard:
            lock = self._locks.get(season_id)
            if lock is None:
                lock = Lock()
                self._locks[season_id] = lock
            return lock

    @asynccontextmanager
    async def hold(self, season_id: str) -> AsyncIterator[None]:
        lock = await self._lock_for(season_id)
        async with lock:
            yield

    def locked(self, season_id: str) -> bool:
        lock = self._locks.get(season_id)
        return bool(lock and lock.locked())


season_locks = SeasonLocks()
