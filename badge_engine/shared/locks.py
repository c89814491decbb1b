"""
Per-key asyncio locks.

Serializes read-modify-write sequences that target the same key
(e.g. one user's progress on one badge in one period) while letting
unrelated keys run concurrently. Locks are dropped once nobody holds
or waits for them, so the registry does not grow with history.

Usage:
    async with progress_locks.hold((user_id, badge_id, period_key)):
        ...
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable


class KeyedLocks:
    """Registry of asyncio.Lock objects created on demand per key."""

    def __init__(self):
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Acquire the lock for `key` for the duration of the block."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def is_locked(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


# Global registries: progress rows and award rows
progress_locks = KeyedLocks()
award_locks = KeyedLocks()
