"""Per-record mutex.

In-process asyncio locks keyed by record (or contact) id, ensuring a
single writer per record while different records proceed concurrently.
Cross-process safety comes from the store's version check.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class RecordMutex:
    """Registry of asyncio locks, one per key, dropped when no longer held."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[None]:
        """Hold the lock for `key`.

        Usage:
            async with mutex.acquire("record:kyc_123"):
                # read, mutate, write
        """
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()


def record_key(record_id: str) -> str:
    return f"record:{record_id}"


def contact_key(contact_id: str) -> str:
    return f"contact:{contact_id}"
