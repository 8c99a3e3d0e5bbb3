"""In-process locks that serialize concurrent checkouts of the same resources."""

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


class ResourceLockRegistry:
    """One ``asyncio.Lock`` per ``(tenant_id, bookable_id)`` key.

    Locks are always acquired in sorted key order so two checkouts sharing
    resources cannot deadlock. Unused locks are dropped with their last
    reference.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, key: tuple[str, str]) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, keys: Iterable[tuple[str, str]]) -> AsyncIterator[None]:
        ordered = sorted(set(keys))
        locks = [self._lock_for(key) for key in ordered]
        acquired: list[asyncio.Lock] = []
        try:
            for lock in locks:
                await lock.acquire()
                acquired.append(lock)
            logger.debug("Holding checkout locks %s", ordered)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


checkout_locks = ResourceLockRegistry()
