"""Per-source-path run serialization."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from audiodigest.exceptions import PipelineBusyError


class SourceLockRegistry:
    """One `asyncio.Lock` per source path, dropped when no run holds or awaits it.

    Runs on different sources never block each other.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def is_running(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def active_keys(self) -> list[str]:
        return sorted(k for k, lock in self._locks.items() if lock.locked())

    @asynccontextmanager
    async def hold(self, key: str, *, wait: bool = True) -> AsyncIterator[None]:
        if not wait and self.is_running(key):
            raise PipelineBusyError(key)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] <= 0:
                self._users.pop(key, None)
                self._locks.pop(key, None)
