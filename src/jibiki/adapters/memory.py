"""In-memory cache store (async only)."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from types import TracebackType


class AsyncMemoryStore:
    """Async in-process store with per-key expiry enforced on read."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._values: dict[str, str] = {}
        self._expires_at: dict[str, float] = {}
        self._clock = clock
        self._lock = asyncio.Lock()

    def _evict_if_expired(self, key: str) -> None:
        deadline = self._expires_at.get(key)
        if deadline is not None and self._clock() >= deadline:
            self._values.pop(key, None)
            del self._expires_at[key]

    async def get(self, key: str) -> str | None:
        """Get a value by key."""
        async with self._lock:
            self._evict_if_expired(key)
            return self._values.get(key) or None

    async def set(self, key: str, value: str) -> None:
        """Store a value. Like Redis SET, this clears any pending expiry."""
        async with self._lock:
            self._values[key] = value
            self._expires_at.pop(key, None)

    async def expire(self, key: str, seconds: int) -> None:
        """Expire a key after the given number of seconds."""
        async with self._lock:
            self._evict_if_expired(key)
            if key in self._values:
                self._expires_at[key] = self._clock() + seconds

    async def disconnect(self) -> None:
        """Disconnect from the storage backend (no-op for memory)."""
        pass

    async def __aenter__(self) -> AsyncMemoryStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.disconnect()
