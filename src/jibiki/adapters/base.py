"""Base adapter protocol for cache store backends."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class AsyncCacheStore(Protocol):
    """Async string key-value store with per-key expiry.

    Implementations raise ``CacheUnavailable`` when the backend cannot be
    reached or times out.
    """

    async def get(self, key: str) -> str | None:
        """Get a value by key. Missing keys and empty strings return None."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    async def expire(self, key: str, seconds: int) -> None:
        """Expire a key after the given number of seconds."""
        ...

    async def disconnect(self) -> None:
        """Disconnect from the storage backend."""
        ...
