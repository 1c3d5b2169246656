"""Redis cache store adapter."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType
from typing import Any

import redis.asyncio
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from jibiki.errors import CacheUnavailable


@contextmanager
def _translate_errors(operation: str, key: str) -> Iterator[None]:
    """Re-raise connection and timeout failures as CacheUnavailable."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as exc:
        raise CacheUnavailable(f"Redis {operation} {key!r} failed: {exc}") from exc


class AsyncRedisStore:
    """Async Redis store issuing GET, SET and EXPIRE on string keys."""

    def __init__(
        self,
        client: Any,  # redis.asyncio.Redis
        *,
        prefix: str | None = None,
    ) -> None:
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, prefix: str | None = None) -> AsyncRedisStore:
        """Create a store with its own connection pool."""
        return cls(redis.asyncio.Redis.from_url(url), prefix=prefix)

    def _redis_key(self, key: str) -> str:
        """Generate the full Redis key."""
        if self._prefix:
            return f"{self._prefix}:{key}"
        return key

    async def get(self, key: str) -> str | None:
        """Get a value by key."""
        with _translate_errors("GET", key):
            data = await self._client.get(self._redis_key(key))
        if not data:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return str(data)

    async def set(self, key: str, value: str) -> None:
        """Store a value."""
        with _translate_errors("SET", key):
            await self._client.set(self._redis_key(key), value)

    async def expire(self, key: str, seconds: int) -> None:
        """Expire a key after the given number of seconds."""
        with _translate_errors("EXPIRE", key):
            await self._client.expire(self._redis_key(key), seconds)

    async def disconnect(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncRedisStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.disconnect()
