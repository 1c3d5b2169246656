"""Cache store adapters (async only)."""

from jibiki.adapters.base import AsyncCacheStore
from jibiki.adapters.memory import AsyncMemoryStore
from jibiki.adapters.redis import AsyncRedisStore

__all__ = [
    "AsyncCacheStore",
    "AsyncMemoryStore",
    "AsyncRedisStore",
]
