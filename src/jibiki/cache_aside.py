"""Cache-aside orchestration over a string key-value store.

Every read goes through the same steps:
- build the key for (function name, lookup key, page)
- return the decoded cache entry on a hit, without touching the backend
- on a miss, drain the backend fetch once into a replayable buffer,
  encode it, SET and EXPIRE it, then hand the same buffer to the caller
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from jibiki.adapters.base import AsyncCacheStore
from jibiki.codec import Codec, DelimitedCodec, decode_one, encode_one
from jibiki.duration import parse_duration
from jibiki.errors import CacheUnavailable
from jibiki.keys import build_key
from jibiki.replay import Replay
from jibiki.types import Duration, Fetcher, LookupKey, OneFetcher

T = TypeVar("T")

logger = logging.getLogger(__name__)

CONTENT_TTL = "7d"


@dataclass
class CacheAside:
    """Cache-aside lookups sharing one long-lived store handle."""

    _store: AsyncCacheStore
    _codec: Codec
    _ttl: int
    _fallback_on_unavailable: bool = False
    _coalesce_misses: bool = False
    _in_flight: dict[str, asyncio.Future[Any]] = field(default_factory=dict)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def store(self) -> AsyncCacheStore:
        return self._store

    async def lookup_or_fetch(
        self,
        function_name: str,
        lookup_key: LookupKey,
        page: int,
        record_type: type[T],
        fetcher: Fetcher[T],
        *,
        ttl: Duration | None = None,
    ) -> AsyncIterator[T]:
        """Yield the records for a paged query, from cache or backend.

        Args:
            function_name: Query family, e.g. ``"sentences"``
            lookup_key: Normalized key; ``""`` yields nothing without any I/O
            page: Page index (0 for non-paged families)
            record_type: Type used to decode cached records
            fetcher: Backend fetch, called at most once per call on a miss
            ttl: Entry lifetime (default: content TTL)
        """
        if lookup_key == "":
            return

        key = build_key(function_name, lookup_key, page)

        async def resolve() -> Sequence[T]:
            return await self._resolve_many(
                key, lookup_key, page, record_type, fetcher, ttl
            )

        if self._coalesce_misses:
            records = await self._coalesce(key, resolve)
        else:
            records = await resolve()

        for record in records:
            yield record

    async def lookup_or_fetch_one(
        self,
        function_name: str,
        lookup_key: LookupKey,
        record_type: type[T],
        fetcher: OneFetcher[T] | None = None,
        *,
        ttl: Duration | None = None,
    ) -> T | None:
        """Return a single record from cache or backend, or None if absent.

        Without a fetcher the lookup is cache-only.
        """
        if lookup_key == "":
            return None

        key = build_key(function_name, lookup_key)

        async def resolve() -> T | None:
            return await self._resolve_one(key, lookup_key, record_type, fetcher, ttl)

        if self._coalesce_misses and fetcher is not None:
            return await self._coalesce(key, resolve)
        return await resolve()

    async def store_one(
        self,
        function_name: str,
        lookup_key: LookupKey,
        record: object,
        *,
        ttl: Duration | None = None,
    ) -> None:
        """Write a single record directly. Store failures always propagate."""
        key = build_key(function_name, lookup_key)
        await self._write(key, encode_one(record), self._ttl_seconds(ttl))

    async def disconnect(self) -> None:
        """Disconnect from the storage backend."""
        await self._store.disconnect()

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    async def _resolve_many(
        self,
        key: str,
        lookup_key: LookupKey,
        page: int,
        record_type: type[T],
        fetcher: Fetcher[T],
        ttl: Duration | None,
    ) -> Sequence[T]:
        cached = await self._read(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return self._codec.decode_many(cached, record_type)

        logger.debug("Cache miss for %s", key)
        records = await Replay.materialize(fetcher(lookup_key, page))
        await self._populate(key, self._codec.encode_many(records), ttl)
        return records

    async def _resolve_one(
        self,
        key: str,
        lookup_key: LookupKey,
        record_type: type[T],
        fetcher: OneFetcher[T] | None,
        ttl: Duration | None,
    ) -> T | None:
        cached = await self._read(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return decode_one(cached, record_type)

        if fetcher is None:
            return None

        logger.debug("Cache miss for %s", key)
        record = await fetcher(lookup_key)
        if record is None:
            return None
        await self._populate(key, encode_one(record), ttl)
        return record

    def _ttl_seconds(self, ttl: Duration | None) -> int:
        return parse_duration(ttl) if ttl is not None else self._ttl

    async def _read(self, key: str) -> str | None:
        try:
            return await self._store.get(key)
        except CacheUnavailable:
            if not self._fallback_on_unavailable:
                raise
            logger.warning("Cache read for %s failed, using backend", key, exc_info=True)
            return None

    async def _populate(self, key: str, payload: str, ttl: Duration | None) -> None:
        try:
            await self._write(key, payload, self._ttl_seconds(ttl))
        except CacheUnavailable:
            if not self._fallback_on_unavailable:
                raise
            logger.warning("Cache write for %s failed, skipping", key, exc_info=True)

    async def _write(self, key: str, payload: str, ttl_seconds: int) -> None:
        await self._store.set(key, payload)
        await self._store.expire(key, ttl_seconds)
        logger.debug("Cached %s for %ss", key, ttl_seconds)

    async def _coalesce(self, key: str, fetch: Callable[[], Awaitable[T]]) -> T:
        """Coalesce concurrent requests for same key (stampede protection)."""
        async with self._lock:
            existing = self._in_flight.get(key)
            if existing is None:
                future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
                self._in_flight[key] = future

        if existing is not None:
            # Shielded so one cancelled waiter does not cancel the shared fetch
            result: T = await asyncio.shield(existing)
            return result

        try:
            value = await fetch()
            future.set_result(value)
            return value
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved; waiters (if any) re-raise it themselves
            future.exception()
            raise
        finally:
            async with self._lock:
                del self._in_flight[key]


def create_cache_aside(
    *,
    store: AsyncCacheStore,
    codec: Codec | None = None,
    ttl: Duration = CONTENT_TTL,
    fallback_on_unavailable: bool = False,
    coalesce: bool = False,
) -> CacheAside:
    """Create a cache-aside orchestrator.

    Args:
        store: Cache store, shared for the life of the process
        codec: List codec (default: delimited)
        ttl: Lifetime of content entries
        fallback_on_unavailable: Serve from the backend when the store is down
        coalesce: Share one backend fetch among concurrent misses for a key

    Returns:
        CacheAside instance
    """
    return CacheAside(
        _store=store,
        _codec=codec if codec is not None else DelimitedCodec(),
        _ttl=parse_duration(ttl),
        _fallback_on_unavailable=fallback_on_unavailable,
        _coalesce_misses=coalesce,
    )


__all__ = ["CONTENT_TTL", "CacheAside", "create_cache_aside"]
