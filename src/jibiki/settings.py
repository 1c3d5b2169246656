"""Settings and wiring for the cache layer."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jibiki.accessor import CachingDatabase
from jibiki.adapters.base import AsyncCacheStore
from jibiki.adapters.memory import AsyncMemoryStore
from jibiki.adapters.redis import AsyncRedisStore
from jibiki.backend import AsyncBackend
from jibiki.cache_aside import CONTENT_TTL, create_cache_aside
from jibiki.codec import codec_for
from jibiki.duration import parse_duration
from jibiki.sessions import SESSION_TTL, SessionTokenStore
from jibiki.snowflake import MAX_WORKER_ID, SnowflakeGenerator
from jibiki.types import Duration

logger = logging.getLogger(__name__)

MEMORY_URL = "memory://"


class Settings(BaseSettings):
    """Cache layer configuration, read from ``JIBIKI_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="JIBIKI_",
        env_ignore_empty=True,
        extra="ignore",
    )

    redis_url: str = Field(
        default="redis://localhost:6379",
        description="Redis connection URL, or memory:// for an in-process store",
    )
    key_prefix: str | None = Field(default=None, description="Prefix for every cache key")
    content_ttl: Duration = Field(default=CONTENT_TTL, description="Lifetime of content entries")
    session_ttl: Duration = Field(default=SESSION_TTL, description="Lifetime of session tokens")
    list_encoding: Literal["delimited", "json-array"] = "delimited"
    fallback_on_unavailable: bool = False
    coalesce: bool = False
    worker_id: int = Field(default=0, ge=0, le=MAX_WORKER_ID)

    @field_validator("content_ttl", "session_ttl", mode="before")
    @classmethod
    def _plain_seconds(cls, value: object) -> object:
        # Environment values arrive as strings; "600000" means seconds
        if isinstance(value, str) and value.isdigit():
            return int(value)
        return value

    @field_validator("content_ttl", "session_ttl")
    @classmethod
    def _check_duration(cls, value: Duration) -> Duration:
        parse_duration(value)
        return value


def create_store(settings: Settings) -> AsyncCacheStore:
    """Open the shared cache store described by ``settings``."""
    if settings.redis_url == MEMORY_URL:
        logger.info("Using in-process cache store")
        return AsyncMemoryStore()
    return AsyncRedisStore.from_url(settings.redis_url, prefix=settings.key_prefix)


def create_database(
    backend: AsyncBackend,
    store: AsyncCacheStore,
    settings: Settings | None = None,
) -> CachingDatabase:
    """Wire the orchestrator, session store and accessor around one store."""
    settings = settings if settings is not None else Settings()
    cache = create_cache_aside(
        store=store,
        codec=codec_for(settings.list_encoding),
        ttl=settings.content_ttl,
        fallback_on_unavailable=settings.fallback_on_unavailable,
        coalesce=settings.coalesce,
    )
    return CachingDatabase(
        backend=backend,
        cache=cache,
        sessions=SessionTokenStore(cache, ttl=settings.session_ttl),
        snowflakes=SnowflakeGenerator(settings.worker_id),
    )
