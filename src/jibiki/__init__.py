"""jibiki - Cache-aside data access for the jibiki dictionary API."""

# Accessor
from jibiki.accessor import CachingDatabase

# Adapters (async only)
from jibiki.adapters import (
    AsyncCacheStore,
    AsyncMemoryStore,
    AsyncRedisStore,
)
from jibiki.backend import AsyncBackend

# Orchestration
from jibiki.cache_aside import CacheAside, create_cache_aside

# Serialization
from jibiki.codec import (
    DelimitedCodec,
    JsonArrayCodec,
    decode_many,
    decode_one,
    encode_many,
    encode_one,
)

# Duration parsing
from jibiki.duration import parse_duration

# Errors
from jibiki.errors import (
    BackendError,
    CacheUnavailable,
    JibikiError,
    SerializationError,
    TokenIssuanceError,
)
from jibiki.keys import build_key
from jibiki.log import configure_logging, get_logger
from jibiki.models import (
    CreateUserSpec,
    Form,
    Kanji,
    Sense,
    Sentence,
    SentenceBundle,
    Token,
    User,
    Word,
    WordEntry,
)
from jibiki.replay import Replay
from jibiki.sessions import SessionTokenStore
from jibiki.settings import Settings, create_database, create_store
from jibiki.snowflake import Snowflake, SnowflakeGenerator

# Core types
from jibiki.types import Duration, Fetcher, LookupKey

__version__ = "0.1.0"

__all__ = [
    "AsyncBackend",
    "AsyncCacheStore",
    "AsyncMemoryStore",
    "AsyncRedisStore",
    "BackendError",
    "CacheAside",
    "CacheUnavailable",
    "CachingDatabase",
    "CreateUserSpec",
    "DelimitedCodec",
    "Duration",
    "Fetcher",
    "Form",
    "JibikiError",
    "JsonArrayCodec",
    "Kanji",
    "LookupKey",
    "Replay",
    "Sense",
    "Sentence",
    "SentenceBundle",
    "SerializationError",
    "SessionTokenStore",
    "Settings",
    "Snowflake",
    "SnowflakeGenerator",
    "Token",
    "TokenIssuanceError",
    "User",
    "Word",
    "WordEntry",
    "build_key",
    "configure_logging",
    "create_cache_aside",
    "create_database",
    "create_store",
    "decode_many",
    "decode_one",
    "encode_many",
    "encode_one",
    "get_logger",
    "parse_duration",
]
