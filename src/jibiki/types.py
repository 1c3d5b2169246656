"""Core types for the jibiki cache layer."""

from collections.abc import AsyncIterable, Awaitable, Callable
from typing import TypeVar

T = TypeVar("T")

# "30s", "5m", "2h", "7d", "1w" or seconds
Duration = str | int

# Normalized lookup key: lower-cased text or a numeric id
LookupKey = str | int

# Backend fetch for one query family: (lookup_key, page) -> records
Fetcher = Callable[[LookupKey, int], AsyncIterable[T]]

# Single-record backend fetch: lookup_key -> record or None
OneFetcher = Callable[[LookupKey], Awaitable[T | None]]
