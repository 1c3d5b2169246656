"""Session tokens stored in the cache.

The cache is the only store for sessions. Each token is written twice,
under its owner's id and under its own value, so it can be found from
either side until the store expires both entries.
"""

from __future__ import annotations

import base64
import logging
import uuid

from jibiki.cache_aside import CacheAside
from jibiki.duration import parse_duration
from jibiki.errors import SerializationError, TokenIssuanceError
from jibiki.models import Token
from jibiki.types import Duration

logger = logging.getLogger(__name__)

TOKENS = "tokens"
SESSION_TTL = 600_000


def generate_token_value() -> str:
    """Base64 of a random (version 4) UUID."""
    return base64.b64encode(str(uuid.uuid4()).encode("ascii")).decode("ascii")


class SessionTokenStore:
    """Issues and validates opaque session tokens."""

    def __init__(self, cache: CacheAside, *, ttl: Duration = SESSION_TTL) -> None:
        self._cache = cache
        self._ttl = parse_duration(ttl)

    @property
    def ttl(self) -> int:
        return self._ttl

    async def issue(self, user_id: int) -> Token:
        """Return the user's live token, minting and storing one if needed.

        A by-user entry that is malformed, or whose by-value entry no longer
        resolves, is replaced by a fresh token.

        Raises:
            CacheUnavailable: The first write failed; nothing was stored.
            TokenIssuanceError: Only the by-value entry was stored.
        """
        existing = await self._find(user_id)
        if existing is not None and await self._resolves(existing):
            return existing

        token = Token(user_id=user_id, value=generate_token_value(), ttl=self._ttl)

        # By value first: a failure below leaves an unreferenced session that
        # simply expires, never a user entry pointing at nothing.
        await self._cache.store_one(TOKENS, token.value, token, ttl=self._ttl)
        try:
            await self._cache.store_one(TOKENS, user_id, token, ttl=self._ttl)
        except Exception as exc:
            logger.error("Token for user %s stored only by value", user_id)
            raise TokenIssuanceError(
                user_id, f"Failed to store token for user {user_id}: {exc}"
            ) from exc

        logger.info("Issued session token for user %s", user_id)
        return token

    async def validate(self, value: str) -> Token | None:
        """Return the token stored under ``value``, or None if unauthenticated.

        Only an entry whose own value matches counts; the by-user entry shares
        the ``tokens`` family, so a user id is never accepted as a token.
        """
        if not value:
            return None
        found = await self._find(value)
        if found is None or found.value != value:
            return None
        return found

    async def _find(self, lookup_key: str | int) -> Token | None:
        try:
            return await self._cache.lookup_or_fetch_one(TOKENS, lookup_key, Token)
        except SerializationError:
            logger.warning("Discarding malformed session entry", exc_info=True)
            return None

    async def _resolves(self, token: Token) -> bool:
        found = await self.validate(token.value)
        return found is not None and found.user_id == token.user_id
