"""Cached access to the dictionary backend.

Each query family is read through the cache-aside orchestrator under its
own function name. Textual lookup keys are lower-cased here, before the
key is built; the backend still receives the query as the caller wrote it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence

from jibiki.backend import AsyncBackend
from jibiki.cache_aside import CacheAside
from jibiki.models import (
    CreateUserSpec,
    Form,
    Kanji,
    SentenceBundle,
    Sense,
    Sentence,
    Token,
    User,
    Word,
    WordEntry,
)
from jibiki.sessions import SessionTokenStore
from jibiki.snowflake import Snowflake, SnowflakeGenerator
from jibiki.types import LookupKey

logger = logging.getLogger(__name__)


class CachingDatabase:
    """Backend reads served through the cache, plus users and sessions."""

    def __init__(
        self,
        backend: AsyncBackend,
        cache: CacheAside,
        sessions: SessionTokenStore,
        snowflakes: SnowflakeGenerator,
    ) -> None:
        self._backend = backend
        self._cache = cache
        self._sessions = sessions
        self._snowflakes = snowflakes

    # -------------------------------------------------------------------------
    # Dictionary and sentences
    # -------------------------------------------------------------------------

    def get_sentences(self, query: str, page: int = 0) -> AsyncIterator[SentenceBundle]:
        def fetch(_key: LookupKey, page: int) -> AsyncIterator[SentenceBundle]:
            return self._backend.get_sentences(query, page)

        return self._cache.lookup_or_fetch(
            "sentences", query.lower(), page, SentenceBundle, fetch
        )

    async def search_sentences(
        self,
        query: str,
        page: int = 0,
        *,
        min_length: int = 0,
        max_length: int = 0,
    ) -> AsyncIterator[SentenceBundle]:
        """Sentence search with a length window; ``max_length=0`` means unbounded."""
        async for bundle in self.get_sentences(query, page):
            length = len(bundle.sentence)
            if length < min_length:
                continue
            if max_length and length > max_length:
                continue
            yield bundle

    def get_translations(
        self, ids: Sequence[int], source_language: str
    ) -> AsyncIterator[Sentence]:
        key = "_".join([source_language, *(str(id) for id in ids)]).lower()
        id_tuple = tuple(ids)

        def fetch(_key: LookupKey, _page: int) -> AsyncIterator[Sentence]:
            return self._backend.get_translations(id_tuple, source_language)

        return self._cache.lookup_or_fetch("translations", key, 0, Sentence, fetch)

    def get_kanji(self, kanji: str) -> AsyncIterator[Kanji]:
        def fetch(_key: LookupKey, _page: int) -> AsyncIterator[Kanji]:
            return self._backend.get_kanji(kanji)

        return self._cache.lookup_or_fetch("kanji", kanji.lower(), 0, Kanji, fetch)

    async def get_entries_for_word(self, word: str, page: int = 0) -> AsyncIterator[int]:
        async def fetch(_key: LookupKey, page: int) -> AsyncIterator[WordEntry]:
            async for id in self._backend.get_entries_for_word(word, page):
                yield WordEntry(id=id)

        async for entry in self._cache.lookup_or_fetch(
            "wordentries", word.lower(), page, WordEntry, fetch
        ):
            yield entry.id

    async def get_entry(self, id: int) -> Word | None:
        async def fetch(_key: LookupKey) -> Word | None:
            return await self._backend.get_entry(id)

        return await self._cache.lookup_or_fetch_one("entry", id, Word, fetch)

    async def get_words(self, query: str, page: int = 0) -> AsyncIterator[Word]:
        """Entries matching ``query``, fetched concurrently, yielded in rank order."""
        ids = [id async for id in self.get_entries_for_word(query, page)]
        words = await asyncio.gather(*(self.get_entry(id) for id in ids))
        for word in words:
            if word is not None:
                yield word

    def get_kanjis_for_entry(self, entry: int) -> AsyncIterator[Form]:
        def fetch(_key: LookupKey, _page: int) -> AsyncIterator[Form]:
            return self._backend.get_kanjis_for_entry(entry)

        return self._cache.lookup_or_fetch("kanjientry", entry, 0, Form, fetch)

    def get_senses_for_entry(self, entry: int) -> AsyncIterator[Sense]:
        def fetch(_key: LookupKey, _page: int) -> AsyncIterator[Sense]:
            return self._backend.get_senses_for_entry(entry)

        return self._cache.lookup_or_fetch("senses", entry, 0, Sense, fetch)

    # -------------------------------------------------------------------------
    # Users and sessions
    # -------------------------------------------------------------------------

    async def get_user(self, snowflake: Snowflake | int) -> User | None:
        if isinstance(snowflake, int):
            snowflake = Snowflake(snowflake)

        async def fetch(_key: LookupKey) -> User | None:
            return await self._backend.get_user(snowflake)

        return await self._cache.lookup_or_fetch_one("users", snowflake.id, User, fetch)

    async def create_user(self, spec: CreateUserSpec) -> User | None:
        """Register a user under a new snowflake; None if the email is taken."""
        if await self._backend.user_exists(spec.email):
            return None
        user = await self._backend.create_user(spec, self._snowflakes.next_id())
        logger.info("Created user %s", user.snowflake)
        return user

    async def check_credentials(self, email: str, password: str) -> User | None:
        return await self._backend.check_credentials(email, password)

    async def get_token(self, user: User) -> Token:
        return await self._sessions.issue(user.snowflake)

    async def check_token(self, token: str) -> Token | None:
        return await self._sessions.validate(token)

    async def login(self, email: str, password: str) -> Token | None:
        """Issue a session token for valid credentials, else None."""
        user = await self.check_credentials(email, password)
        if user is None:
            return None
        return await self.get_token(user)

    async def get_me(self, token: str) -> User | None:
        """The user owning a live session token, else None."""
        session = await self.check_token(token)
        if session is None:
            return None
        return await self.get_user(session.user_id)
