"""Shared pytest fixtures."""

from collections.abc import AsyncIterator

import pytest

from jibiki import (
    AsyncMemoryStore,
    CacheAside,
    CreateUserSpec,
    Form,
    Kanji,
    Sense,
    Sentence,
    SentenceBundle,
    Snowflake,
    User,
    Word,
    create_cache_aside,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingStore(AsyncMemoryStore):
    """Memory store that records the operations issued against it."""

    def __init__(self, clock: FakeClock) -> None:
        super().__init__(clock=clock)
        self.ops: list[tuple[str, str]] = []

    async def get(self, key: str) -> str | None:
        self.ops.append(("GET", key))
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        self.ops.append(("SET", key))
        await super().set(key, value)

    async def expire(self, key: str, seconds: int) -> None:
        self.ops.append(("EXPIRE", key))
        await super().expire(key, seconds)


class FakeBackend:
    """In-memory backend that counts every call per query family."""

    def __init__(self) -> None:
        self.calls: dict[str, int] = {}
        self.sentences: dict[str, list[SentenceBundle]] = {}
        self.translations: dict[tuple[int, ...], list[Sentence]] = {}
        self.kanji: dict[str, list[Kanji]] = {}
        self.entries: dict[str, list[int]] = {}
        self.words: dict[int, Word] = {}
        self.forms: dict[int, list[Form]] = {}
        self.senses: dict[int, list[Sense]] = {}
        self.users: dict[int, User] = {}
        self.passwords: dict[str, str] = {}

    def _count(self, family: str) -> None:
        self.calls[family] = self.calls.get(family, 0) + 1

    async def get_sentences(self, query: str, page: int) -> AsyncIterator[SentenceBundle]:
        self._count("sentences")
        for bundle in self.sentences.get(query, []):
            yield bundle

    async def get_translations(
        self, ids: tuple[int, ...], source_language: str
    ) -> AsyncIterator[Sentence]:
        self._count("translations")
        for sentence in self.translations.get(ids, []):
            yield sentence

    async def get_kanji(self, kanji: str) -> AsyncIterator[Kanji]:
        self._count("kanji")
        for item in self.kanji.get(kanji, []):
            yield item

    async def get_entries_for_word(self, word: str, page: int) -> AsyncIterator[int]:
        self._count("wordentries")
        for id in self.entries.get(word, []):
            yield id

    async def get_entry(self, id: int) -> Word | None:
        self._count("entry")
        return self.words.get(id)

    async def get_kanjis_for_entry(self, entry: int) -> AsyncIterator[Form]:
        self._count("kanjientry")
        for form in self.forms.get(entry, []):
            yield form

    async def get_senses_for_entry(self, entry: int) -> AsyncIterator[Sense]:
        self._count("senses")
        for sense in self.senses.get(entry, []):
            yield sense

    async def get_user(self, snowflake: Snowflake) -> User | None:
        self._count("users")
        return self.users.get(snowflake.id)

    async def user_exists(self, email: str) -> bool:
        return any(user.email == email for user in self.users.values())

    async def create_user(self, spec: CreateUserSpec, snowflake: Snowflake) -> User:
        user = User(snowflake=snowflake.id, name=spec.name, email=spec.email)
        self.users[snowflake.id] = user
        self.passwords[spec.email] = spec.password.get_secret_value()
        return user

    async def check_credentials(self, email: str, password: str) -> User | None:
        if self.passwords.get(email) != password:
            return None
        return next(user for user in self.users.values() if user.email == email)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> CountingStore:
    """Create a fresh counting memory store on a manual clock for each test."""
    return CountingStore(clock)


@pytest.fixture
def cache(store: CountingStore) -> CacheAside:
    return create_cache_aside(store=store)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()
