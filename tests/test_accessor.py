"""Tests for the caching dictionary accessor."""

import pytest
from pydantic import SecretStr

from jibiki import (
    CachingDatabase,
    CreateUserSpec,
    Form,
    Kanji,
    Sense,
    Sentence,
    SentenceBundle,
    Settings,
    User,
    Word,
    create_database,
)


@pytest.fixture
def database(backend, store) -> CachingDatabase:
    return create_database(backend, store, Settings(redis_url="memory://"))


def bundle(id: int, text: str) -> SentenceBundle:
    return SentenceBundle(id=id, language="jpn", sentence=text)


async def collect(iterator):
    return [item async for item in iterator]


class TestSentences:
    async def test_query_is_cached_case_insensitively(self, database, backend, store) -> None:
        backend.sentences["Neko"] = [bundle(1, "猫です")]

        first = await collect(database.get_sentences("Neko"))
        second = await collect(database.get_sentences("neko"))

        assert first == second == [bundle(1, "猫です")]
        assert backend.calls["sentences"] == 1
        assert await store.get("sentences_neko_0") is not None

    async def test_empty_query(self, database, backend, store) -> None:
        assert await collect(database.get_sentences("")) == []
        assert backend.calls == {}
        assert store.ops == []

    async def test_search_applies_length_window(self, database, backend) -> None:
        backend.sentences["猫"] = [bundle(1, "猫"), bundle(2, "猫が好き"), bundle(3, "猫が大好きです")]

        results = await collect(database.search_sentences("猫", min_length=2, max_length=5))
        assert [b.id for b in results] == [2]

        unbounded = await collect(database.search_sentences("猫"))
        assert [b.id for b in unbounded] == [1, 2, 3]
        assert backend.calls["sentences"] == 1

    async def test_translations_key(self, database, backend, store) -> None:
        backend.translations[(1, 2)] = [Sentence(id=9, language="eng", sentence="Cat")]
        result = await collect(database.get_translations([1, 2], "JPN"))
        assert result == [Sentence(id=9, language="eng", sentence="Cat")]
        assert await store.get("translations_jpn_1_2_0") is not None


class TestWords:
    async def test_words_resolve_entries_in_order(self, database, backend) -> None:
        backend.entries["neko"] = [3, 1, 2]
        for id in (1, 2, 3):
            backend.words[id] = Word(id=id, forms=[Form(kanji="猫", reading="ねこ")])

        words = await collect(database.get_words("neko"))
        again = await collect(database.get_words("neko"))

        assert [w.id for w in words] == [3, 1, 2]
        assert again == words
        assert backend.calls["wordentries"] == 1
        assert backend.calls["entry"] == 3

    async def test_missing_entry_is_skipped(self, database, backend) -> None:
        backend.entries["neko"] = [1, 404]
        backend.words[1] = Word(id=1)
        assert [w.id for w in await collect(database.get_words("neko"))] == [1]

    async def test_entry_parts(self, database, backend, store) -> None:
        backend.forms[5] = [Form(kanji="猫", reading="ねこ")]
        backend.senses[5] = [Sense(glosses=["cat"], pos=["n"])]

        assert await collect(database.get_kanjis_for_entry(5)) == backend.forms[5]
        assert await collect(database.get_senses_for_entry(5)) == backend.senses[5]
        assert await store.get("kanjientry_5_0") is not None
        assert await store.get("senses_5_0") is not None

    async def test_kanji(self, database, backend) -> None:
        backend.kanji["cat"] = [Kanji(literal="猫", meanings=["cat"])]
        await collect(database.get_kanji("cat"))
        assert await collect(database.get_kanji("CAT")) == backend.kanji["cat"]
        assert backend.calls["kanji"] == 1


class TestUsers:
    async def test_create_user_assigns_snowflake(self, database, backend) -> None:
        spec = CreateUserSpec(name="kana", email="kana@example.com", password=SecretStr("pw"))
        user = await database.create_user(spec)
        assert user is not None
        assert user.snowflake > 0
        assert backend.users[user.snowflake] == user

    async def test_duplicate_email_conflicts(self, database) -> None:
        spec = CreateUserSpec(name="kana", email="kana@example.com", password=SecretStr("pw"))
        assert await database.create_user(spec) is not None
        assert await database.create_user(spec) is None

    async def test_get_user_is_cached(self, database, backend) -> None:
        backend.users[42] = User(snowflake=42, name="kana", email="kana@example.com")
        assert await database.get_user(42) == backend.users[42]
        assert await database.get_user(42) == backend.users[42]
        assert backend.calls["users"] == 1

    async def test_unknown_user(self, database) -> None:
        assert await database.get_user(404) is None


class TestSessions:
    async def _register(self, database) -> User:
        spec = CreateUserSpec(name="kana", email="kana@example.com", password=SecretStr("pw"))
        user = await database.create_user(spec)
        assert user is not None
        return user

    async def test_login_and_get_me(self, database) -> None:
        user = await self._register(database)
        token = await database.login("kana@example.com", "pw")
        assert token is not None
        assert token.user_id == user.snowflake
        assert await database.get_me(token.value) == user

    async def test_login_twice_returns_same_token(self, database) -> None:
        await self._register(database)
        first = await database.login("kana@example.com", "pw")
        second = await database.login("kana@example.com", "pw")
        assert first == second

    async def test_wrong_password(self, database) -> None:
        await self._register(database)
        assert await database.login("kana@example.com", "nope") is None

    async def test_get_me_unauthenticated(self, database) -> None:
        assert await database.get_me("not-a-token") is None
        assert await database.check_token("") is None

    async def test_user_id_does_not_authenticate(self, database) -> None:
        user = await self._register(database)
        await database.login("kana@example.com", "pw")
        assert await database.check_token(str(user.snowflake)) is None
        assert await database.get_me(str(user.snowflake)) is None

    async def test_session_lifetime(self, database, clock) -> None:
        await self._register(database)
        token = await database.login("kana@example.com", "pw")
        clock.advance(600_000)
        assert await database.get_me(token.value) is None
