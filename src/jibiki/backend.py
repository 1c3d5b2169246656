"""Backend protocol: the authoritative, paged source of records.

Implementations run the actual queries. An empty result is a successful
outcome, never an error. Failures surface as ``BackendError`` (or the
implementation's own exceptions) and pass through the cache untouched.
"""

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from jibiki.models import (
    CreateUserSpec,
    Form,
    Kanji,
    SentenceBundle,
    Sense,
    Sentence,
    User,
    Word,
)
from jibiki.snowflake import Snowflake


@runtime_checkable
class AsyncBackend(Protocol):
    """Relational backend for dictionary, sentence and user data."""

    def get_sentences(self, query: str, page: int) -> AsyncIterator[SentenceBundle]:
        """Sentences matching ``query`` with their translations."""
        ...

    def get_translations(
        self, ids: tuple[int, ...], source_language: str
    ) -> AsyncIterator[Sentence]:
        """Translations of the given sentences out of ``source_language``."""
        ...

    def get_kanji(self, kanji: str) -> AsyncIterator[Kanji]:
        """Kanji matching a literal or meaning."""
        ...

    def get_entries_for_word(self, word: str, page: int) -> AsyncIterator[int]:
        """Ids of dictionary entries matching ``word``."""
        ...

    async def get_entry(self, id: int) -> Word | None:
        """A full dictionary entry."""
        ...

    def get_kanjis_for_entry(self, entry: int) -> AsyncIterator[Form]:
        """Written forms of an entry."""
        ...

    def get_senses_for_entry(self, entry: int) -> AsyncIterator[Sense]:
        """Senses of an entry."""
        ...

    async def get_user(self, snowflake: Snowflake) -> User | None:
        """A user by id."""
        ...

    async def user_exists(self, email: str) -> bool:
        """Whether an account is registered under ``email``."""
        ...

    async def create_user(self, spec: CreateUserSpec, snowflake: Snowflake) -> User:
        """Create an account; the backend hashes the password."""
        ...

    async def check_credentials(self, email: str, password: str) -> User | None:
        """The user owning these credentials, or None if they are wrong."""
        ...
