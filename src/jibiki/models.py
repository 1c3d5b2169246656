"""Record types served by the dictionary backend."""

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Record(BaseModel):
    """Base for cached records: immutable and tolerant of extra fields."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class Sentence(Record):
    id: int
    language: str = ""
    sentence: str


class SentenceBundle(Sentence):
    """A sentence with its translations.

    The sentence fields sit at the top level of the bundle rather than
    under a nested key, matching the payloads already in the cache.
    """

    translations: list[Sentence] = Field(default_factory=list)

    @property
    def source(self) -> Sentence:
        return Sentence(id=self.id, language=self.language, sentence=self.sentence)


class Kanji(Record):
    literal: str
    meanings: list[str] = Field(default_factory=list)
    kunyomi: list[str] = Field(default_factory=list)
    onyomi: list[str] = Field(default_factory=list)
    grade: int | None = None
    stroke_count: int | None = None
    frequency: int | None = None
    jlpt: int | None = None


class Form(Record):
    kanji: str | None = None
    reading: str
    info: list[str] = Field(default_factory=list)


class Sense(Record):
    glosses: list[str] = Field(default_factory=list)
    pos: list[str] = Field(default_factory=list)
    misc: list[str] = Field(default_factory=list)


class Word(Record):
    id: int
    forms: list[Form] = Field(default_factory=list)
    senses: list[Sense] = Field(default_factory=list)


class WordEntry(Record):
    """Cached pointer to a dictionary entry id."""

    id: int = 0


class User(Record):
    snowflake: int
    name: str
    email: str


class Token(Record):
    """A live session: owning user, opaque value and lifetime in seconds."""

    user_id: int
    value: str
    ttl: int


class CreateUserSpec(BaseModel):
    name: str
    email: str
    password: SecretStr
