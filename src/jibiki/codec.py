"""Record serialization for cache payloads.

Single records are stored as compact JSON. Lists are stored either as
JSON documents joined by a private delimiter (``DelimitedCodec``, the
layout existing cache entries use) or as one JSON array
(``JsonArrayCodec``).
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import cache
from typing import Any, Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError

from jibiki.errors import SerializationError

T = TypeVar("T")

REDIS_DELIMITER = "#*#~#*#"


@cache
def _adapter(record_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(record_type)


def encode_one(record: object) -> str:
    """Serialize a single record to JSON."""
    try:
        return _adapter(type(record)).dump_json(record).decode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"Cannot encode {type(record).__name__}: {exc}"
        ) from exc


def decode_one(data: str, record_type: type[T]) -> T:
    """Deserialize a single record, raising SerializationError if malformed."""
    try:
        return _adapter(record_type).validate_json(data)
    except ValidationError as exc:
        raise SerializationError(
            f"Malformed {record_type.__name__} payload: {exc.error_count()} error(s)"
        ) from exc


class Codec(Protocol):
    """List codec interface used by the cache-aside orchestrator."""

    def encode_many(self, records: Iterable[object]) -> str:
        """Serialize a sequence of records to one string."""
        ...

    def decode_many(self, data: str, record_type: type[T]) -> list[T]:
        """Deserialize a string produced by encode_many."""
        ...


class DelimitedCodec:
    """Joins independently serialized records with a delimiter."""

    def __init__(self, delimiter: str = REDIS_DELIMITER) -> None:
        if not delimiter:
            raise ValueError("delimiter must not be empty")
        self._delimiter = delimiter

    def encode_many(self, records: Iterable[object]) -> str:
        """Serialize each record and join; an empty input yields ""."""
        payloads = []
        for record in records:
            payload = encode_one(record)
            # A delimiter inside a payload would split it into bogus segments
            if self._delimiter in payload:
                raise SerializationError(
                    f"{type(record).__name__} payload contains the list delimiter"
                )
            payloads.append(payload)
        return self._delimiter.join(payloads)

    def decode_many(self, data: str, record_type: type[T]) -> list[T]:
        """Split on the delimiter, drop empty segments and decode the rest."""
        return [
            decode_one(segment, record_type)
            for segment in data.split(self._delimiter)
            if segment
        ]


class JsonArrayCodec:
    """Stores a list of records as a single JSON array."""

    def encode_many(self, records: Iterable[object]) -> str:
        items = list(records)
        if not items:
            return "[]"
        return "[" + ",".join(encode_one(record) for record in items) + "]"

    def decode_many(self, data: str, record_type: type[T]) -> list[T]:
        if not data:
            return []
        try:
            return _adapter(list[record_type]).validate_json(data)  # type: ignore[valid-type]
        except ValidationError as exc:
            raise SerializationError(
                f"Malformed {record_type.__name__} list payload: "
                f"{exc.error_count()} error(s)"
            ) from exc


def encode_many(records: Iterable[object]) -> str:
    """Serialize records with the default delimited layout."""
    return _DEFAULT_CODEC.encode_many(records)


def decode_many(data: str, record_type: type[T]) -> list[T]:
    """Deserialize records stored with the default delimited layout."""
    return _DEFAULT_CODEC.decode_many(data, record_type)


def codec_for(list_encoding: str) -> Codec:
    """Return the codec for a configured list encoding name."""
    if list_encoding == "delimited":
        return DelimitedCodec()
    if list_encoding == "json-array":
        return JsonArrayCodec()
    raise ValueError(f"Unknown list encoding: {list_encoding!r}")


_DEFAULT_CODEC = DelimitedCodec()

__all__ = [
    "REDIS_DELIMITER",
    "Codec",
    "DelimitedCodec",
    "JsonArrayCodec",
    "codec_for",
    "decode_many",
    "decode_one",
    "encode_many",
    "encode_one",
]
