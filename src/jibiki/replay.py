"""Replayable sequences built from single-use async producers."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterable, Sequence
from typing import Generic, TypeVar, overload

T = TypeVar("T")


class Replay(Sequence[T], Generic[T]):
    """An ordered, immutable buffer that any number of readers can iterate.

    Build one with ``await Replay.materialize(source)``: the source is drained
    exactly once, and every later ``for``/``async for`` reads the buffer.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: tuple[T, ...] = tuple(items)

    @classmethod
    async def materialize(cls, source: AsyncIterable[T]) -> Replay[T]:
        """Drain an async producer into a replayable buffer."""
        return cls([item async for item in source])

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: ...

    def __getitem__(self, index: int | slice) -> T | Sequence[T]:
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __aiter__(self) -> AsyncIterator[T]:
        return self._replay()

    async def _replay(self) -> AsyncIterator[T]:
        for item in self._items:
            yield item

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Replay):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return list(self._items) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Replay({list(self._items)!r})"
