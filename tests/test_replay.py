"""Tests for replayable sequences."""

from collections.abc import AsyncIterator

from jibiki import Replay


class TestReplay:
    async def test_source_is_drained_once(self) -> None:
        pulls = 0

        async def source() -> AsyncIterator[int]:
            nonlocal pulls
            pulls += 1
            for i in range(3):
                yield i

        replay = await Replay.materialize(source())

        first = [item async for item in replay]
        second = [item async for item in replay]
        assert first == second == [0, 1, 2]
        assert list(replay) == [0, 1, 2]
        assert pulls == 1

    async def test_empty_source(self) -> None:
        async def source() -> AsyncIterator[int]:
            return
            yield

        replay = await Replay.materialize(source())
        assert len(replay) == 0
        assert replay == []

    def test_sequence_protocol(self) -> None:
        replay = Replay(["a", "b", "c"])
        assert replay[0] == "a"
        assert replay[-1] == "c"
        assert replay[1:] == ("b", "c")
        assert "b" in replay
        assert replay == Replay(["a", "b", "c"])
