"""Snowflake user identifiers.

Layout of the 64-bit id, high to low bits:
- 41 bits: milliseconds since ``EPOCH_MS``
- 10 bits: worker id
- 12 bits: sequence within the millisecond
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

# 2019-01-01T00:00:00Z
EPOCH_MS = 1_546_300_800_000

WORKER_BITS = 10
SEQUENCE_BITS = 12
MAX_WORKER_ID = (1 << WORKER_BITS) - 1
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1
TIMESTAMP_SHIFT = WORKER_BITS + SEQUENCE_BITS


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True, slots=True)
class Snowflake:
    """A user id with its embedded creation time."""

    id: int

    @property
    def timestamp(self) -> int:
        """Unix timestamp ms at which the id was generated."""
        return (self.id >> TIMESTAMP_SHIFT) + EPOCH_MS

    @property
    def worker_id(self) -> int:
        return (self.id >> SEQUENCE_BITS) & MAX_WORKER_ID

    @property
    def sequence(self) -> int:
        return self.id & MAX_SEQUENCE

    def __str__(self) -> str:
        return str(self.id)


class SnowflakeGenerator:
    """Thread-safe generator of strictly increasing snowflake ids."""

    def __init__(
        self,
        worker_id: int = 0,
        *,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        if not 0 <= worker_id <= MAX_WORKER_ID:
            raise ValueError(f"worker_id must be between 0 and {MAX_WORKER_ID}")
        self._worker_id = worker_id
        self._clock = clock
        self._last_ms = -1
        self._sequence = 0
        self._lock = threading.Lock()

    def next_id(self) -> Snowflake:
        """Generate the next id."""
        with self._lock:
            now = self._clock()
            if now < self._last_ms:
                raise ValueError(
                    f"Clock moved backwards by {self._last_ms - now}ms"
                )

            if now == self._last_ms:
                self._sequence = (self._sequence + 1) & MAX_SEQUENCE
                if self._sequence == 0:
                    # Sequence exhausted, spin until the next millisecond
                    while now <= self._last_ms:
                        now = self._clock()
            else:
                self._sequence = 0

            self._last_ms = now
            return Snowflake(
                ((now - EPOCH_MS) << TIMESTAMP_SHIFT)
                | (self._worker_id << SEQUENCE_BITS)
                | self._sequence
            )
