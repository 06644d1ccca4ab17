"""Record identifier generation."""

from __future__ import annotations

import time
from typing import Callable, Iterable, Protocol


class IdGenerator(Protocol):
    def next_id(self) -> int:
        ...

    def observe(self, ids: Iterable[int]) -> None:
        ...


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class MonotonicIdGenerator:
    """Timestamp-like ids that never repeat.

    Each id is the current wall clock in milliseconds, bumped past the last
    issued (or observed) id when two records land in the same tick or the
    clock steps backwards.
    """

    def __init__(self, clock: Callable[[], int] = _now_ms) -> None:
        self._clock = clock
        self._last = 0

    def next_id(self) -> int:
        candidate = max(self._clock(), self._last + 1)
        self._last = candidate
        return candidate

    def observe(self, ids: Iterable[int]) -> None:
        """Account for ids loaded from persistence."""
        for value in ids:
            if value > self._last:
                self._last = value


class CounterIdGenerator:
    """Plain sequential ids; deterministic, for tests and fixtures."""

    def __init__(self, start: int = 1) -> None:
        self._next = start

    def next_id(self) -> int:
        value = self._next
        self._next += 1
        return value

    def observe(self, ids: Iterable[int]) -> None:
        for value in ids:
            if value >= self._next:
                self._next = value + 1
