"""Time sources and delayed work for the party scheduler."""

from __future__ import annotations

from dataclasses import dataclass, field
import heapq
import itertools
import time
from typing import Any, Awaitable, Callable, Protocol

DelayedWork = Callable[[], Awaitable[Any]]


class Clock(Protocol):
    def now(self) -> float: ...


class SystemClock:
    def now(self) -> float:
        return time.time()


class ManualClock:
    """Virtual clock for tests; time only moves when advanced."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        self._now += max(0.0, float(seconds))
        return self._now


@dataclass(order=True)
class _Timer:
    due_at: float
    seq: int
    label: str = field(compare=False)
    work: DelayedWork = field(compare=False)


class TimerQueue:
    """Due-time ordered work; ties run in scheduling order."""

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._heap: list[_Timer] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def schedule(self, delay_seconds: float, work: DelayedWork, *, label: str = "") -> float:
        due_at = self._clock.now() + max(0.0, float(delay_seconds))
        heapq.heappush(self._heap, _Timer(due_at=due_at, seq=next(self._seq), label=label, work=work))
        return due_at

    def pop_due(self) -> list[tuple[str, DelayedWork]]:
        now = self._clock.now()
        due: list[tuple[str, DelayedWork]] = []
        while self._heap and self._heap[0].due_at <= now:
            timer = heapq.heappop(self._heap)
            due.append((timer.label, timer.work))
        return due

    def labels(self) -> list[str]:
        return [timer.label for timer in sorted(self._heap)]

    def clear(self) -> None:
        self._heap.clear()
