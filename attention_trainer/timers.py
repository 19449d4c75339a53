from __future__ import annotations

import heapq
from collections.abc import Callable
from dataclasses import dataclass, field


TimerCallback = Callable[[int], None]


@dataclass(order=True, slots=True)
class _Entry:
    due_ms: int
    seq: int
    generation: int = field(compare=False)
    callback: TimerCallback = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


@dataclass(frozen=True, slots=True)
class TimerHandle:
    seq: int
    generation: int


class TimerQueue:
    """Deadline-ordered, cancelable timers for one cooperative loop.

    Callbacks run only from ``run_due`` and receive their own deadline in ms.
    Entries with equal deadlines fire in scheduling order. ``clear`` starts a
    new generation: nothing scheduled before it can fire afterwards, even if a
    caller still holds its handle.
    """

    def __init__(self) -> None:
        self._heap: list[_Entry] = []
        self._by_seq: dict[int, _Entry] = {}
        self._next_seq = 0
        self._generation = 0

    def __len__(self) -> int:
        return len(self._by_seq)

    @property
    def generation(self) -> int:
        return self._generation

    def schedule(self, due_ms: int, callback: TimerCallback) -> TimerHandle:
        entry = _Entry(
            due_ms=int(due_ms),
            seq=self._next_seq,
            generation=self._generation,
            callback=callback,
        )
        self._next_seq += 1
        heapq.heappush(self._heap, entry)
        self._by_seq[entry.seq] = entry
        return TimerHandle(seq=entry.seq, generation=entry.generation)

    def cancel(self, handle: TimerHandle) -> bool:
        if handle.generation != self._generation:
            return False
        entry = self._by_seq.pop(handle.seq, None)
        if entry is None:
            return False
        entry.cancelled = True
        return True

    def clear(self) -> None:
        for entry in self._heap:
            entry.cancelled = True
        self._heap.clear()
        self._by_seq.clear()
        self._generation += 1

    def next_due_ms(self) -> int | None:
        self._drop_cancelled_head()
        if not self._heap:
            return None
        return self._heap[0].due_ms

    def run_due(self, now_ms: int) -> int:
        """Fire every live timer whose deadline is <= now_ms. Returns the count.

        Timers scheduled by a callback are eligible in the same call when
        their deadline has also elapsed.
        """

        fired = 0
        generation = self._generation
        while True:
            self._drop_cancelled_head()
            if not self._heap or self._heap[0].due_ms > now_ms:
                break
            if self._generation != generation:
                break
            entry = heapq.heappop(self._heap)
            self._by_seq.pop(entry.seq, None)
            if entry.generation != self._generation:
                continue
            entry.callback(entry.due_ms)
            fired += 1
        return fired

    def _drop_cancelled_head(self) -> None:
        while self._heap and self._heap[0].cancelled:
            heapq.heappop(self._heap)
