from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Core logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


def to_ms(seconds: float) -> int:
    return int(round(float(seconds) * 1000.0))


def remaining_ms(*, now_ms: int, started_at_ms: int, duration_ms: int) -> int:
    """Time left in a session, derived from the fixed start timestamp.

    Never accumulates tick decrements, so polling jitter cannot drift the
    countdown. Clamped at zero.
    """

    return max(0, int(duration_ms) - (int(now_ms) - int(started_at_ms)))
