from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .session_core import InteractionRecord, Outcome


@dataclass(frozen=True, slots=True)
class SessionSummary:
    """End-of-session analytics derived from the interaction history."""

    score: int
    hits: int
    wrong_hits: int
    timeout_misses: int
    accuracy: float  # hits / go targets resolved
    mean_rt_ms: float | None
    median_rt_ms: float | None


def summarize_history(history: Sequence[InteractionRecord], *, score: int) -> SessionSummary:
    hits = sum(1 for r in history if r.outcome is Outcome.HIT)
    wrong = sum(1 for r in history if r.outcome is Outcome.WRONG_HIT)
    timeouts = sum(1 for r in history if r.outcome is Outcome.TIMEOUT_MISS)
    go_total = hits + timeouts

    # Timeouts carry the decay window as their RT; only real responses count.
    rts_ms = sorted(int(r.reaction_time_ms) for r in history if r.outcome is Outcome.HIT)

    mean_ms: float | None
    median_ms: float | None
    if not rts_ms:
        mean_ms = None
        median_ms = None
    else:
        mean_ms = float(sum(rts_ms)) / float(len(rts_ms))
        mid = len(rts_ms) // 2
        if len(rts_ms) % 2 == 1:
            median_ms = float(rts_ms[mid])
        else:
            median_ms = float(rts_ms[mid - 1] + rts_ms[mid]) / 2.0

    return SessionSummary(
        score=int(score),
        hits=hits,
        wrong_hits=wrong,
        timeout_misses=timeouts,
        accuracy=0.0 if go_total == 0 else hits / go_total,
        mean_rt_ms=mean_ms,
        median_rt_ms=median_ms,
    )
