from __future__ import annotations

import pytest

from attention_trainer.results import summarize_history
from attention_trainer.session_core import InteractionRecord, Outcome, Position, TargetKind


def _rec(i: int, outcome: Outcome, rt: int) -> InteractionRecord:
    kind = TargetKind.NO_GO if outcome is Outcome.WRONG_HIT else TargetKind.GO
    return InteractionRecord(target_id=i, position=Position(0, 0), kind=kind, outcome=outcome, reaction_time_ms=rt)


def test_empty_history() -> None:
    s = summarize_history([], score=0)
    assert (s.hits, s.wrong_hits, s.timeout_misses) == (0, 0, 0)
    assert s.accuracy == 0.0
    assert s.mean_rt_ms is None
    assert s.median_rt_ms is None


def test_counts_accuracy_and_hit_reaction_times() -> None:
    history = [
        _rec(0, Outcome.HIT, 400),
        _rec(1, Outcome.TIMEOUT_MISS, 2000),
        _rec(2, Outcome.HIT, 300),
        _rec(3, Outcome.WRONG_HIT, 150),
        _rec(4, Outcome.HIT, 500),
        _rec(5, Outcome.HIT, 600),
    ]
    s = summarize_history(history, score=350)
    assert s.score == 350
    assert (s.hits, s.wrong_hits, s.timeout_misses) == (4, 1, 1)
    assert s.accuracy == pytest.approx(4 / 5)
    assert s.mean_rt_ms == pytest.approx(450.0)
    assert s.median_rt_ms == pytest.approx(450.0)


def test_odd_count_median() -> None:
    history = [_rec(0, Outcome.HIT, 900), _rec(1, Outcome.HIT, 200), _rec(2, Outcome.HIT, 350)]
    assert summarize_history(history, score=300).median_rt_ms == pytest.approx(350.0)
