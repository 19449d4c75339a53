from __future__ import annotations

from attention_trainer.timers import TimerQueue


def test_fires_in_deadline_order_with_ties_in_schedule_order() -> None:
    q = TimerQueue()
    fired: list[str] = []
    q.schedule(300, lambda due: fired.append(f"c@{due}"))
    q.schedule(100, lambda due: fired.append(f"a@{due}"))
    q.schedule(300, lambda due: fired.append(f"d@{due}"))
    q.schedule(200, lambda due: fired.append(f"b@{due}"))

    assert q.run_due(250) == 2
    assert fired == ["a@100", "b@200"]
    assert q.run_due(300) == 2
    assert fired == ["a@100", "b@200", "c@300", "d@300"]
    assert len(q) == 0


def test_nothing_fires_before_deadline() -> None:
    q = TimerQueue()
    fired: list[int] = []
    q.schedule(1_200, fired.append)
    assert q.run_due(1_199) == 0
    assert fired == []
    assert q.next_due_ms() == 1_200


def test_cancel_prevents_firing() -> None:
    q = TimerQueue()
    fired: list[int] = []
    h = q.schedule(10, fired.append)
    q.schedule(20, fired.append)
    assert q.cancel(h) is True
    assert q.cancel(h) is False
    q.run_due(100)
    assert fired == [20]


def test_clear_invalidates_old_handles_and_entries() -> None:
    q = TimerQueue()
    fired: list[int] = []
    old = q.schedule(10, fired.append)
    gen = q.generation
    q.clear()

    assert q.generation == gen + 1
    assert len(q) == 0
    assert q.cancel(old) is False
    q.schedule(10, fired.append)
    q.run_due(10)
    assert fired == [10]


def test_callback_may_schedule_due_timer_in_same_run() -> None:
    q = TimerQueue()
    fired: list[int] = []

    def rearm(due: int) -> None:
        fired.append(due)
        if due < 300:
            q.schedule(due + 100, rearm)

    q.schedule(100, rearm)
    q.run_due(250)
    assert fired == [100, 200]
    assert q.next_due_ms() == 300


def test_clear_from_callback_stops_the_run() -> None:
    q = TimerQueue()
    fired: list[int] = []

    def stop_everything(due: int) -> None:
        fired.append(due)
        q.clear()

    q.schedule(10, stop_everything)
    q.schedule(20, fired.append)
    q.schedule(30, fired.append)

    assert q.run_due(100) == 1
    assert fired == [10]
    assert len(q) == 0
