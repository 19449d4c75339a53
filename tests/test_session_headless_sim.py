from __future__ import annotations

from dataclasses import dataclass, field

from attention_trainer.difficulty import Difficulty, config_for
from attention_trainer.persistence import MemoryKeyValueStore
from attention_trainer.placement import min_separation_px
from attention_trainer.scores import ScoreStore
from attention_trainer.session import build_session
from attention_trainer.session_core import Outcome, SessionPhase, TargetKind
from attention_trainer.settings import GameSettings


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


@dataclass
class RecordingAudio:
    calls: list[str] = field(default_factory=list)

    def play_success(self, volume: float) -> None:
        self.calls.append("success")

    def play_miss(self, volume: float) -> None:
        self.calls.append("miss")


def test_headless_scripted_expert_session_with_distractors() -> None:
    clock = FakeClock()
    kv = MemoryKeyValueStore()
    audio = RecordingAudio()
    controller = build_session(
        clock=clock,
        kv=kv,
        seed=2024,
        settings=GameSettings(duration_s=30, difficulty=Difficulty.EXPERT, volume=0.8, distractor_enabled=True),
        audio=audio,
        today=lambda: "2026-01-02",
    )
    controller.set_arena(960, 640)
    controller.start()
    diameter = config_for(Difficulty.EXPERT).target_diameter_px

    step = 0
    min_score = 0
    while controller.phase is SessionPhase.RUNNING:
        clock.advance(0.05)
        step += 1
        controller.update()
        snap = controller.snapshot()

        live = snap.targets
        for i, a in enumerate(live):
            for b in live[i + 1 :]:
                if a.kind is not b.kind:
                    assert a.position.distance_to(b.position) >= min_separation_px(diameter)

        # Scripted player: taps every go target on its 6th poll and every
        # third no-go target by mistake; everything else is left to decay.
        for target in live:
            age_ms = int(round(clock.t * 1000)) - target.spawned_at_ms
            if target.kind is TargetKind.GO and age_ms >= 300 and target.id % 4 != 0:
                controller.hit(target.id)
            elif target.kind is TargetKind.NO_GO and target.id % 3 == 0:
                controller.hit(target.id)
        min_score = min(min_score, controller.score)

    assert min_score >= 0
    assert controller.phase is SessionPhase.ENDED

    history = controller.history()
    outcomes = {r.outcome for r in history}
    assert outcomes == {Outcome.HIT, Outcome.WRONG_HIT, Outcome.TIMEOUT_MISS}
    assert all(r.kind is TargetKind.GO for r in history if r.is_timeout)
    assert all(r.reaction_time_ms == 1_200 for r in history if r.is_timeout)
    assert len({r.target_id for r in history}) == len(history)

    summary = controller.summary()
    assert summary.hits == sum(1 for r in history if r.outcome is Outcome.HIT)
    assert summary.wrong_hits == audio.calls.count("miss")
    assert summary.hits == audio.calls.count("success")
    assert summary.mean_rt_ms is not None and summary.mean_rt_ms >= 300

    assert ScoreStore(kv).best_score("2026-01-02", Difficulty.EXPERT, True) == controller.score
    assert controller.displayed_best == controller.score


def test_same_seed_replays_identically() -> None:
    def play(seed: int) -> list[tuple[int, float, float, str]]:
        clock = FakeClock()
        controller = build_session(
            clock=clock,
            kv=MemoryKeyValueStore(),
            seed=seed,
            settings=GameSettings(duration_s=30, difficulty=Difficulty.HARD, distractor_enabled=True),
            today=lambda: "2026-01-02",
        )
        controller.set_arena(800, 600)
        controller.start()
        seen: dict[int, tuple[int, float, float, str]] = {}
        while controller.phase is SessionPhase.RUNNING:
            clock.advance(0.1)
            controller.update()
            for t in controller.snapshot().targets:
                seen[t.id] = (t.id, t.position.x, t.position.y, t.kind.value)
        return [seen[k] for k in sorted(seen)]

    assert play(99) == play(99)
    assert play(99) != play(100)
