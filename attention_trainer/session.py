from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from .clock import Clock, remaining_ms, to_ms
from .difficulty import config_for
from .persistence import KeyValueStore
from .results import SessionSummary, summarize_history
from .scheduler import SpawnScheduler
from .scores import ScoreStore
from .scoring import AudioCues, InteractionEngine
from .session_core import (
    InteractionRecord,
    SeededRng,
    SessionPhase,
    SessionSnapshot,
    SessionState,
)
from .settings import DEFAULT_SETTINGS, GameSettings
from .timers import TimerQueue

logger = logging.getLogger(__name__)

# Vertical band kept clear of targets for the score/time overlay.
DEFAULT_HUD_MARGIN_PX = 96


def _local_today() -> str:
    return date.today().isoformat()


class SessionController:
    """idle -> running -> ended -> idle | running.

    Owns the session's TimerQueue, so spawn ticks and decay timers of a
    finished session are dropped in one step when it ends. All time comes
    from the injected Clock; ``update`` must be polled (every frame is fine).
    """

    def __init__(
        self,
        *,
        clock: Clock,
        scores: ScoreStore,
        seed: int,
        settings: GameSettings = DEFAULT_SETTINGS,
        audio: AudioCues | None = None,
        exclusion_top_margin_px: int = DEFAULT_HUD_MARGIN_PX,
        today: Callable[[], str] = _local_today,
    ) -> None:
        if settings.duration_s <= 0:
            raise ValueError("duration_s must be > 0")
        if exclusion_top_margin_px < 0:
            raise ValueError("exclusion_top_margin_px must be >= 0")

        self._clock = clock
        self._scores = scores
        self._seed = int(seed)
        self._rng = SeededRng(self._seed)
        self._settings = settings
        self._margin = int(exclusion_top_margin_px)
        self._today = today

        self._timers = TimerQueue()
        self._interactions = InteractionEngine(audio=audio, volume=settings.volume)
        self._scheduler: SpawnScheduler | None = None
        self._arena: tuple[int, int] | None = None

        self._state = SessionState()
        self._displayed_best = 0
        self.refresh_best()

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def settings(self) -> GameSettings:
        return self._settings

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def displayed_best(self) -> int:
        return self._displayed_best

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def history(self) -> list[InteractionRecord]:
        return list(self._state.history)

    def apply_settings(self, settings: GameSettings) -> bool:
        """Swap settings between sessions. Rejected while running."""

        if self._state.phase is SessionPhase.RUNNING:
            return False
        if settings.duration_s <= 0:
            raise ValueError("duration_s must be > 0")
        self._settings = settings
        self._interactions.set_volume(settings.volume)
        self.refresh_best()
        return True

    def set_arena(self, width: int, height: int) -> None:
        self._arena = (int(width), int(height))

    def refresh_best(self) -> int:
        self._displayed_best = self._scores.best_score(
            self._today(),
            self._settings.difficulty,
            self._settings.distractor_enabled,
        )
        return self._displayed_best

    def start(self) -> None:
        if self._state.phase is SessionPhase.RUNNING:
            return

        self._timers.clear()
        now_ms = to_ms(self._clock.now())
        duration_ms = int(self._settings.duration_s) * 1000
        self._state = SessionState(
            phase=SessionPhase.RUNNING,
            score=0,
            time_remaining_ms=duration_ms,
            started_at_ms=now_ms,
        )
        self._scheduler = SpawnScheduler(
            config=config_for(self._settings.difficulty),
            timers=self._timers,
            interactions=self._interactions,
            rng=self._rng,
            arena=lambda: self._arena,
            exclusion_top_margin_px=self._margin,
            distractor_enabled=self._settings.distractor_enabled,
        )
        self._scheduler.activate(self._state, start_ms=now_ms)
        logger.info(
            "session started: difficulty=%s distractors=%s duration=%ss",
            self._settings.difficulty.value,
            self._settings.distractor_enabled,
            self._settings.duration_s,
        )

    def update(self) -> None:
        if self._state.phase is not SessionPhase.RUNNING:
            return
        now_ms = to_ms(self._clock.now())
        end_ms = self._state.started_at_ms + int(self._settings.duration_s) * 1000

        # Nothing scheduled after the end deadline may run.
        self._timers.run_due(min(now_ms, end_ms))

        remaining = remaining_ms(
            now_ms=now_ms,
            started_at_ms=self._state.started_at_ms,
            duration_ms=int(self._settings.duration_s) * 1000,
        )
        self._state.time_remaining_ms = remaining
        if remaining <= 0:
            self._end()

    def time_remaining_ms(self) -> int:
        if self._state.phase is not SessionPhase.RUNNING:
            return self._state.time_remaining_ms
        return remaining_ms(
            now_ms=to_ms(self._clock.now()),
            started_at_ms=self._state.started_at_ms,
            duration_ms=int(self._settings.duration_s) * 1000,
        )

    def hit(self, target_id: int) -> InteractionRecord | None:
        """Resolve a player action on ``target_id``.

        Timers whose deadline has already elapsed are processed first, so a
        target that decayed before the click arrived is gone and the click is
        a no-op.
        """

        if self._state.phase is not SessionPhase.RUNNING:
            return None
        self.update()
        if self._state.phase is not SessionPhase.RUNNING:
            return None
        return self._interactions.hit(self._state, int(target_id), to_ms(self._clock.now()))

    def click_background(self) -> None:
        # Empty-space clicks carry no penalty and are not reaction-time samples.
        return None

    def stop(self) -> None:
        self._end()

    def return_to_menu(self) -> None:
        self._end()
        self._state = SessionState()
        self.refresh_best()

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self._state.phase,
            score=self._state.score,
            time_remaining_ms=self.time_remaining_ms(),
            targets=tuple(sorted(self._state.targets.values(), key=lambda t: t.id)),
            target_diameter_px=config_for(self._settings.difficulty).target_diameter_px,
            best_score=self._displayed_best,
        )

    def summary(self) -> SessionSummary:
        return summarize_history(self._state.history, score=self._state.score)

    def _end(self) -> None:
        if self._state.phase is not SessionPhase.RUNNING:
            return

        if self._scheduler is not None:
            self._scheduler.deactivate()
        self._scheduler = None
        self._timers.clear()

        self._state.time_remaining_ms = self.time_remaining_ms()
        self._state.phase = SessionPhase.ENDED
        self._state.targets.clear()

        final_score = self._state.score
        self._scores.record_score(
            self._today(),
            self._settings.difficulty,
            self._settings.distractor_enabled,
            final_score,
        )
        self.refresh_best()
        logger.info("session ended: score=%d best_today=%d", final_score, self._displayed_best)


def build_session(
    *,
    clock: Clock,
    kv: KeyValueStore,
    seed: int,
    settings: GameSettings | None = None,
    audio: AudioCues | None = None,
    exclusion_top_margin_px: int = DEFAULT_HUD_MARGIN_PX,
    today: Callable[[], str] = _local_today,
) -> SessionController:
    return SessionController(
        clock=clock,
        scores=ScoreStore(kv),
        seed=seed,
        settings=settings or DEFAULT_SETTINGS,
        audio=audio,
        exclusion_top_margin_px=exclusion_top_margin_px,
        today=today,
    )
