from __future__ import annotations

import logging
from collections.abc import Callable

from .difficulty import DifficultyConfig
from .placement import Obstacle, choose_kind, place_batch
from .scoring import InteractionEngine
from .session_core import SeededRng, SessionPhase, SessionState, Target
from .timers import TimerHandle, TimerQueue

logger = logging.getLogger(__name__)

ArenaProvider = Callable[[], tuple[int, int] | None]


class SpawnScheduler:
    """Periodic spawner driven by the session's TimerQueue.

    Each spawn tick re-arms itself at ``deadline + spawn_interval_ms`` so the
    cadence does not drift with polling latency. Spawned targets get a decay
    timer at ``spawned_at_ms + decay_time_ms``.
    """

    def __init__(
        self,
        *,
        config: DifficultyConfig,
        timers: TimerQueue,
        interactions: InteractionEngine,
        rng: SeededRng,
        arena: ArenaProvider,
        exclusion_top_margin_px: int,
        distractor_enabled: bool,
    ) -> None:
        if config.spawn_interval_ms <= 0:
            raise ValueError("spawn_interval_ms must be > 0")
        if config.simultaneous_spawns < 1:
            raise ValueError("simultaneous_spawns must be >= 1")
        if config.target_diameter_px <= 0:
            raise ValueError("target_diameter_px must be > 0")

        self._cfg = config
        self._timers = timers
        self._interactions = interactions
        self._rng = rng
        self._arena = arena
        self._margin = int(exclusion_top_margin_px)
        self._distractor_enabled = bool(distractor_enabled)

        self._state: SessionState | None = None
        self._tick_handle: TimerHandle | None = None

    @property
    def active(self) -> bool:
        return self._state is not None

    def activate(self, state: SessionState, *, start_ms: int) -> None:
        self._state = state
        self._tick_handle = self._timers.schedule(start_ms + self._cfg.spawn_interval_ms, self._on_tick)

    def deactivate(self) -> None:
        # Decay timers live in the same queue; the controller clears it.
        if self._tick_handle is not None:
            self._timers.cancel(self._tick_handle)
        self._tick_handle = None
        self._state = None

    def spawn_now(self, now_ms: int) -> list[Target]:
        """Run one spawn tick at ``now_ms`` and return the committed targets."""

        state = self._state
        if state is None or state.phase is not SessionPhase.RUNNING:
            return []

        arena = self._arena()
        if arena is None or arena[0] <= 0 or arena[1] <= 0:
            logger.debug("arena not measurable at %d ms; skipping spawn tick", now_ms)
            return []
        width, height = arena

        kinds = [
            choose_kind(
                self._rng,
                distractor_enabled=self._distractor_enabled,
                distractor_chance=self._cfg.distractor_chance,
            )
            for _ in range(self._cfg.simultaneous_spawns)
        ]
        live = [Obstacle(t.position, t.kind) for t in state.targets.values()]
        placements = place_batch(
            rng=self._rng,
            arena_width=width,
            arena_height=height,
            exclusion_top_margin_px=self._margin,
            diameter_px=self._cfg.target_diameter_px,
            kinds=kinds,
            live=live,
        )

        spawned: list[Target] = []
        for placement in placements:
            target = Target(
                id=state.allocate_id(),
                position=placement.position,
                kind=placement.kind,
                spawned_at_ms=int(now_ms),
            )
            spawned.append(target)

        for target in spawned:
            state.targets[target.id] = target
            self._timers.schedule(target.spawned_at_ms + self._cfg.decay_time_ms, self._decay_callback(target.id))
        return spawned

    def _on_tick(self, due_ms: int) -> None:
        if self._state is None:
            return
        self._tick_handle = self._timers.schedule(due_ms + self._cfg.spawn_interval_ms, self._on_tick)
        self.spawn_now(due_ms)

    def _decay_callback(self, target_id: int) -> Callable[[int], None]:
        def _decay(due_ms: int) -> None:
            _ = due_ms
            state = self._state
            if state is None or state.phase is not SessionPhase.RUNNING:
                return
            self._interactions.expire(state, target_id, decay_time_ms=self._cfg.decay_time_ms)

        return _decay
