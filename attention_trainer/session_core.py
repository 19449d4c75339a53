from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum, StrEnum


class SessionPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    ENDED = "ended"


class TargetKind(StrEnum):
    GO = "go"
    NO_GO = "no_go"

    def opposite(self) -> "TargetKind":
        return TargetKind.NO_GO if self is TargetKind.GO else TargetKind.GO


class Outcome(StrEnum):
    HIT = "hit"
    WRONG_HIT = "wrong_hit"
    TIMEOUT_MISS = "timeout_miss"


@dataclass(frozen=True, slots=True)
class Position:
    x: float
    y: float

    def distance_to(self, other: "Position") -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        return (dx * dx + dy * dy) ** 0.5


@dataclass(frozen=True, slots=True)
class Target:
    id: int
    position: Position  # top-left of the bounding square, arena-local px
    kind: TargetKind
    spawned_at_ms: int


@dataclass(frozen=True, slots=True)
class InteractionRecord:
    target_id: int
    position: Position
    kind: TargetKind
    outcome: Outcome
    reaction_time_ms: int

    @property
    def is_timeout(self) -> bool:
        return self.outcome is Outcome.TIMEOUT_MISS


@dataclass(slots=True)
class SessionState:
    """Mutable state of one session, owned by the controller.

    Recreated on every start; read-only once the phase is ENDED.
    """

    phase: SessionPhase = SessionPhase.IDLE
    score: int = 0
    time_remaining_ms: int = 0
    started_at_ms: int = 0
    targets: dict[int, Target] = field(default_factory=dict)
    history: list[InteractionRecord] = field(default_factory=list)
    next_target_id: int = 0

    def allocate_id(self) -> int:
        target_id = self.next_target_id
        self.next_target_id += 1
        return target_id


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """View model for the UI (pure data)."""

    phase: SessionPhase
    score: int
    time_remaining_ms: int
    targets: tuple[Target, ...]
    target_diameter_px: int
    best_score: int


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(int(seed))

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)


def clamp01(x: float) -> float:
    return 0.0 if x <= 0.0 else 1.0 if x >= 1.0 else float(x)
