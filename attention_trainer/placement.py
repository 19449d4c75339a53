from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .session_core import Position, SeededRng, TargetKind, clamp01

logger = logging.getLogger(__name__)

PLACEMENT_PADDING_PX = 20
MAX_PLACEMENT_ATTEMPTS = 15
SEPARATION_FACTOR = 1.2


@dataclass(frozen=True, slots=True)
class Obstacle:
    position: Position
    kind: TargetKind


@dataclass(frozen=True, slots=True)
class Placement:
    position: Position
    kind: TargetKind


def choose_kind(rng: SeededRng, *, distractor_enabled: bool, distractor_chance: float) -> TargetKind:
    """Decide a target's kind before it is placed."""

    if not distractor_enabled:
        return TargetKind.GO
    return TargetKind.NO_GO if rng.random() < clamp01(distractor_chance) else TargetKind.GO


def min_separation_px(diameter_px: float) -> float:
    return SEPARATION_FACTOR * float(diameter_px)


def is_clear(candidate: Position, *, kind: TargetKind, diameter_px: float, obstacles: Iterable[Obstacle]) -> bool:
    """True when no obstacle of the opposite kind is closer than the separation.

    Same-kind neighbours are tolerated.
    """

    limit = min_separation_px(diameter_px)
    other = kind.opposite()
    for obstacle in obstacles:
        if obstacle.kind is other and candidate.distance_to(obstacle.position) < limit:
            return False
    return True


def place(
    *,
    rng: SeededRng,
    arena_width: float,
    arena_height: float,
    exclusion_top_margin_px: float,
    diameter_px: float,
    kind: TargetKind,
    obstacles: Sequence[Obstacle],
    max_attempts: int = MAX_PLACEMENT_ATTEMPTS,
) -> Position | None:
    """Sample a non-conflicting top-left position, or None when placement fails.

    Candidates are uniform over the band
    [pad, width - d - pad] x [margin + pad, height - d - pad].
    """

    pad = float(PLACEMENT_PADDING_PX)
    d = float(diameter_px)
    x_lo = pad
    x_hi = float(arena_width) - d - pad
    y_lo = float(exclusion_top_margin_px) + pad
    y_hi = float(arena_height) - d - pad
    if x_hi < x_lo or y_hi < y_lo:
        logger.debug("arena %sx%s too small for diameter %s", arena_width, arena_height, d)
        return None

    for _ in range(max(0, int(max_attempts))):
        candidate = Position(x=rng.uniform(x_lo, x_hi), y=rng.uniform(y_lo, y_hi))
        if is_clear(candidate, kind=kind, diameter_px=d, obstacles=obstacles):
            return candidate

    logger.debug("placement exhausted %d attempts for %s target", max_attempts, kind.value)
    return None


def place_batch(
    *,
    rng: SeededRng,
    arena_width: float,
    arena_height: float,
    exclusion_top_margin_px: float,
    diameter_px: float,
    kinds: Sequence[TargetKind],
    live: Sequence[Obstacle],
) -> list[Placement]:
    """Place one spawn tick's targets.

    Each placement sees the live targets plus those already accepted this
    tick. Failed units are skipped; the caller commits the returned list.
    """

    accepted: list[Placement] = []
    for kind in kinds:
        obstacles = [*live, *(Obstacle(p.position, p.kind) for p in accepted)]
        pos = place(
            rng=rng,
            arena_width=arena_width,
            arena_height=arena_height,
            exclusion_top_margin_px=exclusion_top_margin_px,
            diameter_px=diameter_px,
            kind=kind,
            obstacles=obstacles,
        )
        if pos is not None:
            accepted.append(Placement(position=pos, kind=kind))
    return accepted
