from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Difficulty(StrEnum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    EXPERT = "expert"


@dataclass(frozen=True, slots=True)
class DifficultyConfig:
    spawn_interval_ms: int
    target_diameter_px: int
    decay_time_ms: int
    distractor_chance: float  # only applies when distractor mode is enabled
    simultaneous_spawns: int


DIFFICULTY_CONFIG: dict[Difficulty, DifficultyConfig] = {
    Difficulty.EASY: DifficultyConfig(
        spawn_interval_ms=1500,
        target_diameter_px=120,
        decay_time_ms=3000,
        distractor_chance=0.0,
        simultaneous_spawns=1,
    ),
    Difficulty.NORMAL: DifficultyConfig(
        spawn_interval_ms=800,
        target_diameter_px=100,
        decay_time_ms=2000,
        distractor_chance=0.3,
        simultaneous_spawns=1,
    ),
    Difficulty.HARD: DifficultyConfig(
        spawn_interval_ms=500,
        target_diameter_px=80,
        decay_time_ms=1200,
        distractor_chance=0.5,
        simultaneous_spawns=1,
    ),
    Difficulty.EXPERT: DifficultyConfig(
        spawn_interval_ms=600,
        target_diameter_px=70,
        decay_time_ms=1200,
        distractor_chance=0.4,
        simultaneous_spawns=2,
    ),
}


def config_for(difficulty: Difficulty | str) -> DifficultyConfig:
    return DIFFICULTY_CONFIG[Difficulty(difficulty)]
