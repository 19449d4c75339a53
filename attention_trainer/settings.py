from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, replace
from typing import Any

from .difficulty import Difficulty
from .persistence import KeyValueStore

logger = logging.getLogger(__name__)

SETTINGS_KEY = "game-settings"

MIN_DURATION_S = 30
MAX_DURATION_S = 180
DURATION_STEP_S = 30
VOLUME_STEP = 0.1


def _as_float(value: object, fallback: float) -> float:
    try:
        result = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    return result if math.isfinite(result) else fallback


def _clamp(value: float, lo: float, hi: float) -> float:
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


def snap_duration(seconds: float) -> int:
    steps = round(_clamp(float(seconds), MIN_DURATION_S, MAX_DURATION_S) / DURATION_STEP_S)
    return int(steps * DURATION_STEP_S)


@dataclass(frozen=True, slots=True)
class GameSettings:
    duration_s: int = 60
    difficulty: Difficulty = Difficulty.NORMAL
    volume: float = 0.5
    distractor_enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "duration": int(self.duration_s),
            "difficulty": self.difficulty.value,
            "volume": float(self.volume),
            "distractorEnabled": bool(self.distractor_enabled),
        }

    @classmethod
    def from_dict(cls, data: object) -> "GameSettings":
        if not isinstance(data, dict):
            return cls()
        try:
            difficulty = Difficulty(str(data.get("difficulty", DEFAULT_SETTINGS.difficulty.value)))
        except ValueError:
            difficulty = DEFAULT_SETTINGS.difficulty
        distractor_enabled = data.get("distractorEnabled", DEFAULT_SETTINGS.distractor_enabled)
        if not isinstance(distractor_enabled, bool):
            distractor_enabled = DEFAULT_SETTINGS.distractor_enabled
        return cls(
            duration_s=snap_duration(_as_float(data.get("duration"), DEFAULT_SETTINGS.duration_s)),
            difficulty=difficulty,
            volume=round(_clamp(_as_float(data.get("volume"), DEFAULT_SETTINGS.volume), 0.0, 1.0), 2),
            distractor_enabled=distractor_enabled,
        )

    def with_duration_step(self, delta: int) -> "GameSettings":
        return replace(self, duration_s=snap_duration(self.duration_s + delta * DURATION_STEP_S))

    def with_volume_step(self, delta: int) -> "GameSettings":
        return replace(self, volume=round(_clamp(self.volume + delta * VOLUME_STEP, 0.0, 1.0), 2))

    def with_next_difficulty(self, delta: int) -> "GameSettings":
        levels = list(Difficulty)
        idx = (levels.index(self.difficulty) + delta) % len(levels)
        return replace(self, difficulty=levels[idx])

    def with_distractors_toggled(self) -> "GameSettings":
        return replace(self, distractor_enabled=not self.distractor_enabled)


DEFAULT_SETTINGS = GameSettings()


class SettingsStore:
    """Last-used menu settings, kept under one key for menu prefill."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def load(self) -> GameSettings:
        try:
            raw = self._kv.get(SETTINGS_KEY)
        except Exception as e:
            logger.warning("Could not read settings: %s", e)
            return DEFAULT_SETTINGS
        if raw is None:
            return DEFAULT_SETTINGS
        try:
            payload = json.loads(raw)
        except ValueError as e:
            logger.warning("Settings are corrupt, using defaults: %s", e)
            return DEFAULT_SETTINGS
        return GameSettings.from_dict(payload)

    def save(self, settings: GameSettings) -> None:
        try:
            self._kv.set(SETTINGS_KEY, json.dumps(settings.to_dict()))
        except Exception as e:
            logger.error("Could not save settings: %s", e)
