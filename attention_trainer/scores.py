from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any

from .difficulty import Difficulty
from .persistence import KeyValueStore

logger = logging.getLogger(__name__)

SCORES_KEY = "attention-app-highscores"


@dataclass(slots=True)
class ScoreRecord:
    date: str  # YYYY-MM-DD, local calendar day
    difficulty: Difficulty
    distractor_enabled: bool
    best_score: int

    def key(self) -> tuple[str, Difficulty, bool]:
        return (self.date, self.difficulty, self.distractor_enabled)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "difficulty": self.difficulty.value,
            "distractorEnabled": bool(self.distractor_enabled),
            "score": int(self.best_score),
        }

    @classmethod
    def from_dict(cls, data: object) -> "ScoreRecord | None":
        if not isinstance(data, dict):
            return None
        try:
            difficulty = Difficulty(str(data.get("difficulty", "")))
            raw_score = float(data.get("score", 0))
        except (TypeError, ValueError):
            return None
        if not math.isfinite(raw_score):
            return None
        # A non-boolean flag cannot be filed under either mode.
        distractor_enabled = data.get("distractorEnabled", False)
        if not isinstance(distractor_enabled, bool):
            return None
        date = str(data.get("date", "")).strip()
        if date == "":
            return None
        return cls(
            date=date,
            difficulty=difficulty,
            distractor_enabled=distractor_enabled,
            best_score=max(0, int(raw_score)),
        )


class ScoreStore:
    """Per-day best-score ledger, one record per (date, difficulty, distractor mode).

    Scores are cosmetic, so the store favours availability: an unreadable
    ledger reads as empty and failed writes are logged, never raised.
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def records(self) -> list[ScoreRecord]:
        return self._load()

    def best_score(self, date: str, difficulty: Difficulty | str, distractor_enabled: bool) -> int:
        key = (str(date), Difficulty(difficulty), bool(distractor_enabled))
        for record in self._load():
            if record.key() == key:
                return record.best_score
        return 0

    def record_score(self, date: str, difficulty: Difficulty | str, distractor_enabled: bool, score: int) -> None:
        key = (str(date), Difficulty(difficulty), bool(distractor_enabled))
        score = max(0, int(score))
        records = self._load()
        for record in records:
            if record.key() == key:
                if score <= record.best_score:
                    return
                record.best_score = score
                break
        else:
            records.append(ScoreRecord(date=key[0], difficulty=key[1], distractor_enabled=key[2], best_score=score))
        self._save(records)

    def _load(self) -> list[ScoreRecord]:
        try:
            raw = self._kv.get(SCORES_KEY)
        except Exception as e:
            logger.warning("Could not read score ledger: %s", e)
            return []
        if raw is None:
            return []
        try:
            payload = json.loads(raw)
        except ValueError as e:
            logger.warning("Score ledger is corrupt, starting empty: %s", e)
            return []
        if not isinstance(payload, list):
            logger.warning("Score ledger has unexpected shape %s, starting empty", type(payload).__name__)
            return []

        records: list[ScoreRecord] = []
        for item in payload:
            record = ScoreRecord.from_dict(item)
            if record is not None:
                records.append(record)
        return records

    def _save(self, records: list[ScoreRecord]) -> None:
        try:
            self._kv.set(SCORES_KEY, json.dumps([r.to_dict() for r in records]))
        except Exception as e:
            logger.error("Could not save score ledger: %s", e)
