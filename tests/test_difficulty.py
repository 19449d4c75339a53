from __future__ import annotations

import pytest

from attention_trainer.difficulty import DIFFICULTY_CONFIG, Difficulty, DifficultyConfig, config_for


def test_catalog_is_total_over_levels() -> None:
    for level in Difficulty:
        cfg = config_for(level)
        assert isinstance(cfg, DifficultyConfig)
        assert cfg.simultaneous_spawns >= 1
        assert 0.0 <= cfg.distractor_chance <= 1.0
        assert cfg.spawn_interval_ms > 0
        assert cfg.decay_time_ms > 0


def test_normal_level_values() -> None:
    cfg = config_for(Difficulty.NORMAL)
    assert cfg == DifficultyConfig(
        spawn_interval_ms=800,
        target_diameter_px=100,
        decay_time_ms=2000,
        distractor_chance=0.3,
        simultaneous_spawns=1,
    )


def test_lookup_by_string_value() -> None:
    assert config_for("expert") is DIFFICULTY_CONFIG[Difficulty.EXPERT]
    assert config_for("expert").simultaneous_spawns == 2


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError):
        config_for("impossible")
