from __future__ import annotations

from typing import Protocol

from .session_core import InteractionRecord, Outcome, SessionState, TargetKind, clamp01

HIT_POINTS = 100
WRONG_HIT_PENALTY = 50


class AudioCues(Protocol):
    """Fire-and-forget feedback sounds. Must not block the caller."""

    def play_success(self, volume: float) -> None: ...

    def play_miss(self, volume: float) -> None: ...


class SilentAudio:
    def play_success(self, volume: float) -> None:
        _ = volume

    def play_miss(self, volume: float) -> None:
        _ = volume


class InteractionEngine:
    """Resolves player actions and decay timeouts against live targets.

    Removal is the only mutation of a target, and both resolvers check that
    the target is still live first, so a click and a decay racing for the same
    id resolve exactly once.
    """

    def __init__(self, *, audio: AudioCues | None = None, volume: float = 0.5) -> None:
        self._audio: AudioCues = audio or SilentAudio()
        self._volume = clamp01(volume)

    @property
    def volume(self) -> float:
        return self._volume

    def set_volume(self, volume: float) -> None:
        self._volume = clamp01(volume)

    def hit(self, state: SessionState, target_id: int, now_ms: int) -> InteractionRecord | None:
        target = state.targets.pop(target_id, None)
        if target is None:
            return None

        reaction_ms = max(0, int(now_ms) - target.spawned_at_ms)
        if target.kind is TargetKind.GO:
            state.score += HIT_POINTS
            outcome = Outcome.HIT
        else:
            state.score = max(0, state.score - WRONG_HIT_PENALTY)
            outcome = Outcome.WRONG_HIT

        record = InteractionRecord(
            target_id=target.id,
            position=target.position,
            kind=target.kind,
            outcome=outcome,
            reaction_time_ms=reaction_ms,
        )
        state.history.append(record)

        if outcome is Outcome.HIT:
            self._audio.play_success(self._volume)
        else:
            self._audio.play_miss(self._volume)
        return record

    def expire(self, state: SessionState, target_id: int, *, decay_time_ms: int) -> InteractionRecord | None:
        """Remove a decayed target. Only go targets leave a timeout-miss record."""

        target = state.targets.pop(target_id, None)
        if target is None or target.kind is not TargetKind.GO:
            return None

        record = InteractionRecord(
            target_id=target.id,
            position=target.position,
            kind=target.kind,
            outcome=Outcome.TIMEOUT_MISS,
            reaction_time_ms=int(decay_time_ms),
        )
        state.history.append(record)
        return record
