"""Pygame mixer feedback cues.

Sounds are synthesized once at start-up so playback never waits on assets;
``play`` on a mixer channel returns immediately.
"""

from __future__ import annotations

import logging
import math
import os
from array import array

import pygame

from .scoring import AudioCues, SilentAudio
from .session_core import clamp01

logger = logging.getLogger(__name__)

DISABLE_AUDIO_ENV = "ATTENTION_TRAINER_DISABLE_AUDIO"


class PygameAudioCues:
    _sample_rate = 22050
    _channels = 1
    _amp = 32767

    def __init__(self) -> None:
        self._available = False
        self._success_sound: pygame.mixer.Sound | None = None
        self._miss_sound: pygame.mixer.Sound | None = None
        self._channel: pygame.mixer.Channel | None = None

        try:
            if pygame.mixer.get_init() is None:
                pygame.mixer.init(frequency=self._sample_rate, size=-16, channels=1, buffer=512)
            # pygame.init() may already have opened the device with its own format.
            freq, _size, channels = pygame.mixer.get_init()
            self._sample_rate = int(freq)
            self._channels = max(1, int(channels))
            self._success_sound = self._build_success_sound()
            self._miss_sound = self._build_miss_sound()
            self._channel = pygame.mixer.Channel(0)
            self._available = True
        except (pygame.error, NotImplementedError, TypeError) as e:
            logger.warning("Audio unavailable, cues disabled: %s", e)
            self._available = False

    @property
    def available(self) -> bool:
        return self._available

    def play_success(self, volume: float) -> None:
        self._play(self._success_sound, volume=volume)

    def play_miss(self, volume: float) -> None:
        self._play(self._miss_sound, volume=volume)

    def stop(self) -> None:
        if self._channel is not None:
            self._channel.stop()

    def _play(self, sound: pygame.mixer.Sound | None, *, volume: float) -> None:
        if not self._available or sound is None:
            return
        assert self._channel is not None
        try:
            self._channel.set_volume(clamp01(volume))
            self._channel.play(sound)
        except pygame.error as e:
            logger.debug("cue playback failed: %s", e)

    def _build_success_sound(self) -> pygame.mixer.Sound:
        # Bright two-note ding: A5, then A6 a little later and softer.
        low = self._render_tone_pcm(880.0, 0.10, gain=0.5, wave="sine")
        high = self._render_tone_pcm(1760.0, 0.30, gain=0.4, wave="sine")
        pcm = self._mix_pcm(low, high, offset_s=0.05)
        return self._to_sound(pcm)

    def _build_miss_sound(self) -> pygame.mixer.Sound:
        # Dull low thud.
        pcm = self._render_tone_pcm(150.0, 0.20, gain=0.4, wave="triangle")
        return self._to_sound(pcm)

    def _to_sound(self, pcm: array[int]) -> pygame.mixer.Sound:
        if self._channels > 1:
            frames = array("h")
            for sample in pcm:
                frames.extend([sample] * self._channels)
            pcm = frames
        return pygame.mixer.Sound(buffer=pcm.tobytes())

    def _render_tone_pcm(self, frequency_hz: float, duration_s: float, *, gain: float, wave: str) -> array[int]:
        sample_count = max(1, int(self._sample_rate * duration_s))
        fade_n = max(1, int(self._sample_rate * 0.004))
        out = array("h")
        for idx in range(sample_count):
            # Quick attack, then an exponential fall towards ~1% like a pluck.
            envelope = min(1.0, idx / float(fade_n)) * math.exp(-4.6 * idx / float(sample_count))
            cycle = (float(frequency_hz) * idx / float(self._sample_rate)) % 1.0
            if wave == "triangle":
                value = 4.0 * abs(cycle - 0.5) - 1.0
            else:
                value = math.sin(2.0 * math.pi * cycle)
            sample = value * gain * envelope
            out.append(int(max(-1.0, min(1.0, sample)) * self._amp))
        return out

    def _mix_pcm(self, base: array[int], overlay: array[int], *, offset_s: float) -> array[int]:
        offset = int(self._sample_rate * offset_s)
        total = max(len(base), offset + len(overlay))
        out = array("h", [0] * total)
        for idx, sample in enumerate(base):
            out[idx] = sample
        for idx, sample in enumerate(overlay):
            mixed = out[offset + idx] + sample
            out[offset + idx] = max(-self._amp, min(self._amp, mixed))
        return out


def build_audio_cues() -> AudioCues:
    if os.environ.get(DISABLE_AUDIO_ENV, "0") == "1":
        return SilentAudio()
    if os.environ.get("SDL_AUDIODRIVER", "").strip().lower() == "dummy":
        return SilentAudio()
    cues = PygameAudioCues()
    if not cues.available:
        return SilentAudio()
    return cues
