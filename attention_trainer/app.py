"""Pygame UI shell for the attention trainer.

Screens:
- Menu (difficulty, duration, volume, distractor mode, today's best)
- Play field (HUD band on top, go/no-go discs below)
- Results (final score, daily best, hit/miss breakdown)

Timing, spawning, scoring and persistence live in attention_trainer/* (core modules).
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame

from .audio import build_audio_cues
from .clock import RealClock
from .persistence import KeyValueStore, SqliteKeyValueStore, default_db_path
from .scoring import AudioCues
from .session import DEFAULT_HUD_MARGIN_PX, SessionController, build_session
from .session_core import SessionPhase, SessionSnapshot, Target, TargetKind
from .settings import GameSettings, SettingsStore

WINDOW_SIZE = (960, 640)
TARGET_FPS = 60

BG = (3, 9, 78)
PANEL_BG = (8, 18, 104)
BORDER = (226, 236, 255)
TEXT_MAIN = (238, 245, 255)
TEXT_MUTED = (186, 200, 224)
ACTIVE_BG = (244, 248, 255)
ACTIVE_TEXT = (14, 26, 74)
GO_COLOR = (64, 214, 120)
NO_GO_COLOR = (232, 72, 72)
WARN_COLOR = (255, 120, 96)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: Callable[[], str]
    action: Callable[[], None]
    adjust: Callable[[int], None] | None = None


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def replace(self, screen: Screen) -> None:
        if len(self._screens) > 1:
            self._screens.pop()
        self._screens.append(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


def format_clock(ms: int) -> str:
    total_s = max(0, int(ms) + 999) // 1000
    return f"{total_s // 60}:{total_s % 60:02d}"


def target_at(snapshot: SessionSnapshot, pos: tuple[int, int]) -> Target | None:
    """Topmost target whose disc contains ``pos``; later spawns draw on top."""

    radius = snapshot.target_diameter_px / 2.0
    px, py = pos
    for target in reversed(snapshot.targets):
        cx = target.position.x + radius
        cy = target.position.y + radius
        if (px - cx) ** 2 + (py - cy) ** 2 <= radius * radius:
            return target
    return None


class SettingsMenuScreen:
    def __init__(
        self,
        app: App,
        *,
        controller: SessionController,
        settings_store: SettingsStore,
    ) -> None:
        self._app = app
        self._controller = controller
        self._settings_store = settings_store
        self._selected = 0
        self._title_font = pygame.font.Font(None, 42)
        self._item_font = pygame.font.Font(None, 32)
        self._hint_font = pygame.font.Font(None, 22)

        self._items = [
            MenuItem(lambda: "Start Session", self._start),
            MenuItem(
                lambda: f"Difficulty: {self._controller.settings.difficulty.value.title()}",
                lambda: self._change(self._controller.settings.with_next_difficulty(1)),
                lambda d: self._change(self._controller.settings.with_next_difficulty(d)),
            ),
            MenuItem(
                lambda: f"Duration: {self._controller.settings.duration_s}s",
                lambda: self._change(self._controller.settings.with_duration_step(1)),
                lambda d: self._change(self._controller.settings.with_duration_step(d)),
            ),
            MenuItem(
                lambda: f"Volume: {int(round(self._controller.settings.volume * 100))}%",
                lambda: self._change(self._controller.settings.with_volume_step(1)),
                lambda d: self._change(self._controller.settings.with_volume_step(d)),
            ),
            MenuItem(
                lambda: f"Distractors: {'On' if self._controller.settings.distractor_enabled else 'Off'}",
                lambda: self._change(self._controller.settings.with_distractors_toggled()),
                lambda _d: self._change(self._controller.settings.with_distractors_toggled()),
            ),
            MenuItem(lambda: "Quit", self._app.quit),
        ]

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        key = event.key
        if key in (pygame.K_UP, pygame.K_w):
            self._selected = (self._selected - 1) % len(self._items)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._selected = (self._selected + 1) % len(self._items)
        elif key in (pygame.K_LEFT, pygame.K_a, pygame.K_RIGHT, pygame.K_d):
            adjust = self._items[self._selected].adjust
            if adjust is not None:
                adjust(-1 if key in (pygame.K_LEFT, pygame.K_a) else 1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._items[self._selected].action()
        elif key == pygame.K_ESCAPE:
            self._app.quit()

    def _change(self, settings: GameSettings) -> None:
        if self._controller.apply_settings(settings):
            self._settings_store.save(settings)

    def _start(self) -> None:
        self._controller.start()
        self._app.push(PlayScreen(self._app, controller=self._controller))

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill(BG)

        frame = pygame.Rect(24, 24, max(260, w - 48), max(220, h - 48))
        pygame.draw.rect(surface, PANEL_BG, frame)
        pygame.draw.rect(surface, BORDER, frame, 2)

        title = self._title_font.render("Attention Training", True, TEXT_MAIN)
        surface.blit(title, title.get_rect(midtop=(frame.centerx, frame.y + 18)))

        s = self._controller.settings
        best = self._hint_font.render(
            f"Today's best ({s.difficulty.value}, distractors {'on' if s.distractor_enabled else 'off'}): "
            f"{self._controller.displayed_best}",
            True,
            TEXT_MUTED,
        )
        surface.blit(best, best.get_rect(midtop=(frame.centerx, frame.y + 62)))

        row_h = 42
        y = frame.y + 100
        for idx, item in enumerate(self._items):
            row = pygame.Rect(frame.x + 40, y, frame.w - 80, row_h - 6)
            selected = idx == self._selected
            pygame.draw.rect(surface, ACTIVE_BG if selected else (9, 20, 106), row)
            text = self._item_font.render(item.label(), True, ACTIVE_TEXT if selected else TEXT_MAIN)
            surface.blit(text, (row.x + 10, row.y + (row.h - text.get_height()) // 2))
            y += row_h

        foot = self._hint_font.render(
            "Up/Down: Select  |  Left/Right: Adjust  |  Enter: Activate  |  Esc: Quit",
            True,
            TEXT_MUTED,
        )
        surface.blit(foot, foot.get_rect(midbottom=(frame.centerx, frame.bottom - 10)))


class PlayScreen:
    def __init__(self, app: App, *, controller: SessionController) -> None:
        self._app = app
        self._controller = controller
        self._hud_font = pygame.font.Font(None, 44)
        self._label_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            self._controller.stop()
            return
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            snap = self._controller.snapshot()
            target = target_at(snap, event.pos)
            if target is None:
                self._controller.click_background()
            else:
                self._controller.hit(target.id)

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        self._controller.set_arena(w, h)
        self._controller.update()
        snap = self._controller.snapshot()

        if snap.phase is not SessionPhase.RUNNING:
            self._app.replace(ResultsScreen(self._app, controller=self._controller))
            return

        surface.fill(BG)
        radius = snap.target_diameter_px // 2
        for target in snap.targets:
            color = GO_COLOR if target.kind is TargetKind.GO else NO_GO_COLOR
            center = (int(target.position.x) + radius, int(target.position.y) + radius)
            pygame.draw.circle(surface, color, center, radius)
            pygame.draw.circle(surface, BORDER, center, radius, 2)

        hud = pygame.Rect(0, 0, w, DEFAULT_HUD_MARGIN_PX)
        pygame.draw.rect(surface, PANEL_BG, hud)
        pygame.draw.line(surface, BORDER, (0, hud.bottom), (w, hud.bottom), 1)

        score_label = self._label_font.render("SCORE", True, TEXT_MUTED)
        score = self._hud_font.render(str(snap.score), True, TEXT_MAIN)
        surface.blit(score_label, (24, 16))
        surface.blit(score, (24, 38))

        time_color = WARN_COLOR if snap.time_remaining_ms <= 10_000 else TEXT_MAIN
        time_label = self._label_font.render("TIME", True, TEXT_MUTED)
        time_text = self._hud_font.render(format_clock(snap.time_remaining_ms), True, time_color)
        surface.blit(time_label, time_label.get_rect(topright=(w - 24, 16)))
        surface.blit(time_text, time_text.get_rect(topright=(w - 24, 38)))


class ResultsScreen:
    def __init__(self, app: App, *, controller: SessionController) -> None:
        self._app = app
        self._controller = controller
        self._title_font = pygame.font.Font(None, 42)
        self._big_font = pygame.font.Font(None, 72)
        self._font = pygame.font.Font(None, 28)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return
        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_r):
            self._controller.start()
            self._app.replace(PlayScreen(self._app, controller=self._controller))
        elif event.key in (pygame.K_ESCAPE, pygame.K_BACKSPACE):
            self._controller.return_to_menu()
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, _h = surface.get_size()
        surface.fill(BG)
        summary = self._controller.summary()
        best = max(summary.score, self._controller.displayed_best)
        mean_rt = "n/a" if summary.mean_rt_ms is None else f"{summary.mean_rt_ms:.0f} ms"

        title = self._title_font.render("Session Complete", True, TEXT_MAIN)
        surface.blit(title, title.get_rect(midtop=(w // 2, 40)))
        score = self._big_font.render(str(summary.score), True, TEXT_MAIN)
        surface.blit(score, score.get_rect(midtop=(w // 2, 100)))

        lines = [
            f"Difficulty: {self._controller.settings.difficulty.value.title()}",
            f"Daily best: {best}",
            f"Hits: {summary.hits}   Wrong hits: {summary.wrong_hits}   Missed: {summary.timeout_misses}",
            f"Accuracy: {summary.accuracy * 100.0:.0f}%   Mean RT: {mean_rt}",
            "",
            "Enter: Retry  |  Esc: Menu",
        ]
        y = 190
        for line in lines:
            text = self._font.render(line, True, TEXT_MUTED)
            surface.blit(text, text.get_rect(midtop=(w // 2, y)))
            y += 34


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    kv: KeyValueStore | None = None,
    audio: AudioCues | None = None,
) -> int:
    pygame.init()

    pygame.display.set_caption("Attention Trainer")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    clock = pygame.time.Clock()

    app = App(surface=surface, font=font)

    store = kv if kv is not None else SqliteKeyValueStore(default_db_path())
    settings_store = SettingsStore(store)
    controller = build_session(
        clock=RealClock(),
        kv=store,
        seed=_new_seed(),
        settings=settings_store.load(),
        audio=audio if audio is not None else build_audio_cues(),
    )

    app.push(SettingsMenuScreen(app, controller=controller, settings_store=settings_store))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            clock.tick(TARGET_FPS)
    finally:
        controller.stop()
        pygame.quit()

    return 0
