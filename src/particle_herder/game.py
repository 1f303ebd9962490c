"""pygame frame driver: events, per-frame updates and rendering."""

from __future__ import annotations

from pathlib import Path
import logging
import random
import pygame

from .audio import AudioManager
from .controls import InputController, TapOutcome, Viewport
from .round import FrameSnapshot, RoundPhase, RoundStateMachine
from .scores import ScoreStore
from .settings import Arena, HerderSettings, SettingsManager
from .utils import (
    BG_COLOR,
    DEAD_ZONE_COLOR,
    FPS,
    OVERLAY_COLOR,
    PARTICLE_COLOR,
    SCORE_COLOR,
    SHADOW_COLOR,
    TEXT_COLOR,
    WALL_COLOR,
    ZONE_COLOR,
    ensure_data_dirs,
)

logger = logging.getLogger(__name__)

TAP_PULSE_MS = 300
TAP_PULSE_RADIUS = 20


class HerderGame:
    """Runs the round state machine at display refresh rate and draws it."""

    def __init__(
        self,
        root: Path,
        score_store: ScoreStore | None = None,
        rng: random.Random | None = None,
    ) -> None:
        pygame.init()
        pygame.font.init()
        ensure_data_dirs()

        self.root = root
        self.settings_manager = SettingsManager()
        self.settings: HerderSettings = self.settings_manager.settings

        size = (self.settings.arena_width, self.settings.arena_height)
        flags = pygame.FULLSCREEN if self.settings.display.fullscreen else pygame.RESIZABLE
        self.screen = pygame.display.set_mode(size, flags)
        pygame.display.set_caption("Particle Herder")
        self.clock = pygame.time.Clock()

        self.title_font = pygame.font.SysFont("consolas", 44, bold=True)
        self.body_font = pygame.font.SysFont("consolas", 26, bold=True)
        self.small_font = pygame.font.SysFont("consolas", 18)

        config = self.settings.gameplay
        self.arena = Arena.from_config(size[0], size[1], config)
        self.round = RoundStateMachine(
            config=config,
            arena=self.arena,
            score_store=score_store if score_store is not None else ScoreStore(limit=config.leaderboard_size),
            rng=rng,
        )
        self.controller = InputController(self.round, Viewport(0, 0, *self.screen.get_size()))
        self.frame = pygame.Surface(size)

        self.audio = AudioManager(self.root)
        self.audio.load_assets()
        self.audio.set_volume(self.settings.master_volume, self.settings.sfx_volume)

    @staticmethod
    def now() -> float:
        return float(pygame.time.get_ticks())

    def run(self) -> None:
        """Main event/update/render loop."""
        logger.info("Starting with a %sx%s arena", self.arena.width, self.arena.height)
        self.round.start(self.now())
        running = True
        while running:
            self.clock.tick(FPS)
            running = self._handle_events()
            if not running:
                break
            self.step(self.now())
            self._render()

        pygame.quit()

    def step(self, now: float) -> RoundPhase:
        """Advance the round by one frame and react to phase changes."""
        previous = self.round.phase
        phase = self.round.update(now)
        if phase != previous:
            if phase == RoundPhase.EXPLODING:
                self.audio.play("explosion")
            elif phase == RoundPhase.ENDED:
                self.audio.play("game_over")
        return phase

    def _handle_events(self) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.VIDEORESIZE:
                self._resize(event.w, event.h)
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                self._handle_key(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                # SDL mirrors touches as mouse clicks; FINGERDOWN already covers them
                if getattr(event, "touch", False):
                    continue
                self._tap(event.pos)
            elif event.type == pygame.FINGERDOWN:
                width, height = self.screen.get_size()
                self._tap((event.x * width, event.y * height))
        return True

    def _handle_key(self, key: int) -> None:
        if key in (pygame.K_r, pygame.K_SPACE, pygame.K_RETURN):
            self.round.restart(self.now())
        elif key == pygame.K_z:
            self.settings_manager.toggle_display("show_zones")
        elif key == pygame.K_x:
            self.settings_manager.toggle_display("show_dead_zone")
        elif key in (pygame.K_MINUS, pygame.K_EQUALS):
            self.settings_manager.adjust_volume("master_volume", -0.05 if key == pygame.K_MINUS else 0.05)
            self.audio.set_volume(self.settings.master_volume, self.settings.sfx_volume)

    def _tap(self, position: tuple[float, float]) -> None:
        now = self.now()
        if self.round.phase == RoundPhase.ENDED:
            self.round.restart(now)
            return
        outcome = self.controller.handle_tap(position, now)
        if outcome == TapOutcome.STEERED:
            self.audio.play("tap")
        elif outcome == TapOutcome.COOLDOWN:
            self.audio.play("blocked")

    def _resize(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            return
        if not self.settings.display.fullscreen:
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
        self.round.resize(width, height)
        self.frame = pygame.Surface((width, height))
        self.controller.set_viewport(Viewport(0, 0, *self.screen.get_size()))

    def _render(self) -> None:
        snapshot = self.round.snapshot()
        self._render_arena(self.frame, snapshot)
        if self.settings.display.tap_pulse:
            self._render_tap_pulse(self.frame)
        self._render_hud(self.frame, snapshot)
        if snapshot.phase == RoundPhase.ENDED:
            self._render_game_over(self.frame, snapshot)

        if self.frame.get_size() == self.screen.get_size():
            self.screen.blit(self.frame, (0, 0))
        else:
            self.screen.blit(pygame.transform.smoothscale(self.frame, self.screen.get_size()), (0, 0))
        pygame.display.flip()

    def _render_arena(self, surface: pygame.Surface, snapshot: FrameSnapshot) -> None:
        surface.fill(BG_COLOR)
        width, height = int(snapshot.width), int(snapshot.height)
        margin = int(snapshot.wall_margin)
        pygame.draw.line(surface, WALL_COLOR, (margin, 0), (margin, height), 1)
        pygame.draw.line(surface, WALL_COLOR, (width - margin, 0), (width - margin, height), 1)

        if self.settings.display.show_dead_zone:
            cx, cy, radius = snapshot.dead_zone
            pygame.draw.circle(surface, DEAD_ZONE_COLOR, (int(cx), int(cy)), int(radius), 1)

        if self.settings.display.show_zones:
            for _zone_id, x, y, radius in snapshot.zones:
                pygame.draw.circle(surface, ZONE_COLOR, (int(x), int(y)), int(radius), 2)

        size = max(1, int(snapshot.particle_size))
        for x, y in snapshot.particles:
            rect = pygame.Rect(0, 0, size, size)
            rect.center = (int(x), int(y))
            glow = rect.inflate(size, size)
            pygame.draw.rect(surface, SHADOW_COLOR, glow)
            pygame.draw.rect(surface, PARTICLE_COLOR, rect)

        for x, y, piece_size, color in snapshot.debris:
            side = max(1, int(piece_size))
            chip = pygame.Surface((side, side), pygame.SRCALPHA)
            chip.fill(color)
            surface.blit(chip, (int(x - side / 2), int(y - side / 2)))

    def _render_tap_pulse(self, surface: pygame.Surface) -> None:
        tap = self.controller.last_tap
        if tap is None:
            return
        age = self.now() - tap.at
        if age < 0 or age >= TAP_PULSE_MS:
            return
        progress = age / TAP_PULSE_MS
        radius = int(TAP_PULSE_RADIUS * (0.5 + progress))
        ring = pygame.Surface((radius * 2 + 2, radius * 2 + 2), pygame.SRCALPHA)
        pygame.draw.circle(ring, (255, 255, 255, int(255 * (1 - progress))), (radius + 1, radius + 1), radius, 2)
        surface.blit(ring, (int(tap.x) - radius - 1, int(tap.y) - radius - 1))

    def _render_hud(self, surface: pygame.Surface, snapshot: FrameSnapshot) -> None:
        label = f"SCORE: {snapshot.score}"
        shadow = self.body_font.render(label, True, SHADOW_COLOR)
        text = self.body_font.render(label, True, SCORE_COLOR if snapshot.paused else TEXT_COLOR)
        x = surface.get_width() // 2 - text.get_width() // 2
        surface.blit(shadow, (x + 2, 14))
        surface.blit(text, (x, 12))

    def _render_game_over(self, surface: pygame.Surface, snapshot: FrameSnapshot) -> None:
        overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        overlay.fill(OVERLAY_COLOR)
        surface.blit(overlay, (0, 0))

        mid_x = surface.get_width() // 2
        y = surface.get_height() // 2 - 170
        title = self.title_font.render("GAME OVER", True, SCORE_COLOR)
        surface.blit(title, (mid_x - title.get_width() // 2, y))
        y += 70

        final = self.body_font.render(f"Score: {snapshot.score}", True, TEXT_COLOR)
        surface.blit(final, (mid_x - final.get_width() // 2, y))
        y += 55

        header = self.small_font.render("TOP SCORES:", True, SCORE_COLOR)
        surface.blit(header, (mid_x - header.get_width() // 2, y))
        for idx, value in enumerate(snapshot.leaderboard, start=1):
            y += 26
            line = self.small_font.render(f"{idx}. {int(value)}", True, TEXT_COLOR)
            surface.blit(line, (mid_x - line.get_width() // 2, y))

        prompt = self.small_font.render("Tap or press R to restart", True, TEXT_COLOR)
        surface.blit(prompt, (mid_x - prompt.get_width() // 2, y + 50))
