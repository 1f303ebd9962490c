"""Round state machine: spawning, pause accounting, collisions and explosions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
import logging
import random

from .particles import ExplosionParticle, Particle, spawn_explosion, spawn_particle
from .scores import ScoreStore, score_from_elapsed
from .settings import Arena, GameConfig
from .utils import random_point_in_disc
from .zones import ZoneManager

logger = logging.getLogger(__name__)


class RoundPhase(Enum):
    """Lifecycle of a single round."""

    IDLE = auto()
    RUNNING = auto()
    EXPLODING = auto()
    ENDED = auto()


@dataclass(slots=True)
class PauseClock:
    """Accumulates the time frozen by taps.

    At most one pause is pending. A new pause folds the pending one's
    elapsed part into ``paused_total`` before starting over, so every pause
    is counted once and none longer than ``duration_ms``.
    """

    duration_ms: float
    paused_total: float = 0.0
    pause_started_at: float | None = None
    pause_count: int = 0

    def pending(self, now: float) -> float:
        """Paused time contributed so far by the pause in progress."""
        if self.pause_started_at is None:
            return 0.0
        return max(0.0, min(now - self.pause_started_at, self.duration_ms))

    def is_paused(self, now: float) -> bool:
        return self.pause_started_at is not None and now - self.pause_started_at < self.duration_ms

    def settle(self, now: float) -> None:
        """Close a pause whose full duration has run out."""
        if self.pause_started_at is not None and now - self.pause_started_at >= self.duration_ms:
            self.paused_total += self.duration_ms
            self.pause_started_at = None

    def begin(self, now: float) -> None:
        """Start a fresh full-length pause, folding in any pending one."""
        if self.pause_started_at is not None:
            self.paused_total += self.pending(now)
        self.pause_started_at = now
        self.pause_count += 1

    def total(self, now: float) -> float:
        return self.paused_total + self.pending(now)

    def reset(self) -> None:
        self.paused_total = 0.0
        self.pause_started_at = None
        self.pause_count = 0


@dataclass(slots=True, frozen=True)
class FrameSnapshot:
    """Read-only view of a round for renderers."""

    phase: RoundPhase
    width: float
    height: float
    wall_margin: float
    dead_zone: tuple[float, float, float]
    particle_size: float
    particles: tuple[tuple[float, float], ...]
    debris: tuple[tuple[float, float, float, tuple[int, int, int, int]], ...]
    zones: tuple[tuple[int, float, float, float], ...]
    score: int
    paused: bool
    leaderboard: tuple[float, ...]


class RoundStateMachine:
    """Owns every piece of mutable session state for a round.

    The frame driver calls :meth:`update` once per frame with a millisecond
    timestamp; taps mutate the same state between frames through
    :class:`~particle_herder.controls.InputController`.
    """

    def __init__(
        self,
        config: GameConfig,
        arena: Arena,
        score_store: ScoreStore | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self.arena = arena
        self.score_store = score_store
        self.rng = rng if rng is not None else random.Random()

        self.phase = RoundPhase.IDLE
        self.particles: list[Particle] = []
        self.debris: list[ExplosionParticle] = []
        self.zones = ZoneManager(radius=arena.cooldown_radius, duration_ms=config.cooldown_duration_ms)
        self.pause = PauseClock(duration_ms=config.click_pause_ms)

        self.started_at = 0.0
        self.last_spawn_at = 0.0
        self.last_frame_at = 0.0
        self.exploding_since: float | None = None
        self.elapsed_ms = 0.0
        self.collision_point: tuple[float, float] | None = None
        self.final_score: int | None = None
        self.leaderboard: list[float] = []

    @property
    def score(self) -> int:
        return score_from_elapsed(self.elapsed_ms, self.config.score_unit_ms)

    @property
    def is_running(self) -> bool:
        return self.phase == RoundPhase.RUNNING

    def start(self, now: float) -> None:
        """Reset all round state and seed the first particle."""
        self.particles.clear()
        self.debris.clear()
        self.zones.clear()
        self.zones.set_radius(self.arena.cooldown_radius)
        self.pause.reset()

        self.started_at = now
        self.last_spawn_at = now
        self.last_frame_at = now
        self.exploding_since = None
        self.elapsed_ms = 0.0
        self.collision_point = None
        self.final_score = None
        self.leaderboard = []

        self._spawn_in_dead_zone()
        self.phase = RoundPhase.RUNNING
        logger.info("Round started at %.0f ms", now)

    def restart(self, now: float) -> bool:
        """Start a new round if the current one is over."""
        if self.phase != RoundPhase.ENDED:
            return False
        self.start(now)
        return True

    def elapsed_at(self, now: float) -> float:
        """Survival time at ``now`` net of tap pauses."""
        return max(0.0, now - self.started_at - self.pause.total(now))

    def begin_pause(self, now: float) -> None:
        """Freeze elapsed-time accounting for one tap pause."""
        if not self.is_running:
            return
        self.pause.settle(now)
        self.pause.begin(now)

    def update(self, now: float) -> RoundPhase:
        """Advance one frame and return the resulting phase."""
        dt = max(0.0, (now - self.last_frame_at) / 1000.0)
        self.last_frame_at = now

        if self.phase == RoundPhase.RUNNING:
            self._update_running(now, dt)
        elif self.phase == RoundPhase.EXPLODING:
            self._update_exploding(now, dt)
        return self.phase

    def _update_running(self, now: float, dt: float) -> None:
        self.pause.settle(now)
        self.zones.purge_expired(now)
        self.elapsed_ms = max(self.elapsed_ms, self.elapsed_at(now))

        if now - self.last_spawn_at >= self.config.spawn_interval_ms:
            self._spawn_in_dead_zone()
            self.last_spawn_at = now

        for particle in self.particles:
            particle.update(dt, self.arena)
            if particle.check_wall_collision(self.arena, self.config.wall_margin):
                self._explode(particle, now)
                # the rest of the field stays frozen where it is
                break

    def _update_exploding(self, now: float, dt: float) -> None:
        self.debris = [piece for piece in self.debris if piece.update(dt)]
        if self.exploding_since is None or now - self.exploding_since >= self.config.explosion_pause_ms:
            self._end_round()

    def _spawn_in_dead_zone(self) -> Particle:
        cx, cy = self.arena.center
        x, y = random_point_in_disc(self.rng, cx, cy, self.arena.dead_zone_radius)
        particle = spawn_particle(x, y, self.config, self.rng)
        self.particles.append(particle)
        return particle

    def _explode(self, particle: Particle, now: float) -> None:
        self.collision_point = (particle.x, particle.y)
        self.debris = spawn_explosion(particle.x, particle.y, self.config, self.rng)
        self.exploding_since = now
        self.phase = RoundPhase.EXPLODING
        logger.info(
            "Wall hit at (%.1f, %.1f) after %.0f ms, %d debris",
            particle.x,
            particle.y,
            self.elapsed_ms,
            len(self.debris),
        )

    def _end_round(self) -> None:
        self.phase = RoundPhase.ENDED
        self.debris.clear()
        self.final_score = self.score
        if self.score_store is not None:
            self.leaderboard = self.score_store.record(self.final_score)
        logger.info("Round over with score %d after %d tap pauses", self.final_score, self.pause.pause_count)

    def resize(self, width: float, height: float) -> None:
        """Rescale the arena. Particle positions are kept as they are."""
        self.arena.resize(width, height)
        self.zones.set_radius(self.arena.cooldown_radius)
        logger.debug("Arena resized to %sx%s", width, height)

    def snapshot(self) -> FrameSnapshot:
        """Capture what a renderer needs for the current frame."""
        now = self.last_frame_at
        cx, cy = self.arena.center
        radius = self.zones.radius
        return FrameSnapshot(
            phase=self.phase,
            width=self.arena.width,
            height=self.arena.height,
            wall_margin=self.config.wall_margin,
            dead_zone=(cx, cy, self.arena.dead_zone_radius),
            particle_size=self.config.particle_size,
            particles=tuple((p.x, p.y) for p in self.particles),
            debris=tuple((d.x, d.y, d.size, d.color()) for d in self.debris if d.alive),
            zones=tuple((z.zone_id, z.x, z.y, radius) for z in self.zones.active(now)),
            score=self.score,
            paused=self.is_running and self.pause.is_paused(now),
            leaderboard=tuple(self.leaderboard),
        )
