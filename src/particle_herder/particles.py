"""Drifting particles and explosion debris."""

from __future__ import annotations

from dataclasses import dataclass
import math
import random

from .settings import Arena, GameConfig
from .utils import TAU, angle_to, clamp, distance, normalize_angle

# Taps closer than this to a particle have no usable bearing.
MIN_INFLUENCE_DISTANCE = 1.0


@dataclass(slots=True)
class Particle:
    """A herded particle. Moves in a straight line and wraps vertically."""

    x: float
    y: float
    vx: float
    vy: float

    @property
    def speed(self) -> float:
        return math.hypot(self.vx, self.vy)

    @property
    def heading(self) -> float:
        return math.atan2(self.vy, self.vx)

    def update(self, dt: float, arena: Arena) -> None:
        """Advance by dt seconds; leaving the top or bottom re-enters on the other side."""
        self.x += self.vx * dt
        self.y += self.vy * dt
        if self.y < 0 or self.y >= arena.height:
            self.y %= arena.height
            # float modulo of a tiny negative can land exactly on height
            if self.y >= arena.height:
                self.y = 0.0

    def check_wall_collision(self, arena: Arena, wall_margin: float) -> bool:
        """Return whether the particle touches the left or right wall."""
        return self.x <= wall_margin or self.x >= arena.width - wall_margin

    def apply_tap_influence(self, tap_x: float, tap_y: float, arena: Arena, turn_rate: float) -> float:
        """Turn the heading towards a tap, keeping speed. Returns the heading change."""
        dist = distance(self.x, self.y, tap_x, tap_y)
        if dist < MIN_INFLUENCE_DISTANCE:
            return 0.0

        strength = max(0.0, 1 - (dist / arena.influence_radius) ** 1.5)
        turn_factor = strength * turn_rate

        current = self.heading
        delta = normalize_angle(angle_to(self.x, self.y, tap_x, tap_y) - current) * turn_factor
        speed = self.speed
        self.vx = math.cos(current + delta) * speed
        self.vy = math.sin(current + delta) * speed
        return delta


@dataclass(slots=True)
class ExplosionParticle:
    """Short-lived debris thrown out when a particle hits a wall."""

    x: float
    y: float
    vx: float
    vy: float
    decay: float
    size: float
    gravity: float = 300.0
    life: float = 1.0

    def update(self, dt: float) -> bool:
        """Advance one frame and return whether the debris is still alive."""
        self.x += self.vx * dt
        self.y += self.vy * dt
        self.vy += self.gravity * dt
        self.life -= self.decay
        return self.life > 0

    @property
    def alive(self) -> bool:
        return self.life > 0

    def color(self) -> tuple[int, int, int, int]:
        return debris_color(self.life)


def debris_color(life: float) -> tuple[int, int, int, int]:
    """Yellow when fresh, fading to transparent orange."""
    alpha = clamp(life, 0.0, 1.0)
    return (255, int(150 + 105 * alpha), 0, int(255 * alpha))


def spawn_particle(x: float, y: float, config: GameConfig, rng: random.Random) -> Particle:
    """Create a particle with a random heading and a speed from the configured range."""
    low, high = config.particle_speed
    speed = low + rng.random() * (high - low)
    angle = rng.random() * TAU
    return Particle(x=x, y=y, vx=math.cos(angle) * speed, vy=math.sin(angle) * speed)


def spawn_explosion(x: float, y: float, config: GameConfig, rng: random.Random) -> list[ExplosionParticle]:
    """Create a burst of debris at a collision point."""
    min_count, max_count = config.explosion_count
    count = rng.randrange(min_count, max(min_count + 1, max_count))
    debris = []
    for _ in range(count):
        speed = rng.uniform(*config.explosion_speed)
        angle = rng.random() * TAU
        debris.append(
            ExplosionParticle(
                x=x,
                y=y,
                vx=math.cos(angle) * speed,
                vy=math.sin(angle) * speed,
                decay=rng.uniform(*config.explosion_decay),
                size=rng.uniform(*config.explosion_size),
                gravity=config.explosion_gravity,
            )
        )
    return debris
