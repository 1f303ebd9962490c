"""Tap handling: display-to-arena mapping and the dead/cooldown zone rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging

from .round import RoundStateMachine
from .settings import Arena
from .utils import Point, distance

logger = logging.getLogger(__name__)


class TapOutcome(str, Enum):
    """What a tap ended up doing."""

    IGNORED = "ignored"
    DEAD_ZONE = "dead_zone"
    COOLDOWN = "cooldown"
    STEERED = "steered"


@dataclass(slots=True, frozen=True)
class Viewport:
    """Where the arena is drawn on the display, in display pixels."""

    left: float
    top: float
    width: float
    height: float

    def to_arena(self, position: Point, arena: Arena) -> Point:
        """Map a display position into arena coordinates."""
        scale_x = arena.width / self.width if self.width else 1.0
        scale_y = arena.height / self.height if self.height else 1.0
        return ((position[0] - self.left) * scale_x, (position[1] - self.top) * scale_y)


@dataclass(slots=True, frozen=True)
class TapRecord:
    """Most recent tap, kept for the pulse effect."""

    x: float
    y: float
    at: float
    outcome: TapOutcome


class InputController:
    """Turns taps into steering, pauses and cooldown zones."""

    def __init__(self, round_state: RoundStateMachine, viewport: Viewport | None = None) -> None:
        self.round = round_state
        self.viewport = viewport
        self.last_tap: TapRecord | None = None

    def set_viewport(self, viewport: Viewport) -> None:
        self.viewport = viewport

    def handle_tap(self, position: Point, now: float) -> TapOutcome:
        """Apply one tap given in display coordinates."""
        state = self.round
        if not state.is_running:
            return TapOutcome.IGNORED

        arena = state.arena
        if self.viewport is not None:
            x, y = self.viewport.to_arena(position, arena)
        else:
            x, y = position

        cx, cy = arena.center
        if distance(x, y, cx, cy) <= arena.dead_zone_radius:
            outcome = TapOutcome.DEAD_ZONE
        elif state.zones.is_inside(x, y, now):
            state.begin_pause(now)
            outcome = TapOutcome.COOLDOWN
        else:
            for particle in state.particles:
                particle.apply_tap_influence(x, y, arena, state.config.turn_rate)
            state.begin_pause(now)
            state.zones.create(x, y, now)
            outcome = TapOutcome.STEERED

        self.last_tap = TapRecord(x=x, y=y, at=now, outcome=outcome)
        logger.debug("Tap at (%.1f, %.1f): %s", x, y, outcome.value)
        return outcome
