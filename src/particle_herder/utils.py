"""Shared constants, geometry and persistence helpers for Particle Herder."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Tuple
import json
import logging
import math
import random

logger = logging.getLogger(__name__)

ARENA_WIDTH = 480
ARENA_HEIGHT = 800
FPS = 60

BG_COLOR = (0, 0, 0)
WALL_COLOR = (255, 255, 255)
DEAD_ZONE_COLOR = (255, 0, 0)
ZONE_COLOR = (60, 140, 255)
PARTICLE_COLOR = (255, 255, 255)
TEXT_COLOR = (235, 240, 255)
SHADOW_COLOR = (15, 24, 45)
OVERLAY_COLOR = (0, 0, 0, 190)
SCORE_COLOR = (255, 233, 68)

Point = Tuple[float, float]

TAU = math.pi * 2

DATA_DIR = Path(".particle_herder")
SETTINGS_FILE = DATA_DIR / "settings.json"
SCORES_FILE = DATA_DIR / "scores.json"


def ensure_data_dirs() -> None:
    """Create the directory holding save files."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamp a value into a closed interval."""
    return max(minimum, min(maximum, value))


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    """Euclidean distance between two points."""
    return math.hypot(bx - ax, by - ay)


def angle_to(ax: float, ay: float, bx: float, by: float) -> float:
    """Bearing in radians from point a towards point b."""
    return math.atan2(by - ay, bx - ax)


def normalize_angle(angle: float) -> float:
    """Fold an angle difference into [-pi, pi] so it is the shortest turn."""
    while angle > math.pi:
        angle -= TAU
    while angle < -math.pi:
        angle += TAU
    return angle


def random_point_in_disc(rng: random.Random, cx: float, cy: float, radius: float) -> Point:
    """Pick a point inside a disc with a uniform angle and radial distance."""
    angle = rng.random() * TAU
    dist = rng.random() * radius
    return (cx + math.cos(angle) * dist, cy + math.sin(angle) * dist)


def load_json(path: Path, default: Any) -> Any:
    """Load JSON data, returning default when missing or malformed."""
    if not path.exists():
        return default
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Could not read %s (%s), using defaults", path, exc)
        return default


def save_json(path: Path, payload: Any) -> None:
    """Save JSON data with deterministic formatting."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)
