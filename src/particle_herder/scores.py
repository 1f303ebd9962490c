"""High-score persistence."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Sequence
import logging
import math

from .utils import SCORES_FILE, load_json, save_json

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_SIZE = 5


class ScoreBackend(Protocol):
    """Where the leaderboard lives between sessions."""

    def load(self) -> list[float]:
        ...

    def save(self, scores: Sequence[float]) -> None:
        ...


@dataclass(slots=True)
class JsonScoreBackend:
    """Leaderboard stored as a JSON list of numbers."""

    path: Path = SCORES_FILE

    def load(self) -> list[float]:
        raw = load_json(self.path, [])
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed score file %s", self.path)
            return []
        return [value for value in raw if _is_score(value)]

    def save(self, scores: Sequence[float]) -> None:
        save_json(self.path, list(scores))


@dataclass(slots=True)
class MemoryScoreBackend:
    """In-process leaderboard for tests and headless runs."""

    scores: list[float] = field(default_factory=list)

    def load(self) -> list[float]:
        return list(self.scores)

    def save(self, scores: Sequence[float]) -> None:
        self.scores = list(scores)


def _is_score(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def score_from_elapsed(elapsed_ms: float, unit_ms: float = 100.0) -> int:
    """Convert survival time into whole score points."""
    return int(max(0.0, elapsed_ms) // unit_ms)


class ScoreStore:
    """Capped top-N leaderboard, highest first."""

    def __init__(self, backend: ScoreBackend | None = None, limit: int = DEFAULT_LEADERBOARD_SIZE) -> None:
        self.backend = backend if backend is not None else JsonScoreBackend()
        self.limit = limit

    def top_n(self) -> list[float]:
        """Return the current leaderboard."""
        return sorted(self.backend.load(), reverse=True)[: self.limit]

    def record(self, score: float) -> list[float]:
        """Add a score, keep the best ``limit`` entries and persist them."""
        scores = self.top_n()
        scores.append(score)
        scores.sort(reverse=True)
        scores = scores[: self.limit]
        try:
            self.backend.save(scores)
        except OSError as exc:
            logger.warning("Could not save high scores: %s", exc)
        else:
            logger.info("Recorded score %s, leaderboard %s", score, scores)
        return scores
