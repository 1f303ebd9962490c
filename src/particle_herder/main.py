"""Executable entrypoint for Particle Herder."""

from __future__ import annotations

from pathlib import Path
import logging
import os

from .game import HerderGame

LOG_LEVEL_ENV = "PARTICLE_HERDER_LOG_LEVEL"


def configure_logging() -> None:
    """Send log records to stderr at the level named in the environment."""
    level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main() -> None:
    """Launch the game."""
    configure_logging()
    root = Path(__file__).resolve().parents[2]
    HerderGame(root=root).run()


if __name__ == "__main__":
    main()
