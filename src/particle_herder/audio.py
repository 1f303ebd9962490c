"""Sound cue loading and playback."""

from __future__ import annotations

from pathlib import Path
import logging
import pygame

logger = logging.getLogger(__name__)

SOUND_FILES = {
    "tap": "tap.wav",
    "blocked": "blocked.wav",
    "explosion": "explosion.wav",
    "game_over": "game_over.wav",
}


class AudioManager:
    """Plays sound cues, staying silent when the mixer or assets are missing."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.sound_enabled = False
        self.sounds: dict[str, pygame.mixer.Sound] = {}
        try:
            pygame.mixer.init()
            self.sound_enabled = True
        except pygame.error as exc:
            logger.info("Audio disabled: %s", exc)
            self.sound_enabled = False

    def load_assets(self) -> None:
        """Load whichever cue files exist under assets/sounds."""
        if not self.sound_enabled:
            return
        folder = self.root / "assets" / "sounds"
        for key, filename in SOUND_FILES.items():
            path = folder / filename
            if not path.exists():
                continue
            try:
                self.sounds[key] = pygame.mixer.Sound(str(path))
            except pygame.error as exc:
                logger.warning("Could not load %s: %s", path, exc)

    def set_volume(self, master: float, sfx: float) -> None:
        """Apply current volume settings."""
        for sound in self.sounds.values():
            sound.set_volume(master * sfx)

    def play(self, key: str) -> None:
        """Play a named cue if it was loaded."""
        if not self.sound_enabled:
            return
        sound = self.sounds.get(key)
        if sound:
            sound.play()
