"""Settings persistence, gameplay tunables and arena geometry."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
import logging
import math

from .utils import ARENA_HEIGHT, ARENA_WIDTH, SETTINGS_FILE, ensure_data_dirs, load_json, save_json

logger = logging.getLogger(__name__)

Range = tuple[float, float]

# Divisors and cadences; zero is rejected like a negative value.
STRICTLY_POSITIVE = frozenset(
    {"spawn_interval_ms", "click_pause_ms", "influence_radius_factor", "score_unit_ms", "leaderboard_size"}
)


@dataclass(slots=True)
class GameConfig:
    """Gameplay tunables. Times are milliseconds, speeds px/s."""

    spawn_interval_ms: float = 700.0
    particle_size: float = 4.0
    wall_margin: float = 20.0
    dead_zone_fraction: float = 0.25
    cooldown_fraction: float = 1 / 12
    cooldown_duration_ms: float = 4000.0
    click_pause_ms: float = 300.0
    explosion_pause_ms: float = 800.0
    particle_speed: Range = (6.5, 26.0)
    explosion_speed: Range = (100.0, 300.0)
    explosion_count: tuple[int, int] = (50, 80)
    explosion_decay: Range = (0.01, 0.02)
    explosion_size: Range = (6.0, 14.0)
    explosion_gravity: float = 300.0
    influence_radius_factor: float = 0.4
    turn_rate: float = 0.45
    score_unit_ms: float = 100.0
    leaderboard_size: int = 5


@dataclass(slots=True)
class Arena:
    """Logical play area; the dead zone and cooldown radii scale with its width."""

    width: float
    height: float
    dead_zone_fraction: float = 0.25
    cooldown_fraction: float = 1 / 12
    influence_radius_factor: float = 0.4

    @classmethod
    def from_config(cls, width: float, height: float, config: GameConfig) -> "Arena":
        return cls(
            width=width,
            height=height,
            dead_zone_fraction=config.dead_zone_fraction,
            cooldown_fraction=config.cooldown_fraction,
            influence_radius_factor=config.influence_radius_factor,
        )

    @property
    def center(self) -> tuple[float, float]:
        return (self.width / 2, self.height / 2)

    @property
    def diagonal(self) -> float:
        return math.hypot(self.width, self.height)

    @property
    def dead_zone_radius(self) -> float:
        return self.width * self.dead_zone_fraction

    @property
    def cooldown_radius(self) -> float:
        return self.width * self.cooldown_fraction

    @property
    def influence_radius(self) -> float:
        """Distance at which a tap stops steering particles."""
        return self.diagonal * self.influence_radius_factor

    def resize(self, width: float, height: float) -> None:
        """Change the arena size; derived radii follow automatically."""
        self.width = width
        self.height = height


@dataclass(slots=True)
class DisplaySettings:
    """Display-related options."""

    fullscreen: bool = False
    show_zones: bool = True
    show_dead_zone: bool = True
    tap_pulse: bool = True


@dataclass(slots=True)
class HerderSettings:
    """Persistent settings for the game."""

    master_volume: float = 0.8
    sfx_volume: float = 0.8
    arena_width: int = ARENA_WIDTH
    arena_height: int = ARENA_HEIGHT
    display: DisplaySettings = field(default_factory=DisplaySettings)
    gameplay: GameConfig = field(default_factory=GameConfig)


class SettingsManager:
    """Load, save, and mutate game settings."""

    def __init__(self) -> None:
        ensure_data_dirs()
        self.settings = self.load()

    def load(self) -> HerderSettings:
        """Load settings from disk with safe defaults."""
        raw = load_json(SETTINGS_FILE, {})
        settings = HerderSettings()
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed settings file %s", SETTINGS_FILE)
            return settings

        settings.master_volume = self._unit(raw.get("master_volume"), settings.master_volume)
        settings.sfx_volume = self._unit(raw.get("sfx_volume"), settings.sfx_volume)
        settings.arena_width = self._positive_int(raw.get("arena_width"), settings.arena_width)
        settings.arena_height = self._positive_int(raw.get("arena_height"), settings.arena_height)

        display = raw.get("display", {})
        if isinstance(display, dict):
            settings.display.fullscreen = bool(display.get("fullscreen", settings.display.fullscreen))
            settings.display.show_zones = bool(display.get("show_zones", settings.display.show_zones))
            settings.display.show_dead_zone = bool(display.get("show_dead_zone", settings.display.show_dead_zone))
            settings.display.tap_pulse = bool(display.get("tap_pulse", settings.display.tap_pulse))

        gameplay = raw.get("gameplay", {})
        if isinstance(gameplay, dict):
            settings.gameplay = self._load_gameplay(gameplay)
        return settings

    @staticmethod
    def _unit(value: object, default: float) -> float:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return default
        if not math.isfinite(number):
            return default
        return max(0.0, min(1.0, number))

    @staticmethod
    def _positive_int(value: object, default: int) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError, OverflowError):
            return default
        return number if number > 0 else default

    @staticmethod
    def _load_gameplay(payload: dict) -> GameConfig:
        config = GameConfig()
        for spec in fields(GameConfig):
            if spec.name not in payload:
                continue
            default = getattr(config, spec.name)
            value = payload[spec.name]
            try:
                if isinstance(default, tuple):
                    low, high = (type(default[0])(item) for item in value)
                    if not (math.isfinite(low) and math.isfinite(high)):
                        raise ValueError("non-finite bound")
                    if low > high:
                        raise ValueError(f"empty range {low}..{high}")
                    parsed: object = (low, high)
                else:
                    parsed = type(default)(value)
                    if not math.isfinite(parsed):
                        raise ValueError("non-finite value")
                    if parsed < 0:
                        raise ValueError("negative value")
                    if parsed == 0 and spec.name in STRICTLY_POSITIVE:
                        raise ValueError("must be positive")
            except (TypeError, ValueError, OverflowError) as exc:
                logger.warning("Invalid gameplay setting %s=%r (%s), keeping %r", spec.name, value, exc, default)
                continue
            setattr(config, spec.name, parsed)
        return config

    def save(self) -> None:
        """Persist settings to disk."""
        payload = asdict(self.settings)
        save_json(SETTINGS_FILE, payload)

    def toggle_display(self, field_name: str) -> bool:
        """Flip a display flag and persist settings."""
        value = not getattr(self.settings.display, field_name)
        setattr(self.settings.display, field_name, value)
        self.save()
        return value

    def adjust_volume(self, field_name: str, delta: float) -> None:
        """Adjust a volume setting and save."""
        value = float(getattr(self.settings, field_name))
        setattr(self.settings, field_name, max(0.0, min(1.0, value + delta)))
        self.save()
