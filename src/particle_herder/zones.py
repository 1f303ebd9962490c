"""Cooldown zones left behind by taps."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count

from .utils import distance


@dataclass(slots=True, frozen=True)
class CooldownZone:
    """Centre and creation time of a tap's cooldown area."""

    zone_id: int
    x: float
    y: float
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at


@dataclass(slots=True)
class ZoneManager:
    """Tracks time-limited circular cooldown zones.

    All zones share ``radius`` so a resize rescales the ones already placed.
    A zone is active while ``now - created_at <= duration_ms``; the boundary
    instant still counts.
    """

    radius: float
    duration_ms: float
    zones: list[CooldownZone] = field(default_factory=list)
    _ids: count = field(default_factory=lambda: count(1), repr=False)

    def create(self, x: float, y: float, now: float) -> CooldownZone:
        """Record a new zone centred on a tap."""
        zone = CooldownZone(zone_id=next(self._ids), x=x, y=y, created_at=now)
        self.zones.append(zone)
        return zone

    def is_active(self, zone: CooldownZone, now: float) -> bool:
        return zone.age(now) <= self.duration_ms

    def is_inside(self, x: float, y: float, now: float) -> bool:
        """Return whether a point lies in any zone that has not expired."""
        for zone in self.zones:
            if not self.is_active(zone, now):
                continue
            if distance(zone.x, zone.y, x, y) <= self.radius:
                return True
        return False

    def active(self, now: float) -> list[CooldownZone]:
        return [zone for zone in self.zones if self.is_active(zone, now)]

    def purge_expired(self, now: float) -> list[CooldownZone]:
        """Drop expired zones and return them so visuals can be released."""
        expired = [zone for zone in self.zones if not self.is_active(zone, now)]
        if expired:
            self.zones = self.active(now)
        return expired

    def set_radius(self, radius: float) -> None:
        self.radius = radius

    def clear(self) -> None:
        self.zones.clear()

    def __len__(self) -> int:
        return len(self.zones)
