from __future__ import annotations

import logging
import math
import random

from particle_herder.particles import Particle
from particle_herder.round import PauseClock, RoundPhase, RoundStateMachine
from particle_herder.scores import MemoryScoreBackend, ScoreStore
from particle_herder.settings import Arena, GameConfig


def _round(backend: MemoryScoreBackend | None = None, seed: int = 7) -> RoundStateMachine:
    config = GameConfig()
    store = ScoreStore(backend if backend is not None else MemoryScoreBackend())
    return RoundStateMachine(config, Arena.from_config(400, 600, config), score_store=store, rng=random.Random(seed))


def _doomed(state: RoundStateMachine) -> None:
    """Replace the field with particles about to hit the left wall."""
    state.particles[:] = [
        Particle(x=21, y=100, vx=-10.0, vy=0.0),
        Particle(x=21, y=200, vx=-10.0, vy=0.0),
    ]


def test_pause_clock_caps_pending_pause() -> None:
    clock = PauseClock(duration_ms=300)
    clock.begin(1000)
    assert clock.total(1100) == 100
    assert clock.total(1500) == 300
    assert clock.is_paused(1200)
    assert not clock.is_paused(1300)
    clock.settle(1300)
    assert clock.paused_total == 300
    assert clock.pause_started_at is None


def test_pause_clock_folds_partial_pause_on_retap() -> None:
    clock = PauseClock(duration_ms=300)
    clock.begin(0)
    clock.begin(100)
    assert clock.paused_total == 100
    assert clock.total(100) == 100
    clock.settle(400)
    assert clock.paused_total == 400
    assert clock.pause_count == 2


def test_start_seeds_one_particle_in_dead_zone() -> None:
    state = _round()
    state.start(0)
    assert state.phase == RoundPhase.RUNNING
    assert len(state.particles) == 1
    cx, cy = state.arena.center
    particle = state.particles[0]
    assert math.hypot(particle.x - cx, particle.y - cy) <= state.arena.dead_zone_radius


def test_spawns_one_particle_after_spawn_interval() -> None:
    state = _round()
    state.start(0)
    for now in range(100, 700, 100):
        state.update(now)
    assert len(state.particles) == 1
    state.update(700)
    assert len(state.particles) == 2
    assert state.phase == RoundPhase.RUNNING


def test_elapsed_time_nets_out_pauses_and_never_decreases() -> None:
    state = _round()
    state.start(0)
    taps = {500, 600, 2000}
    previous = 0.0
    for now in range(20, 3001, 20):
        if now in taps:
            state.begin_pause(now)
        state.update(now)
        assert state.elapsed_ms >= previous
        previous = state.elapsed_ms
        if 600 < now < 900:
            assert state.elapsed_ms == 500

    assert state.phase == RoundPhase.RUNNING
    # 100 ms cut short by the second tap, then two full 300 ms pauses
    assert state.pause.paused_total == 700
    assert state.elapsed_ms == 2300
    assert state.score == 23


def test_collision_triggers_explosion_exactly_once() -> None:
    backend = MemoryScoreBackend()
    state = _round(backend)
    state.start(0)
    _doomed(state)

    assert state.update(100) == RoundPhase.EXPLODING
    assert state.collision_point == (20.0, 100)
    assert 50 <= len(state.debris) < 80
    # only the first colliding particle was advanced
    assert state.particles[1].x == 21

    assert state.update(200) == RoundPhase.EXPLODING
    assert state.update(899) == RoundPhase.EXPLODING
    assert state.update(900) == RoundPhase.ENDED
    assert state.update(1000) == RoundPhase.ENDED
    assert len(backend.scores) == 1


def test_debris_ages_while_field_stays_frozen() -> None:
    state = _round()
    state.start(0)
    _doomed(state)
    state.update(100)
    frozen = [(p.x, p.y) for p in state.particles]
    lives = [piece.life for piece in state.debris]

    state.update(116)
    assert [(p.x, p.y) for p in state.particles] == frozen
    assert all(piece.life < life for piece, life in zip(state.debris, lives))


def test_snapshot_carries_live_debris_colours() -> None:
    state = _round()
    state.start(0)
    _doomed(state)
    state.update(100)
    state.debris[0].life = 0.0

    debris = state.snapshot().debris
    assert len(debris) == len(state.debris) - 1
    x, y, size, color = debris[0]
    piece = state.debris[1]
    assert (x, y, size) == (piece.x, piece.y, piece.size)
    assert color == piece.color() == (255, 255, 0, 255)


def test_round_end_records_final_score() -> None:
    backend = MemoryScoreBackend(scores=[50, 3])
    state = _round(backend)
    state.start(0)
    state.update(650)
    _doomed(state)
    assert state.update(750) == RoundPhase.EXPLODING
    state.update(1550)
    assert state.phase == RoundPhase.ENDED
    assert state.final_score == 7
    assert state.leaderboard == [50, 7, 3]
    assert backend.scores == [50, 7, 3]
    assert state.debris == []


def test_round_end_logs_tap_pauses(caplog) -> None:
    state = _round()
    state.start(0)
    state.begin_pause(10)
    state.begin_pause(400)
    _doomed(state)
    with caplog.at_level(logging.INFO, logger="particle_herder.round"):
        state.update(800)
        state.update(1600)
    assert state.phase == RoundPhase.ENDED
    assert "after 2 tap pauses" in caplog.text


def test_restart_only_from_ended() -> None:
    state = _round()
    state.start(0)
    assert not state.restart(50)
    _doomed(state)
    state.update(100)
    state.update(900)
    state.zones.create(300, 300, now=900)

    assert state.restart(1000)
    assert state.phase == RoundPhase.RUNNING
    assert len(state.particles) == 1
    assert state.debris == []
    assert len(state.zones) == 0
    assert state.elapsed_ms == 0
    assert state.started_at == 1000
    assert state.pause.pause_started_at is None


def test_resize_rescales_radii_and_keeps_positions() -> None:
    state = _round()
    state.start(0)
    particle = state.particles[0]
    position = (particle.x, particle.y)
    state.resize(800, 1200)
    assert state.arena.dead_zone_radius == 200
    assert math.isclose(state.zones.radius, 800 / 12)
    assert (particle.x, particle.y) == position


def test_snapshot_reflects_round() -> None:
    state = _round()
    state.start(0)
    state.zones.create(50, 60, now=0)
    state.begin_pause(0)
    state.update(100)
    snapshot = state.snapshot()
    assert snapshot.phase == RoundPhase.RUNNING
    assert snapshot.width == 400
    assert snapshot.dead_zone == (200, 300, 100)
    assert len(snapshot.particles) == 1
    assert snapshot.zones[0][1:3] == (50, 60)
    assert snapshot.paused
    assert snapshot.score == 0
