from __future__ import annotations

import random
from pathlib import Path

import pygame

from particle_herder.controls import TapOutcome, Viewport
from particle_herder.game import HerderGame
from particle_herder.particles import Particle
from particle_herder.round import RoundPhase
from particle_herder.scores import MemoryScoreBackend, ScoreStore


def _game(monkeypatch, tmp_path: Path) -> HerderGame:
    monkeypatch.chdir(tmp_path)
    return HerderGame(root=tmp_path, score_store=ScoreStore(MemoryScoreBackend()), rng=random.Random(4))


def _click(pos: tuple[int, int]) -> None:
    pygame.event.clear()
    pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=pos))


def test_integration_round_transition_to_game_over(monkeypatch, tmp_path: Path) -> None:
    game = _game(monkeypatch, tmp_path)
    game.round.start(0)
    game.round.particles[:] = [Particle(x=game.arena.width - 21, y=100, vx=10.0, vy=0.0)]

    assert game.step(100) == RoundPhase.EXPLODING
    game._render()
    assert game.step(900) == RoundPhase.ENDED
    game._render()
    assert game.round.final_score == 1
    assert game.round.leaderboard == [1]


def test_mouse_click_becomes_tap(monkeypatch, tmp_path: Path) -> None:
    game = _game(monkeypatch, tmp_path)
    game.round.start(game.now())
    _click((460, 60))
    assert game._handle_events()
    assert game.controller.last_tap is not None
    assert game.controller.last_tap.outcome == TapOutcome.STEERED
    assert len(game.round.zones) == 1
    game._render()


def test_click_after_game_over_restarts(monkeypatch, tmp_path: Path) -> None:
    game = _game(monkeypatch, tmp_path)
    game.round.start(0)
    game.round.particles[:] = [Particle(x=21, y=100, vx=-10.0, vy=0.0)]
    game.step(100)
    game.step(900)
    assert game.round.phase == RoundPhase.ENDED

    _click((10, 10))
    game._handle_events()
    assert game.round.phase == RoundPhase.RUNNING
    assert len(game.round.particles) == 1


def test_quit_event_stops_loop(monkeypatch, tmp_path: Path) -> None:
    game = _game(monkeypatch, tmp_path)
    pygame.event.clear()
    pygame.event.post(pygame.event.Event(pygame.QUIT))
    assert game._handle_events() is False


def test_volume_keys_adjust_master_volume(monkeypatch, tmp_path: Path) -> None:
    game = _game(monkeypatch, tmp_path)
    pygame.event.clear()
    pygame.event.post(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_MINUS))
    assert game._handle_events()
    assert abs(game.settings.master_volume - 0.75) < 1e-9


def test_finger_tap_maps_to_arena(monkeypatch, tmp_path: Path) -> None:
    game = _game(monkeypatch, tmp_path)
    game.round.start(game.now())
    pygame.event.clear()
    pygame.event.post(pygame.event.Event(pygame.FINGERDOWN, x=0.95, y=0.1, touch_id=0, finger_id=0))
    assert game._handle_events()
    tap = game.controller.last_tap
    assert tap is not None
    assert abs(tap.x - 456) < 1e-6
    assert abs(tap.y - 80) < 1e-6
    assert tap.outcome == TapOutcome.STEERED


def test_touch_mirrored_click_is_ignored(monkeypatch, tmp_path: Path) -> None:
    game = _game(monkeypatch, tmp_path)
    game.round.start(game.now())
    pygame.event.clear()
    pygame.event.post(pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(460, 60), touch=True))
    assert game._handle_events()
    assert game.controller.last_tap is None
    assert len(game.round.zones) == 0


def test_window_resize_rescales_arena(monkeypatch, tmp_path: Path) -> None:
    game = _game(monkeypatch, tmp_path)
    game.round.start(game.now())
    positions = [(p.x, p.y) for p in game.round.particles]

    pygame.event.clear()
    pygame.event.post(pygame.event.Event(pygame.VIDEORESIZE, w=600, h=1000, size=(600, 1000)))
    assert game._handle_events()

    assert (game.arena.width, game.arena.height) == (600, 1000)
    assert game.arena.dead_zone_radius == 150
    assert abs(game.round.zones.radius - 50) < 1e-9
    assert [(p.x, p.y) for p in game.round.particles] == positions
    assert game.screen.get_size() == (600, 1000)
    assert game.frame.get_size() == (600, 1000)
    assert game.controller.viewport == Viewport(0, 0, 600, 1000)
    game._render()
