"""Pytest configuration and shared fixtures for the match-up scout tests.

Payload factories mirror the AoE4 World ``/players/{id}/games`` and
``/players/search`` response shapes. No test touches the network.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from aoe4_matchups.contracts import Game, User
from aoe4_matchups.core.ports import ClockPort

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)


def _iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def player_payload(
    profile_id: int,
    *,
    name: str | None = None,
    result: str | None = None,
    civilization: str = "english",
    rating: int | None = 1200,
    rating_diff: int | None = None,
    civilization_randomized: bool = False,
) -> dict[str, Any]:
    return {
        "profile_id": profile_id,
        "name": name or f"player{profile_id}",
        "result": result,
        "civilization": civilization,
        "civilization_randomized": civilization_randomized,
        "rating": rating,
        "rating_diff": rating_diff,
        "mmr": None,
        "input_type": "keyboard",
    }


def game_payload(
    *,
    game_id: int = 1000,
    teams: list[list[dict[str, Any]]] | None = None,
    started_at: datetime | None = None,
    kind: str = "rm_1v1",
    map_name: str = "Dry Arabia",
) -> dict[str, Any]:
    if teams is None:
        teams = [[player_payload(1)], [player_payload(2)]]
    started = started_at or NOW - timedelta(minutes=30)
    return {
        "game_id": game_id,
        "started_at": _iso(started),
        "updated_at": _iso(started + timedelta(minutes=1)),
        "duration": 1500,
        "map": map_name,
        "kind": kind,
        "leaderboard": "rm_solo",
        "mmr_leaderboard": "rm_solo",
        "season": 9,
        "server": "Europe",
        "patch": 12345,
        "average_rating": 1210.5,
        "average_mmr": None,
        "ongoing": False,
        "just_finished": False,
        "teams": [[{"player": p} for p in team] for team in teams],
    }


def user_payload(profile_id: int, *, name: str | None = None) -> dict[str, Any]:
    return {
        "profile_id": profile_id,
        "name": name or f"player{profile_id}",
        "steam_id": f"7656119{profile_id:010d}",
        "site_url": f"https://aoe4world.com/players/{profile_id}",
        "avatars": {
            "small": "https://avatars.example/small.jpg",
            "medium": "https://avatars.example/medium.jpg",
            "full": "https://avatars.example/full.jpg",
        },
        "country": "de",
        "social": {},
        "modes": {},
    }


class FakeClock(ClockPort):
    """Simulated clock; ``sleep`` advances time instantly."""

    def __init__(self, start: datetime = NOW) -> None:
        self.current = start
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def make_player_payload() -> Callable[..., dict[str, Any]]:
    return player_payload


@pytest.fixture
def make_game_payload() -> Callable[..., dict[str, Any]]:
    return game_payload


@pytest.fixture
def make_game() -> Callable[..., Game]:
    def _make(**kwargs: Any) -> Game:
        return Game.from_payload(game_payload(**kwargs))

    return _make


@pytest.fixture
def make_user() -> Callable[..., User]:
    def _make(profile_id: int, **kwargs: Any) -> User:
        return User.from_payload(user_payload(profile_id, **kwargs))

    return _make


@pytest.fixture
def make_user_payload() -> Callable[..., dict[str, Any]]:
    return user_payload


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
