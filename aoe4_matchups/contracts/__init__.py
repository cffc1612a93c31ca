"""Contract models for decoded AoE4 World data."""

from .common import (
    NO_RESULT_TEAM_ID,
    STILL_PLAYING_TEAM_ID,
    GameStatus,
    PlayerResult,
)
from .game import Game, Player, decode_game, decode_games
from .user import User, decode_user, decode_users

__all__ = [
    "NO_RESULT_TEAM_ID",
    "STILL_PLAYING_TEAM_ID",
    "GameStatus",
    "PlayerResult",
    "Game",
    "Player",
    "User",
    "decode_game",
    "decode_games",
    "decode_user",
    "decode_users",
]
