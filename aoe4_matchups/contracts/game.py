"""
Game and player data contracts for the AoE4 World games endpoint.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import Field, field_validator

from aoe4_matchups.errors import DecodeError, PlayerNotFoundError

from .common import (
    NO_RESULT_TEAM_ID,
    STILL_PLAYING_TEAM_ID,
    BaseContract,
    GameStatus,
    PlayerResult,
)


class Player(BaseContract):
    """A participant of one specific game."""

    id: int = Field(..., description="AoE4 World profile id")
    username: str = Field(..., description="Display name at the time of the game")
    team_id: int | None = Field(
        None, ge=0, description="Team index within the owning game, None when unassigned"
    )
    rating: int | None = Field(None, description="Rating before the game")
    rating_change: int | None = Field(None, description="Rating delta, absent while playing")
    civilization: str = Field(..., description="Chosen civilization")
    civilization_randomized: bool = Field(False)
    result: str | None = Field(None, description="Raw per-player result as reported upstream")

    @classmethod
    def from_payload(cls, team_id: int, payload: Mapping[str, Any]) -> Player:
        return cls(
            id=payload["profile_id"],
            username=payload["name"],
            team_id=team_id,
            rating=payload.get("rating"),
            rating_change=payload.get("rating_diff"),
            civilization=payload["civilization"],
            civilization_randomized=bool(payload.get("civilization_randomized") or False),
            result=payload.get("result"),
        )


class Game(BaseContract):
    """A single match with its players flattened in team order."""

    id: int = Field(..., description="AoE4 World game id")
    status: GameStatus
    duration: int | None = Field(None, ge=0, description="Duration in seconds")
    average_rating: float | None = Field(None)
    kind: str = Field(..., description="Game mode, e.g. rm_1v1")
    leaderboard: str | None = Field(None)
    patch_id: int | None = Field(None)
    season: int | None = Field(None)
    server: str | None = Field(None)
    team_id_won: int = Field(
        ..., description="Winning team index, STILL_PLAYING_TEAM_ID or NO_RESULT_TEAM_ID"
    )
    map_name: str | None = Field(None)
    players: tuple[Player, ...] = Field(default_factory=tuple)
    started_at: datetime
    updated_at: datetime | None = Field(None)

    @field_validator("started_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("team_id_won")
    @classmethod
    def _check_team_id_won(cls, value: int) -> int:
        if value < 0 and value not in (STILL_PLAYING_TEAM_ID, NO_RESULT_TEAM_ID):
            raise ValueError(f"team_id_won {value} is neither a team index nor a sentinel")
        return value

    @property
    def is_playing(self) -> bool:
        return self.status == GameStatus.PLAYING

    @property
    def winning_team(self) -> int | None:
        """Team index that won, or None while playing or for no-result games."""
        return self.team_id_won if self.team_id_won >= 0 else None

    def get_player_by_id(self, player_id: int) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def did_player_win(self, player: Player | int) -> bool:
        """Check whether a player won this game.

        The team is always resolved by identity inside this game, because a
        Player taken from another game carries that game's team numbering.

        Raises:
            PlayerNotFoundError: If no player with that id took part in this game
        """
        player_id = player if isinstance(player, int) else player.id
        found = self.get_player_by_id(player_id)
        if found is None:
            raise PlayerNotFoundError(player_id, self.id)
        return found.team_id == self.team_id_won

    def opponents_of(self, player_id: int) -> list[Player]:
        """Players on a different team than ``player_id``, in game order."""
        primary = self.get_player_by_id(player_id)
        if primary is None:
            raise PlayerNotFoundError(player_id, self.id)
        return [
            p for p in self.players if p.id != player_id and p.team_id != primary.team_id
        ]

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Game:
        """Decode one entry of the ``games`` array.

        The outcome comes from the first player, scanning teams in order,
        whose result is either "win" or "noresult". Players are not checked
        against each other.

        Raises:
            DecodeError: If the payload is missing fields or has the wrong shape
        """
        try:
            status = GameStatus.PLAYING
            team_id_won = STILL_PLAYING_TEAM_ID
            found_outcome = False
            players: list[Player] = []
            for team_index, team in enumerate(payload["teams"]):
                for entry in team:
                    player_payload = entry["player"]
                    players.append(Player.from_payload(team_index, player_payload))
                    if found_outcome:
                        continue
                    result = player_payload.get("result")
                    if result == PlayerResult.WIN.value:
                        found_outcome = True
                        status = GameStatus.FINISHED
                        team_id_won = team_index
                    elif result == PlayerResult.NO_RESULT.value:
                        found_outcome = True
                        status = GameStatus.FINISHED
                        team_id_won = NO_RESULT_TEAM_ID

            return cls(
                id=payload["game_id"],
                status=status,
                duration=payload.get("duration"),
                average_rating=payload.get("average_rating"),
                kind=payload["kind"],
                leaderboard=payload.get("leaderboard"),
                patch_id=payload.get("patch"),
                season=payload.get("season"),
                server=payload.get("server"),
                team_id_won=team_id_won,
                map_name=payload.get("map"),
                players=tuple(players),
                started_at=payload["started_at"],
                updated_at=payload.get("updated_at"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise DecodeError(f"Malformed game payload: {exc!r}") from exc


def decode_game(payload: Mapping[str, Any]) -> Game:
    return Game.from_payload(payload)


def decode_games(payload: Mapping[str, Any]) -> list[Game]:
    """Decode a ``{"games": [...]}`` response body, preserving its order."""
    try:
        entries = payload["games"]
    except (KeyError, TypeError) as exc:
        raise DecodeError(f"Expected a 'games' array, got: {exc!r}") from exc
    if not isinstance(entries, list):
        raise DecodeError("'games' is not an array")
    return [Game.from_payload(entry) for entry in entries]
