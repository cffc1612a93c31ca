"""Head-to-head records derived from aggregated match-ups."""

from __future__ import annotations

from dataclasses import dataclass, field

from aoe4_matchups.contracts import NO_RESULT_TEAM_ID, Game
from aoe4_matchups.core.services.matchup_aggregator import MatchUps


@dataclass(frozen=True)
class HeadToHeadRecord:
    """Record of the primary player against one opponent."""

    opponent_id: int
    opponent_name: str
    opponent_civilization: str
    wins: int = 0
    losses: int = 0
    no_results: int = 0
    ongoing: int = 0
    games: tuple[Game, ...] = field(default_factory=tuple)

    @property
    def total(self) -> int:
        return len(self.games)

    @property
    def win_rate(self) -> float | None:
        decided = self.wins + self.losses
        if decided == 0:
            return None
        return self.wins / decided


def summarize_matchups(player_id: int, game: Game, matchups: MatchUps) -> list[HeadToHeadRecord]:
    """Build one record per opponent of ``player_id`` in ``game``, in game order.

    Opponents missing from ``matchups`` get an empty record.

    Raises:
        PlayerNotFoundError: If ``player_id`` is absent from ``game`` or from
            one of the historical games
    """
    records: list[HeadToHeadRecord] = []
    for opponent in game.opponents_of(player_id):
        history = tuple(matchups.get(opponent.id, ()))
        wins = losses = no_results = ongoing = 0
        for past_game in history:
            if past_game.is_playing:
                ongoing += 1
            elif past_game.team_id_won == NO_RESULT_TEAM_ID:
                no_results += 1
            elif past_game.did_player_win(player_id):
                wins += 1
            else:
                losses += 1
        records.append(
            HeadToHeadRecord(
                opponent_id=opponent.id,
                opponent_name=opponent.username,
                opponent_civilization=opponent.civilization,
                wins=wins,
                losses=losses,
                no_results=no_results,
                ongoing=ongoing,
                games=history,
            )
        )
    return records
