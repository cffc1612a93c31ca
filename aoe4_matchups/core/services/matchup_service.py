"""Match-up service: the entry points used by the CLI.

Bridges the history provider, the aggregator and the live game finder.
The player to investigate is always passed in, never read from global state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from aoe4_matchups.contracts import Game, User
from aoe4_matchups.core.ports import ClockPort, HistoryProviderPort
from aoe4_matchups.core.services.head_to_head import HeadToHeadRecord, summarize_matchups
from aoe4_matchups.core.services.live_game_finder import (
    LiveGameFinder,
    LiveGameSearchConfig,
    LiveGameSearchResult,
)
from aoe4_matchups.core.services.matchup_aggregator import MatchUpAggregator, MatchUps
from aoe4_matchups.core.system_clock import SystemClock
from aoe4_matchups.errors import GameNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LatestGameMatchUps:
    user: User
    game: Game
    matchups: MatchUps


class MatchUpService:
    """Production implementation of the match-up use cases."""

    def __init__(
        self,
        *,
        history_provider: HistoryProviderPort,
        history_limit: int | None = None,
        search_config: LiveGameSearchConfig | None = None,
        clock: ClockPort | None = None,
    ) -> None:
        self._history_provider = history_provider
        self._aggregator = MatchUpAggregator(
            history_provider=history_provider, history_limit=history_limit
        )
        self._search_config = search_config or LiveGameSearchConfig()
        self._clock = clock or SystemClock()

    async def find_user_by_username(self, username: str) -> User | None:
        return await self._history_provider.find_user_by_username(username)

    async def get_user_by_id(self, user_id: int) -> User:
        return await self._history_provider.get_user_by_id(user_id)

    async def aggregate_matchups(self, user_id: int, game: Game) -> MatchUps:
        return await self._aggregator.aggregate(user_id, game)

    def create_live_game_finder(
        self, user_id: int, config: LiveGameSearchConfig | None = None
    ) -> LiveGameFinder:
        return LiveGameFinder(
            user_id=user_id,
            history_provider=self._history_provider,
            aggregator=self._aggregator,
            config=config or self._search_config,
            clock=self._clock,
        )

    async def start_live_game_search(
        self, user_id: int, config: LiveGameSearchConfig | None = None
    ) -> LiveGameSearchResult:
        """Wait for the player's live game and return its match-ups.

        Never raises for a missing game or provider failure; inspect
        ``status`` and ``error`` on the result instead.
        """
        finder = self.create_live_game_finder(user_id, config)
        return await finder.start()

    async def latest_game_matchups(self, user_id: int) -> LatestGameMatchUps:
        """Match-ups for the player's most recent game, live or not.

        Raises:
            GameNotFoundError: If the player has never played a game
        """
        user = await self._history_provider.get_user_by_id(user_id)
        recent_games = await self._history_provider.fetch_recent_games(user_id, limit=1)
        if not recent_games:
            raise GameNotFoundError(user_id)
        game = recent_games[0]
        logger.info("Using latest game %s (%s) for player %s", game.id, game.status.value, user_id)
        matchups = await self._aggregator.aggregate(user_id, game)
        return LatestGameMatchUps(user=user, game=game, matchups=matchups)

    def summarize(self, user_id: int, game: Game, matchups: MatchUps) -> list[HeadToHeadRecord]:
        return summarize_matchups(user_id, game, matchups)
