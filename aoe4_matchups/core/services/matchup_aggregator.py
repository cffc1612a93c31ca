"""Fan out head-to-head history requests for every opponent in a game."""

from __future__ import annotations

import asyncio
import logging

from aoe4_matchups.contracts import Game
from aoe4_matchups.core.ports import HistoryProviderPort

logger = logging.getLogger(__name__)

MatchUps = dict[int, list[Game]]


class MatchUpAggregator:
    """Collect the shared game history between a player and each opponent.

    One request per opponent is started before any is awaited. If any of
    them fails the others are cancelled and the failure propagates; there
    is no partial result.
    """

    def __init__(
        self,
        *,
        history_provider: HistoryProviderPort,
        history_limit: int | None = None,
    ) -> None:
        self._history_provider = history_provider
        self._history_limit = history_limit

    async def aggregate(self, player_id: int, game: Game) -> MatchUps:
        """Map each opponent id in ``game`` to its games against ``player_id``.

        Raises:
            PlayerNotFoundError: If ``player_id`` is not in ``game``
        """
        opponents = game.opponents_of(player_id)
        tasks: dict[int, asyncio.Task[list[Game]]] = {}
        for opponent in opponents:
            if opponent.id in tasks:
                continue
            tasks[opponent.id] = asyncio.create_task(
                self._history_provider.fetch_recent_games(
                    player_id, opponent.id, limit=self._history_limit
                )
            )

        logger.info(
            "Fetching head-to-head history for player %s against %d opponents in game %s",
            player_id,
            len(tasks),
            game.id,
        )
        try:
            await asyncio.gather(*tasks.values())
        except Exception:
            for task in tasks.values():
                task.cancel()
            # Drain so sibling failures are not reported as unretrieved
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            raise

        return {opponent_id: task.result() for opponent_id, task in tasks.items()}
