"""Port interface for match history retrieval.

Abstracts the AoE4 World REST API so services can be exercised against
in-memory fakes.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from aoe4_matchups.contracts import Game, User

logger = logging.getLogger(__name__)


class HistoryProviderPort(ABC):
    """Port interface for retrieving games and player profiles.

    Implementations never retry and never swallow failures: TransportError
    and DecodeError propagate to the caller, which owns the retry policy.
    """

    @abstractmethod
    async def fetch_recent_games(
        self,
        player_id: int,
        opponent_id: int | None = None,
        limit: int | None = None,
    ) -> list[Game]:
        """Retrieve games involving a player.

        Args:
            player_id: Profile id of the player
            opponent_id: Only return games that also involve this profile
            limit: Maximum number of games; None requests the full history

        Returns:
            Games ordered most recent first

        Raises:
            TransportError: If the request fails
            DecodeError: If the response cannot be decoded
        """
        pass

    @abstractmethod
    async def search_users(
        self, query: str, exact: bool = False, limit: int | None = None
    ) -> list[User]:
        """Search profiles by name."""
        pass

    @abstractmethod
    async def get_user_by_id(self, user_id: int) -> User:
        """Get a profile by id.

        Raises:
            UserNotFoundError: If the id does not exist
        """
        pass

    async def find_user_by_username(self, username: str) -> User | None:
        """Resolve a username, preferring an exact match over a fuzzy one.

        Returns:
            The first matching profile, or None when neither search finds one
        """
        users = await self.search_users(username, exact=True, limit=1)
        if users:
            return users[0]

        logger.debug("No exact match for %r, falling back to fuzzy search", username)
        users = await self.search_users(username, exact=False, limit=1)
        if users:
            return users[0]
        return None
