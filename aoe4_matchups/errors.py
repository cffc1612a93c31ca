"""Exception hierarchy shared by the domain model, adapters and services."""

from __future__ import annotations


class MatchUpError(Exception):
    """Base exception for all match-up scouting failures."""

    pass


# ========================================================================
# History provider failures
# ========================================================================


class HistoryProviderError(MatchUpError):
    """Raised when the remote match history service cannot answer a request."""

    pass


class TransportError(HistoryProviderError):
    """Request failed at the network/HTTP layer."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(TransportError):
    def __init__(self, retry_after: int) -> None:
        super().__init__("Rate limit exceeded", status_code=429)
        self.retry_after = retry_after


class DecodeError(HistoryProviderError):
    """Response body did not match the expected shape."""

    pass


class UserNotFoundError(HistoryProviderError):
    """Raised when a direct profile id lookup yields nothing."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} does not exist")
        self.user_id = user_id


# ========================================================================
# Domain failures
# ========================================================================


class PlayerNotFoundError(MatchUpError):
    """Raised when a player id is absent from the game being queried."""

    def __init__(self, player_id: int, game_id: int) -> None:
        super().__init__(f"Player {player_id} is not in game {game_id}")
        self.player_id = player_id
        self.game_id = game_id


class GameNotFoundError(MatchUpError):
    """Raised when a player has no recorded games at all."""

    def __init__(self, player_id: int) -> None:
        super().__init__(f"No games found for player {player_id}")
        self.player_id = player_id
