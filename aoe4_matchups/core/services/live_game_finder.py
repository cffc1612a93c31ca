"""Poll for a player's in-progress game and collect its match-ups.

State machine::

    INIT -> RUNNING -> FINISHED_SUCCESS
                    -> FAILED_NOT_FOUND
                    -> FAILED_ERROR

Attempts run strictly one after another on a single task. The deadline is
only checked between attempts, so a request in flight when it passes is
allowed to complete.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from aoe4_matchups.config.settings import Settings
from aoe4_matchups.contracts import Game, User
from aoe4_matchups.core.ports import ClockPort, HistoryProviderPort
from aoe4_matchups.core.services.matchup_aggregator import MatchUpAggregator, MatchUps
from aoe4_matchups.core.system_clock import SystemClock
from aoe4_matchups.errors import DecodeError, MatchUpError, TransportError

logger = logging.getLogger(__name__)


class LiveGameSearchStatus(str, Enum):
    INIT = "init"
    RUNNING = "running"
    FINISHED_SUCCESS = "finished_success"
    FAILED_NOT_FOUND = "failed_not_found"
    FAILED_ERROR = "failed_error"

    @property
    def is_terminal(self) -> bool:
        return self not in (LiveGameSearchStatus.INIT, LiveGameSearchStatus.RUNNING)


class LiveGameSearchConfig(BaseModel):
    """Timing of a live game search, in seconds."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    recency_window_seconds: float = Field(3.0, ge=0)
    deadline_seconds: float = Field(10.0, gt=0)
    retry_interval_seconds: float = Field(3.0, gt=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> LiveGameSearchConfig:
        return cls(
            recency_window_seconds=settings.live_game_recency_window_seconds,
            deadline_seconds=settings.live_game_deadline_seconds,
            retry_interval_seconds=settings.live_game_retry_interval_seconds,
        )


@dataclass(frozen=True)
class LiveGameSearchResult:
    """Terminal outcome of a live game search."""

    status: LiveGameSearchStatus
    attempts: int
    user: User | None = None
    game: Game | None = None
    matchups: MatchUps | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == LiveGameSearchStatus.FINISHED_SUCCESS


class LiveGameFinder:
    """Find a player's live game, then aggregate head-to-head history.

    A game qualifies when it is still being played and started no earlier
    than ``recency_window_seconds`` before this finder was constructed.

    Failures of the recent-game poll itself count as a non-qualifying
    attempt and are retried under the same deadline. Failures while loading
    the user or the match-ups end the search in FAILED_ERROR. ``game`` and
    ``matchups`` are only set once the search succeeds.
    """

    def __init__(
        self,
        *,
        user_id: int,
        history_provider: HistoryProviderPort,
        aggregator: MatchUpAggregator | None = None,
        config: LiveGameSearchConfig | None = None,
        clock: ClockPort | None = None,
    ) -> None:
        self.user_id = user_id
        self._history_provider = history_provider
        self._aggregator = aggregator or MatchUpAggregator(history_provider=history_provider)
        self.config = config or LiveGameSearchConfig()
        self._clock = clock or SystemClock()

        now = self._clock.now()
        self.find_games_after = now - timedelta(seconds=self.config.recency_window_seconds)
        self.fail_at = now + timedelta(seconds=self.config.deadline_seconds)

        self.status = LiveGameSearchStatus.INIT
        self.attempts = 0
        self.user: User | None = None
        self.game: Game | None = None
        self.matchups: MatchUps | None = None
        self.error: Exception | None = None
        self._task: asyncio.Task[LiveGameSearchResult] | None = None

    async def start(self) -> LiveGameSearchResult:
        """Run the search, or join the one already started.

        Every call returns the same result object and the search itself runs
        only once.
        """
        if self._task is None:
            self._transition(LiveGameSearchStatus.RUNNING)
            self._task = asyncio.create_task(self._run())
        return await asyncio.shield(self._task)

    def is_live_match(self, game: Game) -> bool:
        return game.is_playing and game.started_at >= self.find_games_after

    async def _run(self) -> LiveGameSearchResult:
        interval = self.config.retry_interval_seconds
        try:
            if self.user is None:
                self.user = await self._history_provider.get_user_by_id(self.user_id)

            while True:
                game = await self._find_recent_game()
                if game is not None:
                    matchups = await self._aggregator.aggregate(self.user_id, game)
                    self.game, self.matchups = game, matchups
                    self._transition(LiveGameSearchStatus.FINISHED_SUCCESS)
                    break

                now = self._clock.now()
                next_attempt_at = now + timedelta(seconds=interval)
                if now > self.fail_at or next_attempt_at > self.fail_at:
                    self._transition(LiveGameSearchStatus.FAILED_NOT_FOUND)
                    break
                logger.debug(
                    "No live game for player %s yet, retrying in %.1fs", self.user_id, interval
                )
                await self._clock.sleep(interval)
        except MatchUpError as exc:
            self.error = exc
            logger.error("Live game search for player %s aborted: %s", self.user_id, exc)
            self._transition(LiveGameSearchStatus.FAILED_ERROR)
        except Exception as exc:
            self.error = exc
            logger.error(
                "Live game search for player %s failed unexpectedly", self.user_id, exc_info=True
            )
            self._transition(LiveGameSearchStatus.FAILED_ERROR)

        return LiveGameSearchResult(
            status=self.status,
            attempts=self.attempts,
            user=self.user,
            game=self.game,
            matchups=self.matchups,
            error=self.error,
        )

    async def _find_recent_game(self) -> Game | None:
        self.attempts += 1
        try:
            recent_games = await self._history_provider.fetch_recent_games(self.user_id, limit=1)
        except (TransportError, DecodeError) as exc:
            logger.warning(
                "Recent game poll %d for player %s failed: %s", self.attempts, self.user_id, exc
            )
            return None

        if not recent_games:
            return None
        recent_game = recent_games[0]
        if not self.is_live_match(recent_game):
            logger.debug(
                "Game %s does not qualify (status=%s, started_at=%s)",
                recent_game.id,
                recent_game.status.value,
                recent_game.started_at.isoformat(),
            )
            return None
        return recent_game

    def _transition(self, status: LiveGameSearchStatus) -> None:
        logger.info(
            "Live game search for player %s: %s -> %s (attempts=%d)",
            self.user_id,
            self.status.value,
            status.value,
            self.attempts,
        )
        self.status = status
