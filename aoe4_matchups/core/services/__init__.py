"""Service layer implementing the match-up use cases.

Services connect ports (interfaces) with adapters (implementations),
providing high-level operations to the CLI.
"""

from aoe4_matchups.core.services.head_to_head import HeadToHeadRecord, summarize_matchups
from aoe4_matchups.core.services.live_game_finder import (
    LiveGameFinder,
    LiveGameSearchConfig,
    LiveGameSearchResult,
    LiveGameSearchStatus,
)
from aoe4_matchups.core.services.matchup_aggregator import MatchUpAggregator, MatchUps
from aoe4_matchups.core.services.matchup_service import LatestGameMatchUps, MatchUpService

__all__ = [
    "HeadToHeadRecord",
    "summarize_matchups",
    "LiveGameFinder",
    "LiveGameSearchConfig",
    "LiveGameSearchResult",
    "LiveGameSearchStatus",
    "MatchUpAggregator",
    "MatchUps",
    "LatestGameMatchUps",
    "MatchUpService",
]
