"""
Common data types and base models for the AoE4 World contracts.
All models use Pydantic V2 and are immutable once decoded.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

# Reserved values for Game.team_id_won, never valid team indexes.
STILL_PLAYING_TEAM_ID = -1
NO_RESULT_TEAM_ID = -2


class GameStatus(str, Enum):
    """Lifecycle of a game as derived from its players' results."""

    PLAYING = "playing"
    FINISHED = "finished"


class PlayerResult(str, Enum):
    """Per-player result values reported by AoE4 World."""

    WIN = "win"
    LOSS = "loss"
    NO_RESULT = "noresult"
    UNKNOWN = "unknown"


class BaseContract(BaseModel):
    """Base model for all data contracts with common configuration."""

    model_config = ConfigDict(
        # Decoded records are read-only
        frozen=True,
        # Forbid extra fields to ensure data integrity
        extra="forbid",
    )
