"""AoE4 World live-game match-up scout."""

__version__ = "0.1.0"
