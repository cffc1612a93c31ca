"""Adapter implementations for external services."""

from .aoe4world_api import AoE4WorldAPIAdapter

__all__ = ["AoE4WorldAPIAdapter"]
