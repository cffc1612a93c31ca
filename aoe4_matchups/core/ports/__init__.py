"""Port interfaces for hexagonal architecture.

These ports define the contracts between the core services and external
adapters. All external dependencies must implement these interfaces.
"""

from aoe4_matchups.core.ports.clock_port import ClockPort
from aoe4_matchups.core.ports.history_provider_port import HistoryProviderPort

__all__ = [
    "ClockPort",
    "HistoryProviderPort",
]
