"""Port interface for time and delays.

Lets polling services run against a simulated clock in tests.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Source of the current time plus a cooperative delay primitive."""

    @abstractmethod
    def now(self) -> datetime:
        """Current timezone-aware time."""
        pass

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task for ``seconds``."""
        pass
