"""Wall clock implementation of ClockPort."""

import asyncio
from datetime import UTC, datetime

from aoe4_matchups.core.ports import ClockPort


class SystemClock(ClockPort):
    def now(self) -> datetime:
        return datetime.now(UTC)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
