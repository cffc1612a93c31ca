"""AoE4 World API adapter over aiohttp.

Provides:
- Player games, optionally filtered to a shared opponent
- Player search (exact or fuzzy)
- Player profile lookup

Implements HistoryProviderPort with consistent async semantics and session
reuse. Failures are raised as TransportError / DecodeError and never retried.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from types import TracebackType
from typing import Any

import aiohttp

from aoe4_matchups.config.settings import get_settings
from aoe4_matchups.contracts import Game, User, decode_games, decode_user, decode_users
from aoe4_matchups.core.observability import trace_adapter
from aoe4_matchups.core.ports import HistoryProviderPort
from aoe4_matchups.errors import DecodeError, RateLimitError, TransportError, UserNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER_SECONDS = 60


def _parse_retry_after(value: str | None) -> int:
    """Seconds to wait from a Retry-After header (delay-seconds or HTTP-date)."""
    if not value:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        return max(0, int(value))
    except ValueError:
        pass
    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.warning("Unparseable Retry-After header %r", value)
        return DEFAULT_RETRY_AFTER_SECONDS
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=UTC)
    return max(0, int((retry_at - datetime.now(UTC)).total_seconds()))


class AoE4WorldAPIAdapter(HistoryProviderPort):
    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.aoe4world_api_base_url).rstrip("/")
        self._timeout_seconds = timeout_seconds or settings.aoe4world_http_timeout_seconds
        self._session: aiohttp.ClientSession | None = None
        self._session_loop: asyncio.AbstractEventLoop | None = None
        logger.info("AoE4 World API adapter initialized (base_url=%s)", self._base_url)

    async def __aenter__(self) -> AoE4WorldAPIAdapter:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        loop = asyncio.get_running_loop()
        needs_new_session = (
            self._session is None
            or self._session.closed
            or self._session_loop is not loop
        )
        if needs_new_session:
            if self._session is not None and not self._session.closed:
                try:
                    await self._session.close()
                except Exception:
                    logger.warning("Failed to close stale AoE4 World session", exc_info=True)
            timeout = aiohttp.ClientTimeout(total=self._timeout_seconds)
            self._session = aiohttp.ClientSession(
                timeout=timeout, headers={"Accept": "application/json"}
            )
            self._session_loop = loop
        return self._session

    async def close(self) -> None:
        try:
            if self._session is not None and not self._session.closed:
                await self._session.close()
        finally:
            self._session = None
            self._session_loop = None

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        session = await self._ensure_session()
        try:
            async with session.get(url, params=params) as resp:
                if resp.status == 429:
                    raise RateLimitError(_parse_retry_after(resp.headers.get("Retry-After")))
                if resp.status != 200:
                    body = (await resp.read()).decode("utf-8", errors="replace")
                    raise TransportError(
                        f"GET {path} returned {resp.status}: {body[:200]}",
                        status_code=resp.status,
                    )
                try:
                    return await resp.json()
                except (aiohttp.ContentTypeError, ValueError) as exc:
                    raise DecodeError(f"GET {path} returned a non-JSON body") from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(f"GET {path} failed: {exc!r}") from exc

    @trace_adapter
    async def fetch_recent_games(
        self,
        player_id: int,
        opponent_id: int | None = None,
        limit: int | None = None,
    ) -> list[Game]:
        params: dict[str, str] = {}
        if limit is not None and limit > 0:
            params["limit"] = str(limit)
        if opponent_id is not None and opponent_id > 0:
            params["opponent_profile_id"] = str(opponent_id)
        data = await self._get_json(f"/players/{player_id}/games", params or None)
        return decode_games(data)

    @trace_adapter
    async def search_users(
        self, query: str, exact: bool = False, limit: int | None = None
    ) -> list[User]:
        params = {"query": query}
        if exact:
            params["exact"] = "true"
        if limit is not None and limit > 0:
            params["limit"] = str(limit)
        data = await self._get_json("/players/search", params)
        return decode_users(data)

    @trace_adapter
    async def get_user_by_id(self, user_id: int) -> User:
        try:
            data = await self._get_json(f"/players/{user_id}")
        except TransportError as exc:
            if exc.status_code == 404:
                raise UserNotFoundError(user_id) from exc
            raise
        return decode_user(data)
