"""MatchUpAggregator unit tests."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, call

import pytest

from aoe4_matchups.contracts import Game
from aoe4_matchups.core.ports import HistoryProviderPort
from aoe4_matchups.core.services.matchup_aggregator import MatchUpAggregator
from aoe4_matchups.errors import PlayerNotFoundError, TransportError


class _GatedProvider(HistoryProviderPort):
    """Records when each request is issued and completed.

    Requests only complete once ``expected`` requests are in flight, so a
    sequential aggregator would time out instead of passing.
    """

    def __init__(self, expected: int, histories: dict[int, list[Game]]) -> None:
        self.events: list[tuple[str, int]] = []
        self._expected = expected
        self._histories = histories
        self._all_issued = asyncio.Event()

    async def fetch_recent_games(self, player_id, opponent_id=None, limit=None):
        self.events.append(("issued", opponent_id))
        if sum(1 for kind, _ in self.events if kind == "issued") == self._expected:
            self._all_issued.set()
        await self._all_issued.wait()
        self.events.append(("completed", opponent_id))
        return self._histories.get(opponent_id, [])

    async def search_users(self, query, exact=False, limit=None):
        return []

    async def get_user_by_id(self, user_id):
        raise NotImplementedError


@pytest.fixture
def team_game(make_game, make_player_payload) -> Game:
    """2v2: players 1 and 3 against 2 and 4."""
    return make_game(
        game_id=500,
        teams=[
            [make_player_payload(1), make_player_payload(3)],
            [make_player_payload(2), make_player_payload(4)],
        ],
    )


@pytest.mark.asyncio
async def test_one_entry_per_opponent_excluding_self_and_teammates(team_game, make_game) -> None:
    history = [make_game(game_id=10), make_game(game_id=9)]
    provider = AsyncMock(spec=HistoryProviderPort)
    provider.fetch_recent_games = AsyncMock(
        side_effect=lambda player_id, opponent_id, limit=None: history if opponent_id == 2 else []
    )
    aggregator = MatchUpAggregator(history_provider=provider)

    matchups = await aggregator.aggregate(1, team_game)

    assert set(matchups) == {2, 4}
    assert [g.id for g in matchups[2]] == [10, 9]
    assert matchups[4] == []
    assert sorted(provider.fetch_recent_games.await_args_list, key=lambda c: c.args[1]) == [
        call(1, 2, limit=None),
        call(1, 4, limit=None),
    ]


@pytest.mark.asyncio
async def test_free_for_all_counts_every_other_player(make_game, make_player_payload) -> None:
    game = make_game(
        teams=[[make_player_payload(1)], [make_player_payload(2)], [make_player_payload(3)]]
    )
    provider = AsyncMock(spec=HistoryProviderPort)
    provider.fetch_recent_games = AsyncMock(return_value=[])

    matchups = await MatchUpAggregator(history_provider=provider).aggregate(3, game)

    assert set(matchups) == {1, 2}


@pytest.mark.asyncio
async def test_all_requests_issued_before_any_completes(team_game) -> None:
    provider = _GatedProvider(expected=2, histories={})
    aggregator = MatchUpAggregator(history_provider=provider)

    matchups = await asyncio.wait_for(aggregator.aggregate(3, team_game), timeout=1)

    assert set(matchups) == {2, 4}
    kinds = [kind for kind, _ in provider.events]
    assert kinds == ["issued", "issued", "completed", "completed"]


@pytest.mark.asyncio
async def test_history_limit_is_forwarded(team_game) -> None:
    provider = AsyncMock(spec=HistoryProviderPort)
    provider.fetch_recent_games = AsyncMock(return_value=[])

    await MatchUpAggregator(history_provider=provider, history_limit=20).aggregate(1, team_game)

    assert all(c.kwargs["limit"] == 20 for c in provider.fetch_recent_games.await_args_list)


@pytest.mark.asyncio
async def test_one_failing_opponent_fails_the_whole_aggregation(team_game) -> None:
    async def _fetch(player_id, opponent_id, limit=None):
        if opponent_id == 4:
            raise TransportError("boom", status_code=502)
        await asyncio.sleep(0)
        return []

    provider = AsyncMock(spec=HistoryProviderPort)
    provider.fetch_recent_games = AsyncMock(side_effect=_fetch)

    with pytest.raises(TransportError) as exc_info:
        await MatchUpAggregator(history_provider=provider).aggregate(1, team_game)

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_failure_cancels_pending_sibling_requests(team_game) -> None:
    cancelled: list[int] = []
    never = asyncio.Event()

    async def _fetch(player_id, opponent_id, limit=None):
        if opponent_id == 4:
            await asyncio.sleep(0)
            raise TransportError("boom", status_code=502)
        try:
            await never.wait()
        except asyncio.CancelledError:
            cancelled.append(opponent_id)
            raise
        return []

    provider = AsyncMock(spec=HistoryProviderPort)
    provider.fetch_recent_games = AsyncMock(side_effect=_fetch)

    with pytest.raises(TransportError):
        await asyncio.wait_for(
            MatchUpAggregator(history_provider=provider).aggregate(1, team_game), timeout=1
        )

    assert cancelled == [2]


@pytest.mark.asyncio
async def test_primary_player_missing_from_game_raises(team_game) -> None:
    provider = AsyncMock(spec=HistoryProviderPort)

    with pytest.raises(PlayerNotFoundError):
        await MatchUpAggregator(history_provider=provider).aggregate(999, team_game)

    provider.fetch_recent_games.assert_not_called()
