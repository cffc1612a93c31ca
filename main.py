"""
Main entry point for the AoE4 match-up scout.

Looks up a player by username or profile id, then prints the player's record
against every opponent of their live (``--live``) or most recent game.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TextIO

from aoe4_matchups.adapters import AoE4WorldAPIAdapter
from aoe4_matchups.config.settings import Settings, get_settings
from aoe4_matchups.contracts import Game, User
from aoe4_matchups.core.observability import configure_logging
from aoe4_matchups.core.services import (
    LiveGameSearchConfig,
    LiveGameSearchStatus,
    MatchUps,
    MatchUpService,
)
from aoe4_matchups.errors import MatchUpError

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    """Set up structured logging; keep aiohttp quiet unless in debug mode."""
    configure_logging(level=settings.app_log_level)
    if not settings.app_debug:
        logging.getLogger("aiohttp").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Show your history against the opponents of your current AoE4 game."
    )
    who = parser.add_mutually_exclusive_group(required=True)
    who.add_argument("-u", "--username", help="AoE4 World username to look up")
    who.add_argument("--user-id", type=int, help="AoE4 World profile id")
    parser.add_argument(
        "--live",
        action="store_true",
        help="Wait for a game that is starting right now instead of using the latest game",
    )
    return parser


def render_matchups(
    user: User,
    game: Game,
    matchups: MatchUps,
    service: MatchUpService,
    site_url: str,
    out: TextIO,
) -> None:
    """Write a plain text head-to-head summary."""
    site_url = site_url.rstrip("/")
    out.write(f"{user.username} - game {game.id} on {game.map_name or 'unknown map'}\n")
    for record in service.summarize(user.id, game, matchups):
        out.write(
            f"\nGames against {record.opponent_name} ({record.opponent_civilization}): "
            f"{record.wins}W {record.losses}L"
        )
        if record.no_results:
            out.write(f" {record.no_results} no result")
        out.write("\n")
        if not record.games:
            out.write("  -\n")
            continue
        for past_game in record.games:
            if past_game.is_playing:
                outcome = "playing"
            elif past_game.winning_team is None:
                outcome = "no result"
            else:
                outcome = "win" if past_game.did_player_win(user.id) else "loss"
            out.write(
                f"  {past_game.started_at:%Y-%m-%d %H:%M} {outcome:<9} "
                f"{site_url}/players/{user.id}/games/{past_game.id}\n"
            )


async def run(
    args: argparse.Namespace,
    service: MatchUpService,
    settings: Settings,
    out: TextIO | None = None,
) -> int:
    """Execute one lookup; returns the process exit code."""
    if out is None:
        out = sys.stdout
    if args.username is not None:
        user = await service.find_user_by_username(args.username)
        if user is None:
            logger.error("No player found for username %r", args.username)
            return 1
    else:
        user = await service.get_user_by_id(args.user_id)

    if args.live:
        result = await service.start_live_game_search(
            user.id, LiveGameSearchConfig.from_settings(settings)
        )
        if result.status != LiveGameSearchStatus.FINISHED_SUCCESS:
            logger.error(
                "Live game search for %s ended with %s after %d attempts",
                user.username,
                result.status.value,
                result.attempts,
            )
            return 1
        game, matchups = result.game, result.matchups
    else:
        latest = await service.latest_game_matchups(user.id)
        game, matchups = latest.game, latest.matchups

    render_matchups(user, game, matchups, service, settings.aoe4world_site_url, out)
    return 0


async def main(argv: list[str] | None = None) -> int:
    """Main async entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    async with AoE4WorldAPIAdapter() as adapter:
        service = MatchUpService(
            history_provider=adapter,
            history_limit=settings.matchup_history_limit,
        )
        try:
            return await run(args, service, settings)
        except MatchUpError as e:
            logger.error("Lookup failed: %s", e)
            return 1


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nStopped by user.")
        sys.exit(130)
