"""
Player profile contracts for the AoE4 World players endpoints.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field

from aoe4_matchups.errors import DecodeError

from .common import BaseContract


class User(BaseContract):
    """An AoE4 World profile, independent of any game."""

    id: int = Field(..., description="AoE4 World profile id")
    steam_id: str | None = Field(None, description="Steam id, absent for console players")
    username: str = Field(..., description="Current display name")
    avatar_url: str | None = Field(None, description="Medium size avatar image")
    country: str | None = Field(None, description="ISO country code")
    site_url: str | None = Field(None, description="Profile page on aoe4world.com")

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> User:
        """Decode a profile record.

        Raises:
            DecodeError: If the payload is missing fields or has the wrong shape
        """
        try:
            avatars = payload.get("avatars") or {}
            steam_id = payload.get("steam_id")
            return cls(
                id=payload["profile_id"],
                steam_id=str(steam_id) if steam_id is not None else None,
                username=payload["name"],
                avatar_url=avatars.get("medium"),
                country=payload.get("country"),
                site_url=payload.get("site_url"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise DecodeError(f"Malformed user payload: {exc!r}") from exc


def decode_user(payload: Mapping[str, Any]) -> User:
    return User.from_payload(payload)


def decode_users(payload: Mapping[str, Any]) -> list[User]:
    """Decode a ``{"players": [...]}`` search response body."""
    try:
        entries = payload["players"]
    except (KeyError, TypeError) as exc:
        raise DecodeError(f"Expected a 'players' array, got: {exc!r}") from exc
    if not isinstance(entries, list):
        raise DecodeError("'players' is not an array")
    return [User.from_payload(entry) for entry in entries]
