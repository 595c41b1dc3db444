"""
spookbot.engine.leaderboard — Top-N Ranking
============================================

Ordering is candy descending, then ``user_id`` ascending so equal balances
always come out in the same order.  Ranks are 1..n with no shared places.

Three distinct results: ``RANKED``, ``EMPTY`` (nobody has played yet) and
``UNAVAILABLE`` (the global query failed).  A failed query never shows up as
an empty or partial board.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field

from spookbot.constants import DEFAULT_TITLE, UNKNOWN_USERNAME
from spookbot.engine.profile import ProfileSnapshot

__all__ = [
    "Leaderboard",
    "LeaderboardEntry",
    "LeaderboardStatus",
    "rank_profiles",
    "sort_key",
    "unavailable",
]


class LeaderboardStatus(enum.StrEnum):
    RANKED = "ranked"
    EMPTY = "empty"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    rank: int
    username: str
    title: str
    candy: int


@dataclass(frozen=True, slots=True)
class Leaderboard:
    status: LeaderboardStatus
    entries: tuple[LeaderboardEntry, ...] = field(default_factory=tuple)
    reason: str | None = None

    @property
    def is_ranked(self) -> bool:
        return self.status is LeaderboardStatus.RANKED


def sort_key(profile: ProfileSnapshot) -> tuple[int, str]:
    return (-profile.candy, profile.user_id)


def rank_profiles(profiles: Iterable[ProfileSnapshot], n: int) -> Leaderboard:
    """Rank *profiles* and keep the top *n*."""
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")

    ordered = sorted(profiles, key=sort_key)[:n]
    if not ordered:
        return Leaderboard(status=LeaderboardStatus.EMPTY)

    entries = tuple(
        LeaderboardEntry(
            rank=rank,
            username=p.username or UNKNOWN_USERNAME,
            title=p.title or DEFAULT_TITLE,
            candy=p.candy,
        )
        for rank, p in enumerate(ordered, 1)
    )
    return Leaderboard(status=LeaderboardStatus.RANKED, entries=entries)


def unavailable(reason: str) -> Leaderboard:
    return Leaderboard(status=LeaderboardStatus.UNAVAILABLE, reason=reason)
