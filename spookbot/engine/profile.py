"""
spookbot.engine.profile — ProfileSnapshot
==========================================

The detached, immutable view of one player's profile that every pure
component (cooldown, reward, shop, leaderboard) works with.  The ORM row in
:mod:`spookbot.database.models` never leaves the session that loaded it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from spookbot.constants import DEFAULT_TITLE

__all__ = ["ProfileSnapshot", "default_profile"]


@dataclass(frozen=True, slots=True)
class ProfileSnapshot:
    """A player's candy profile at one point in time."""

    user_id: str
    username: str | None = None
    candy: int = 0
    title: str = DEFAULT_TITLE
    inventory: frozenset[str] = field(default_factory=frozenset)
    last_used: int = 0
    persisted: bool = False

    def owns(self, item_id: str) -> bool:
        return item_id in self.inventory

    def evolve(self, **changes) -> ProfileSnapshot:
        """Return a copy with *changes* applied."""
        return replace(self, **changes)


def default_profile(user_id: str) -> ProfileSnapshot:
    """The profile a player has before their first trick-or-treat."""
    return ProfileSnapshot(user_id=user_id)
