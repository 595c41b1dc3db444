"""
spookbot.engine.cooldown — Cooldown Gate
=========================================

Pure functions: no clock, no DB.  The caller supplies ``now``.
All timestamps and durations are integer milliseconds since the epoch.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from spookbot.constants import COOLDOWN_MS, MS_PER_HOUR, MS_PER_MINUTE

__all__ = ["CooldownStatus", "check_cooldown", "format_remaining"]


@dataclass(frozen=True, slots=True)
class CooldownStatus:
    """Result of a cooldown check.  ``remaining_ms`` is 0 when allowed."""

    allowed: bool
    remaining_ms: int = 0

    @property
    def blocked(self) -> bool:
        return not self.allowed


ALLOWED = CooldownStatus(allowed=True)


def check_cooldown(last_used: int, now: int, cooldown_ms: int = COOLDOWN_MS) -> CooldownStatus:
    """Allowed iff ``last_used + cooldown_ms <= now``.

    A ``last_used`` of 0 means the action was never used.
    """
    ready_at = last_used + cooldown_ms
    if ready_at <= now:
        return ALLOWED
    return CooldownStatus(allowed=False, remaining_ms=ready_at - now)


def format_remaining(remaining_ms: int) -> str:
    """Render a wait as ``"<h>h <m>m"``.

    Hours are floored; minutes are taken from what is left after removing
    the whole hours and rounded **up**, so a one-second wait reads ``0h 1m``.
    """
    hours = remaining_ms // MS_PER_HOUR
    minutes = math.ceil((remaining_ms % MS_PER_HOUR) / MS_PER_MINUTE)
    return f"{hours}h {minutes}m"
