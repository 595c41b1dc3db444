"""
spookbot.constants — Shared Constants
======================================

Single source of truth for profile defaults, timing, and presentation
constants.  Import from here instead of duplicating in cogs and services.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Profile defaults
# ---------------------------------------------------------------------------
DEFAULT_TITLE = "New Trick-or-Treater"
DEFAULT_NAMESPACE = "halloween-bot"
UNKNOWN_USERNAME = "Mysterious User"

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------
MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE

COOLDOWN_HOURS = 2
COOLDOWN_MS = COOLDOWN_HOURS * MS_PER_HOUR  # 7 200 000

STORE_TIMEOUT_SECONDS = 10.0
LEADERBOARD_SIZE = 10

# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------
CANDY_EMOJI = "\U0001f36c"     # 🍬
PUMPKIN_EMOJI = "\U0001f383"   # 🎃
GHOST_EMOJI = "\U0001f47b"     # 👻
SKULL_EMOJI = "\U0001f480"     # 💀
HOURGLASS_EMOJI = "\u23f3"       # ⏳

RANK_BADGES: list[str] = ["\U0001f947", "\U0001f948", "\U0001f949"]  # 🥇🥈🥉

INVENTORY_COLOR = "#A020F0"
SHOP_COLOR = "#8b008b"
LEADERBOARD_COLOR = "#000000"
ERROR_COLOR = "#b22222"


def hex_to_int(color: str) -> int:
    """``"#ff6700"`` → ``0xff6700``."""
    return int(color.lstrip("#"), 16)
