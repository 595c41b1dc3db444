"""
spookbot.services.embeds — Discord embed builders
==================================================

All embed construction lives here so the cog only needs to supply data —
no layout concerns.
"""

from __future__ import annotations

import discord

from spookbot.constants import (
    CANDY_EMOJI,
    DEFAULT_TITLE,
    ERROR_COLOR,
    GHOST_EMOJI,
    HOURGLASS_EMOJI,
    INVENTORY_COLOR,
    LEADERBOARD_COLOR,
    PUMPKIN_EMOJI,
    RANK_BADGES,
    SHOP_COLOR,
    SKULL_EMOJI,
    hex_to_int,
)
from spookbot.engine.cooldown import format_remaining
from spookbot.engine.leaderboard import Leaderboard, LeaderboardStatus
from spookbot.engine.shop import Affordability
from spookbot.services.game_service import InventoryView, ShopView, TrickOrTreatResult

AFFORDABILITY_LABELS: dict[Affordability, str] = {
    Affordability.OWNED: "\u2705 OWNED",
    Affordability.BUYABLE: "\U0001f7e2 BUYABLE",
    Affordability.TOO_EXPENSIVE: "\U0001f534 TOO POOR",
}


def _color(hex_color: str) -> discord.Color:
    try:
        return discord.Color(hex_to_int(hex_color))
    except ValueError:
        return discord.Color.purple()


def format_cooldown_message(remaining_ms: int) -> str:
    return (
        f"{HOURGLASS_EMOJI} You must wait **{format_remaining(remaining_ms)}** before "
        "trick-or-treating again. The spooks are resting!"
    )


def build_trick_or_treat_embed(result: TrickOrTreatResult, cooldown_hours: float) -> discord.Embed:
    """Build the reply for an applied trick-or-treat."""
    outcome = result.outcome
    if outcome is None:
        raise ValueError("Cannot build an outcome embed for a blocked roll")

    embed = discord.Embed(
        title=f"{PUMPKIN_EMOJI} {outcome.title}",
        description=outcome.message,
        color=_color(outcome.color),
    )
    embed.add_field(name="Change", value=f"{outcome.candy_change:+d} Candy", inline=True)
    embed.add_field(name="Total Candy", value=str(result.profile.candy), inline=True)
    embed.set_footer(text=f"Next attempt available in {cooldown_hours:g} hours.")
    return embed


def build_inventory_embed(view: InventoryView, display_name: str, avatar_url: str) -> discord.Embed:
    profile = view.profile
    owned = [item.name for item in view.items]
    owned.extend(f"\u26a0\ufe0f Unknown item `{item_id}`" for item_id in view.unknown_ids)

    embed = discord.Embed(
        title=f"{GHOST_EMOJI} {display_name}'s Inventory",
        description=f"**Current Title:** `{profile.title or DEFAULT_TITLE}`",
        color=_color(INVENTORY_COLOR),
    )
    embed.set_thumbnail(url=avatar_url)
    embed.add_field(name="Candy Count", value=f"{profile.candy} {CANDY_EMOJI}", inline=True)
    embed.add_field(name="Items Owned", value=", ".join(owned) if owned else "None", inline=False)
    embed.set_footer(text="Check out the titles in the /shop!")
    return embed


def build_shop_embed(view: ShopView) -> discord.Embed:
    lines = [f"You have **{view.profile.candy} {CANDY_EMOJI}** to spend.\n"]
    for item, status in view.rows:
        lines.append(
            f"**{item.name}**\n"
            f"**Cost:** {item.cost} {CANDY_EMOJI}\n"
            f"**Title:** `{item.title}`\n"
            f"**Status:** {AFFORDABILITY_LABELS[status]}\n"
        )

    embed = discord.Embed(
        title="\U0001f6cd\ufe0f Spooky Title Shop",
        description="\n".join(lines),
        color=_color(SHOP_COLOR),
    )
    embed.set_footer(text="Purchases open soon. Keep collecting candy!")
    return embed


def build_leaderboard_embed(board: Leaderboard, size: int) -> discord.Embed:
    if board.status is LeaderboardStatus.UNAVAILABLE:
        description = (
            f"{SKULL_EMOJI} The candy ledger can't be reached right now, so the "
            "leaderboard is unavailable. Try again soon, and keep trick-or-treating!"
        )
    elif board.status is LeaderboardStatus.EMPTY:
        description = "The spooky competition is empty! Be the first to use /trickortreat!"
    else:
        lines = []
        for entry in board.entries:
            badge = (
                RANK_BADGES[entry.rank - 1]
                if entry.rank <= len(RANK_BADGES)
                else f"**#{entry.rank}**"
            )
            lines.append(
                f"{badge} {entry.username} (`{entry.title}`): **{entry.candy}** {CANDY_EMOJI}"
            )
        description = "\n".join(lines)

    embed = discord.Embed(
        title="\U0001f451 Global Spooky Leaderboard \U0001f451",
        description=description,
        color=_color(LEADERBOARD_COLOR),
    )
    embed.set_footer(text=f"The top {size} richest trick-or-treaters across all servers.")
    return embed


def build_store_unavailable_embed() -> discord.Embed:
    return discord.Embed(
        title=f"{SKULL_EMOJI} The Candy Vault Is Sealed",
        description=(
            "Your candy records can't be reached right now. "
            "Please try again in a few minutes."
        ),
        color=_color(ERROR_COLOR),
    )


GENERIC_FAILURE_MESSAGE = (
    f"{SKULL_EMOJI} A ghostly error occurred while processing your command. "
    "Please try again later."
)
