"""
spookbot.bot.cogs.candy — Trick-or-Treat Slash Commands
========================================================

- /trickortreat — roll for candy (2 h cooldown), private reply
- /inventory — candy balance, title, owned items, private reply
- /shop — title shop with affordability per item, private reply
- /topspook — global leaderboard, public reply

Each handler defers, runs its service function on a worker thread with the
configured store timeout, and edits the deferred reply.  A
:class:`~spookbot.errors.StoreUnavailable` becomes a labelled degraded
reply; anything else falls through to :meth:`Candy.cog_app_command_error`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

import discord
from discord import app_commands
from discord.ext import commands

from spookbot.database.engine import run_db_with_timeout
from spookbot.engine.leaderboard import unavailable
from spookbot.errors import CommandExecutionError, StoreUnavailable
from spookbot.services.embeds import (
    GENERIC_FAILURE_MESSAGE,
    build_inventory_embed,
    build_leaderboard_embed,
    build_shop_embed,
    build_store_unavailable_embed,
    build_trick_or_treat_embed,
    format_cooldown_message,
)
from spookbot.services.game_service import (
    trick_or_treat,
    view_inventory,
    view_leaderboard,
    view_shop,
)

if TYPE_CHECKING:
    from spookbot.bot.core import SpookBot

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Candy(commands.Cog, name="Candy"):
    """The trick-or-treat game."""

    def __init__(self, bot: SpookBot) -> None:
        self.bot = bot

    async def _call(self, func: Callable[..., T], *args) -> T:
        return await run_db_with_timeout(
            self.bot.cfg.store_timeout_seconds, func, self.bot.game, *args,
        )

    async def _store_down(self, interaction: discord.Interaction) -> None:
        await interaction.edit_original_response(embed=build_store_unavailable_embed())

    # -------------------------------------------------------------------
    # /trickortreat
    # -------------------------------------------------------------------
    @app_commands.command(
        name="trickortreat",
        description="Take a chance! Get candy, or get tricked...",
    )
    async def trickortreat(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        user = interaction.user
        try:
            result = await self._call(trick_or_treat, str(user.id), user.name)
        except StoreUnavailable:
            await self._store_down(interaction)
            return

        if not result.applied:
            await interaction.edit_original_response(
                content=format_cooldown_message(result.remaining_ms),
            )
            return

        embed = build_trick_or_treat_embed(result, self.bot.cfg.cooldown_hours)
        await interaction.edit_original_response(embed=embed)

    # -------------------------------------------------------------------
    # /inventory
    # -------------------------------------------------------------------
    @app_commands.command(
        name="inventory",
        description="Check your current candy balance and title.",
    )
    async def inventory(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        user = interaction.user
        try:
            view = await self._call(view_inventory, str(user.id))
        except StoreUnavailable:
            await self._store_down(interaction)
            return

        embed = build_inventory_embed(view, user.name, user.display_avatar.url)
        await interaction.edit_original_response(embed=embed)

    # -------------------------------------------------------------------
    # /shop
    # -------------------------------------------------------------------
    @app_commands.command(
        name="shop",
        description="View the spooky items you can buy with candy.",
    )
    async def shop(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            view = await self._call(view_shop, str(interaction.user.id))
        except StoreUnavailable:
            await self._store_down(interaction)
            return

        await interaction.edit_original_response(embed=build_shop_embed(view))

    # -------------------------------------------------------------------
    # /topspook
    # -------------------------------------------------------------------
    @app_commands.command(
        name="topspook",
        description="See the global leaderboard of the richest trick-or-treaters.",
    )
    async def topspook(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(thinking=True)
        # view_leaderboard already turns store errors into an UNAVAILABLE
        # board; a timeout on the worker thread is the one left to catch.
        try:
            board = await self._call(view_leaderboard)
        except StoreUnavailable as exc:
            board = unavailable(str(exc))

        embed = build_leaderboard_embed(board, self.bot.game.leaderboard_size)
        await interaction.edit_original_response(embed=embed)

    # -------------------------------------------------------------------
    # Dispatch-boundary error handler
    # -------------------------------------------------------------------
    async def cog_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError,
    ) -> None:
        """Log unexpected failures and send a generic apology."""
        command_name = interaction.command.name if interaction.command else "unknown"
        original = getattr(error, "original", error)
        failure = CommandExecutionError(command_name, original)
        logger.error("%s", failure, exc_info=original)

        try:
            if interaction.response.is_done():
                await interaction.edit_original_response(content=GENERIC_FAILURE_MESSAGE, embed=None)
            else:
                await interaction.response.send_message(GENERIC_FAILURE_MESSAGE, ephemeral=True)
        except discord.HTTPException:
            logger.exception("Could not deliver the failure notice for /%s", command_name)


async def setup(bot: SpookBot) -> None:
    await bot.add_cog(Candy(bot))
