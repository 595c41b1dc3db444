"""
spookbot.bot.core — Bot Instance & Cog Loader
==============================================

Defines :class:`SpookBot`, a ``commands.Bot`` subclass that:

1. Carries the shared config (``bot.cfg``), DB engine (``bot.engine``) and
   the :class:`~spookbot.services.game_service.GameContext` (``bot.game``)
   so every Cog reaches them via ``self.bot.*``.
2. Loads every Cog listed in :data:`EXTENSIONS`.
3. Syncs the slash-command tree on startup (guild-scoped for dev, global
   for production — controlled by the ``DEV_GUILD_ID`` env var).
"""

from __future__ import annotations

import logging
import os

import discord
from discord.ext import commands
from sqlalchemy import Engine

from spookbot.config import SpookConfig
from spookbot.services.game_service import GameContext

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "spookbot.bot.cogs.candy",
]


class SpookBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`SpookConfig` from ``config.yaml``.
    engine:
        The SQLAlchemy :class:`Engine`, disposed on shutdown.
    game:
        The process-wide :class:`GameContext`.
    """

    def __init__(self, cfg: SpookConfig, engine: Engine, game: GameContext) -> None:
        # Slash commands only: no message content or member intents needed.
        intents = discord.Intents.default()

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            description=cfg.bot_description,
        )

        self.cfg = cfg
        self.engine = engine
        self.game = game
        self._synced = False

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Called once before the bot connects to Discord.

        If any extension fails to load, we log the error but keep going.
        """
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Fired when the bot has connected and the cache is populated."""
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)

        # on_ready fires again after every reconnect; register commands once.
        if self._synced:
            return
        try:
            await self.sync_commands()
            self._synced = True
        except discord.HTTPException:
            logger.exception("Failed to register application commands")

    async def sync_commands(self) -> None:
        dev_guild_id = os.getenv("DEV_GUILD_ID")
        if dev_guild_id:
            guild = discord.Object(id=int(dev_guild_id))
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            logger.info("Synced %d commands to dev guild %s", len(synced), dev_guild_id)
        else:
            synced = await self.tree.sync()
            logger.info("Synced %d commands globally", len(synced))

    async def close(self) -> None:
        """Graceful shutdown — release pooled DB connections."""
        logger.info("Bot shutting down…")
        await super().close()
        self.engine.dispose()
