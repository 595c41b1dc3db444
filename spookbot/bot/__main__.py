"""
spookbot.bot.__main__ — Entry point for ``python -m spookbot.bot``
==================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Create the SQLAlchemy engine and verify we can sign in.
4. Ensure tables exist.
5. Build the ProfileStore and GameContext.
6. Create the SpookBot and hand it config + engine + context.
7. Start the bot (blocking — runs the asyncio event loop).

A configuration problem stops the process.  A failed database sign-in
does not: the bot still comes up, but every command that needs the store
reports that it is unavailable.

Run with::

    python -m spookbot.bot
"""

from __future__ import annotations

import logging
import sys

import discord
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from spookbot.bot.core import SpookBot
from spookbot.config import load_config, require_discord_token
from spookbot.database.engine import create_db_engine, init_db, verify_connection
from spookbot.errors import AuthenticationError, ConfigurationError
from spookbot.services.game_service import GameContext
from spookbot.services.profile_store import ProfileStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("spookbot")


def main() -> None:
    """Bootstrap and run the spookbot."""

    # 1–2. Secrets and soft configuration.
    load_dotenv()
    try:
        token = require_discord_token()
        cfg = load_config()
        engine = create_db_engine()
    except ConfigurationError as exc:
        logger.critical("%s", exc)
        sys.exit(1)
    logger.info("Config loaded — namespace: %s", cfg.app_namespace)

    # 3–4. Database sign-in and schema.
    store_available = True
    try:
        verify_connection(engine)
        init_db(engine)
    except (AuthenticationError, SQLAlchemyError) as exc:
        logger.error("%s — commands will report the store as unavailable.", exc)
        store_available = False

    # 5. Shared context.
    store = ProfileStore(engine, cfg.app_namespace, available=store_available)
    game = GameContext(
        store=store,
        cooldown_ms=cfg.cooldown_ms,
        leaderboard_size=cfg.leaderboard_size,
    )

    # 6. Bot.
    bot = SpookBot(cfg=cfg, engine=engine, game=game)

    # 7. Run (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting spookbot…")
    try:
        bot.run(token, log_handler=None)
    except discord.LoginFailure:
        logger.critical("Discord rejected DISCORD_TOKEN.  Check the token in .env.")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
