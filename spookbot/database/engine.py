"""
spookbot.database.engine — Database Connection & Async Helper
==============================================================

**Why this file exists:**
Discord bots run on an ``asyncio`` event loop.  SQLAlchemy + psycopg2 is
**synchronous** — if we call the DB directly from an async context, the
entire bot freezes until the query returns.

The bridge:

    1. A slash command fires in Discord  (async world).
    2. The Cog calls ``await run_db_with_timeout(timeout, some_function, arg)``.
    3. The synchronous function runs on a **thread pool** via
       ``asyncio.to_thread()``.
    4. If it doesn't come back within *timeout* seconds the command gets a
       :class:`~spookbot.errors.StoreUnavailable` instead of hanging.

Usage::

    from spookbot.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    # Inside an async Cog method:
    profile = await run_db(store.get_profile, user_id)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spookbot.database.models import Base
from spookbot.errors import AuthenticationError, ConfigurationError, StoreUnavailable

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(url: str | None = None) -> Engine:
    """Build a SQLAlchemy :class:`Engine` from *url* or the ``DATABASE_URL`` env var.

    The connection pool is sized for a small community bot:
    * ``pool_size=5`` — five persistent connections.
    * ``max_overflow=10`` — up to 10 extra connections under load.
    * ``pool_timeout=10`` — fail after 10 s if no connection is available.
    * ``pool_recycle=3600`` — recycle connections after 1 hour.

    Raises
    ------
    ConfigurationError
        If no URL is given and ``DATABASE_URL`` is not set, or the URL
        cannot be parsed.
    """
    url = url or os.getenv("DATABASE_URL")
    if not url:
        raise ConfigurationError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a valid PostgreSQL URL."
        )

    try:
        engine = create_engine(
            url,
            echo=False,        # Set True for SQL debugging
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,   # Reconnect stale connections automatically
            pool_timeout=10,      # Fail after 10s instead of hanging forever
            pool_recycle=3600,    # Recycle connections after 1 hour
        )
    except (SQLAlchemyError, ValueError) as exc:
        raise ConfigurationError(f"Invalid DATABASE_URL: {exc}") from exc

    logger.info("Database engine created → %s", engine.url.host)
    return engine


# ---------------------------------------------------------------------------
# Startup checks
# ---------------------------------------------------------------------------
def verify_connection(engine: Engine) -> None:
    """Open one connection and run ``SELECT 1``.

    Raises
    ------
    AuthenticationError
        If the database refuses the connection (bad credentials, unknown
        host, permission denied).
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise AuthenticationError(f"Could not sign in to the profile database: {exc}") from exc
    logger.info("Database connection verified.")


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables defined in :mod:`spookbot.database.models`.

    This is safe to call on every startup — ``CREATE TABLE IF NOT EXISTS``
    under the hood.

    .. note::

        In production the schema is managed by Alembic (``alembic upgrade
        head``).  ``create_all`` is retained as a safety net for dev/test
        environments where Alembic may not have run.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that auto-commits on success and rolls back
    on exception.

    Usage::

        with get_session(engine) as session:
            session.add(Profile(namespace="halloween-bot", user_id="42"))
            # commit happens automatically on block exit
    """
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** database function on a background thread.

    Under the hood it calls :func:`asyncio.to_thread`, which schedules
    *func* on the default ``ThreadPoolExecutor`` so the bot's event loop
    is never blocked.
    """
    return await asyncio.to_thread(func, *args, **kwargs)


async def run_db_with_timeout(
    timeout: float, func: Callable[..., T], *args, **kwargs
) -> T:
    """Like :func:`run_db`, but give up after *timeout* seconds.

    The worker thread cannot be cancelled; its result is simply discarded.
    A write that eventually lands is still a single atomic update, so the
    user's balance stays consistent even if they saw a timeout.

    Raises
    ------
    StoreUnavailable
        If *func* does not return in time.
    """
    try:
        return await asyncio.wait_for(run_db(func, *args, **kwargs), timeout=timeout)
    except TimeoutError as exc:
        logger.warning(
            "Store call %s timed out after %.1fs",
            getattr(func, "__name__", repr(func)), timeout,
        )
        raise StoreUnavailable(f"Profile store did not answer within {timeout:g}s") from exc
