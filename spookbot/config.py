"""
spookbot.config — YAML Configuration Loader
============================================

**Why this file exists:**
Secrets (``DISCORD_TOKEN``, ``DATABASE_URL``) come from the environment
(``.env`` via python-dotenv).  Everything else — the storage namespace, the
cooldown length, the leaderboard size, the store timeout — lives in
``config.yaml`` so it can be tuned without touching code.

Usage::

    from spookbot.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.app_namespace)     # "halloween-bot"
    print(cfg.cooldown_ms)       # 7200000
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from spookbot.constants import (
    COOLDOWN_HOURS,
    DEFAULT_NAMESPACE,
    LEADERBOARD_SIZE,
    MS_PER_HOUR,
    STORE_TIMEOUT_SECONDS,
)
from spookbot.errors import ConfigurationError

_PLACEHOLDER_TOKEN = "your-discord-bot-token-here"


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class SpookConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Storage
    app_namespace: str = DEFAULT_NAMESPACE

    # Gameplay
    cooldown_hours: float = COOLDOWN_HOURS
    leaderboard_size: int = LEADERBOARD_SIZE

    # Store I/O
    store_timeout_seconds: float = STORE_TIMEOUT_SECONDS

    # Discord
    bot_description: str = "Trick or treat! Collect candy, climb the leaderboard."

    @property
    def cooldown_ms(self) -> int:
        return int(self.cooldown_hours * MS_PER_HOUR)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> SpookConfig:
    """Read *path* and return a :class:`SpookConfig` instance.

    Keys absent from the file fall back to the dataclass defaults.

    Raises
    ------
    ConfigurationError
        If the file is missing, is not a YAML mapping, or a value has the
        wrong type or range.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    try:
        with open(config_path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"{config_path} is not valid YAML: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(f"{config_path} must contain a YAML mapping.")

    return parse_config(raw)


def parse_config(raw: dict) -> SpookConfig:
    """Validate a raw mapping and build a :class:`SpookConfig`."""
    defaults = SpookConfig()
    try:
        cfg = SpookConfig(
            app_namespace=str(raw.get("app_namespace", defaults.app_namespace)),
            cooldown_hours=float(raw.get("cooldown_hours", defaults.cooldown_hours)),
            leaderboard_size=int(raw.get("leaderboard_size", defaults.leaderboard_size)),
            store_timeout_seconds=float(
                raw.get("store_timeout_seconds", defaults.store_timeout_seconds)
            ),
            bot_description=str(raw.get("bot_description", defaults.bot_description)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration value: {exc}") from exc

    if not cfg.app_namespace.strip():
        raise ConfigurationError("app_namespace must not be empty.")
    if cfg.cooldown_hours < 0:
        raise ConfigurationError("cooldown_hours must be >= 0.")
    if cfg.leaderboard_size < 1:
        raise ConfigurationError("leaderboard_size must be >= 1.")
    if cfg.store_timeout_seconds <= 0:
        raise ConfigurationError("store_timeout_seconds must be > 0.")
    return cfg


def require_discord_token() -> str:
    """Return ``DISCORD_TOKEN`` or raise :class:`ConfigurationError`."""
    token = os.getenv("DISCORD_TOKEN")
    if not token or token == _PLACEHOLDER_TOKEN:
        raise ConfigurationError(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
    return token
