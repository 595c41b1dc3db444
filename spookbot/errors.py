"""
spookbot.errors — Error Taxonomy
=================================

Every failure the bot knows how to talk about has a class here.

* :class:`ConfigurationError` — fatal at startup, the process exits.
* :class:`AuthenticationError` — database sign-in failed; the store is
  degraded and every dependent command reports failure.
* :class:`StoreUnavailable` — a read, write or global query failed (or timed
  out).  Recovered at the cog with a clearly labelled degraded reply.
* :class:`CommandExecutionError` — anything unexpected inside a handler,
  caught at the dispatch boundary.
"""

from __future__ import annotations


class SpookError(Exception):
    """Base class for all spookbot errors."""


class ConfigurationError(SpookError):
    """Missing or invalid credentials, config file, or store settings."""


class AuthenticationError(SpookError):
    """The profile database rejected our connection or credentials."""


class StoreUnavailable(SpookError):
    """The profile store could not complete a read, write, or query."""


class CommandExecutionError(SpookError):
    """Unexpected failure inside a command handler."""

    def __init__(self, command_name: str, original: BaseException | None = None) -> None:
        self.command_name = command_name
        self.original = original
        super().__init__(f"/{command_name} failed: {original!r}")


class UnknownItemError(SpookError, KeyError):
    """A shop item id that is not in the catalog."""

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        super().__init__(item_id)

    def __str__(self) -> str:
        return f"Unknown shop item: {self.item_id!r}"


class PurchaseNotAvailable(SpookError, NotImplementedError):
    """The shop is display-only; buying items is not wired up yet."""
