"""
tests/test_candy_cog.py — Slash Command Handler Tests
======================================================

Calls each app-command callback directly with a mocked interaction.  No
Discord connection; the store is the in-memory SQLite fixture.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from discord import app_commands

from spookbot.bot.cogs.candy import Candy
from spookbot.config import SpookConfig
from spookbot.services.embeds import GENERIC_FAILURE_MESSAGE
from spookbot.services.game_service import GameContext
from spookbot.services.profile_store import ProfileStore
from conftest import NAMESPACE, run_async, seed_profile


def _make_interaction(user_id: int = 42, name: str = "Lily") -> MagicMock:
    interaction = MagicMock()
    interaction.user = SimpleNamespace(
        id=user_id,
        name=name,
        display_avatar=SimpleNamespace(url="https://cdn.example/avatar.png"),
    )
    interaction.response.defer = AsyncMock()
    interaction.response.send_message = AsyncMock()
    interaction.response.is_done = MagicMock(return_value=True)
    interaction.edit_original_response = AsyncMock()
    interaction.command = SimpleNamespace(name="trickortreat")
    return interaction


def _make_cog(game: GameContext) -> Candy:
    bot = SimpleNamespace(cfg=SpookConfig(), game=game)
    return Candy(bot)


def _sent_embed(interaction):
    return interaction.edit_original_response.await_args.kwargs["embed"]


class TestTrickOrTreatCommand:
    def test_applied_roll_replies_privately_with_embed(self, game, rng, store):
        rng.push(0.5, 0.0, 0.0)
        interaction = _make_interaction()

        run_async(Candy.trickortreat.callback(_make_cog(game), interaction))

        interaction.response.defer.assert_awaited_once_with(ephemeral=True, thinking=True)
        assert "Sweet Treat" in _sent_embed(interaction).title
        assert store.get_profile("42").candy == 1

    def test_cooldown_reply(self, game, rng, store, clock):
        seed_profile(store, "42", candy=5, last_used=clock.now)
        interaction = _make_interaction()

        run_async(Candy.trickortreat.callback(_make_cog(game), interaction))

        content = interaction.edit_original_response.await_args.kwargs["content"]
        assert "**2h 0m**" in content

    def test_store_down_reply(self, db_engine, rng, clock):
        game = GameContext(
            store=ProfileStore(db_engine, NAMESPACE, available=False), rng=rng, clock=clock,
        )
        interaction = _make_interaction()

        run_async(Candy.trickortreat.callback(_make_cog(game), interaction))

        assert "Sealed" in _sent_embed(interaction).title


class TestReadCommands:
    def test_inventory(self, game, store):
        seed_profile(store, "42", candy=9, inventory=["hat"])
        interaction = _make_interaction()

        run_async(Candy.inventory.callback(_make_cog(game), interaction))

        interaction.response.defer.assert_awaited_once_with(ephemeral=True, thinking=True)
        embed = _sent_embed(interaction)
        assert "Lily's Inventory" in embed.title

    def test_shop(self, game):
        interaction = _make_interaction()
        run_async(Candy.shop.callback(_make_cog(game), interaction))
        interaction.response.defer.assert_awaited_once_with(ephemeral=True, thinking=True)
        assert "Shop" in _sent_embed(interaction).title

    def test_topspook_is_public(self, game, store):
        seed_profile(store, "1", candy=3, username="Wednesday")
        interaction = _make_interaction()

        run_async(Candy.topspook.callback(_make_cog(game), interaction))

        interaction.response.defer.assert_awaited_once_with(thinking=True)
        assert "Wednesday" in _sent_embed(interaction).description

    def test_topspook_when_store_down(self, db_engine):
        game = GameContext(store=ProfileStore(db_engine, NAMESPACE, available=False))
        interaction = _make_interaction()

        run_async(Candy.topspook.callback(_make_cog(game), interaction))

        assert "unavailable" in _sent_embed(interaction).description


class TestErrorHandler:
    @pytest.fixture
    def cog(self, game):
        return _make_cog(game)

    def test_deferred_interaction_gets_generic_notice(self, cog):
        interaction = _make_interaction()
        run_async(cog.cog_app_command_error(interaction, app_commands.AppCommandError("boom")))
        interaction.edit_original_response.assert_awaited_once_with(
            content=GENERIC_FAILURE_MESSAGE, embed=None,
        )

    def test_undeferred_interaction_gets_ephemeral_notice(self, cog):
        interaction = _make_interaction()
        interaction.response.is_done.return_value = False
        run_async(cog.cog_app_command_error(interaction, app_commands.AppCommandError("boom")))
        interaction.response.send_message.assert_awaited_once_with(
            GENERIC_FAILURE_MESSAGE, ephemeral=True,
        )

    def test_failure_is_logged(self, cog, caplog):
        interaction = _make_interaction()
        run_async(cog.cog_app_command_error(interaction, app_commands.AppCommandError("boom")))
        assert "/trickortreat failed" in caplog.text
