"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from spookbot.database.models import Base
from spookbot.engine.profile import ProfileSnapshot
from spookbot.services.game_service import GameContext
from spookbot.services.profile_store import ProfileStore

NAMESPACE = "test-halloween"


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    """Run an async coroutine in a new event loop."""
    return asyncio.get_event_loop_policy().new_event_loop().run_until_complete(coro)


class ScriptedRandom:
    """A random source that replays a fixed list of draws.

    Raises ``AssertionError`` if the code under test draws more often than
    the test expected.
    """

    def __init__(self, draws: Iterable[float] = ()) -> None:
        self.draws = list(draws)
        self.calls = 0

    def push(self, *draws: float) -> None:
        self.draws.extend(draws)

    def random(self) -> float:
        assert self.draws, "ScriptedRandom ran out of draws"
        self.calls += 1
        return self.draws.pop(0)


class FakeClock:
    """Millisecond clock the test moves by hand."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all spookbot tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in the async bridge).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite so concurrent sessions hold separate connections."""
    engine = create_engine(f"sqlite:///{tmp_path / 'profiles.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(db_engine: Engine) -> ProfileStore:
    return ProfileStore(db_engine, NAMESPACE)


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def game(store: ProfileStore, rng: ScriptedRandom, clock: FakeClock) -> GameContext:
    return GameContext(store=store, rng=rng, clock=clock)


def seed_profile(
    store: ProfileStore,
    user_id: str,
    *,
    candy: int = 0,
    username: str | None = None,
    inventory: Iterable[str] = (),
    last_used: int = 0,
) -> ProfileSnapshot:
    """Write a profile directly through the store."""
    return store.atomic_update(
        user_id,
        lambda p: p.evolve(
            candy=candy,
            username=username or f"user-{user_id}",
            inventory=frozenset(inventory),
            last_used=last_used,
        ),
    )
