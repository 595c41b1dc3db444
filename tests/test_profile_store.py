"""
tests/test_profile_store.py — Profile Store Integration Tests
==============================================================

Uses an in-memory SQLite database via the shared conftest fixtures.  The
lost-race tests use a file-backed database so two sessions really do hold
separate connections.
"""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from spookbot.constants import DEFAULT_TITLE
from spookbot.database.models import Profile
from spookbot.errors import StoreUnavailable
from spookbot.services.profile_store import ProfileStore
from conftest import NAMESPACE, seed_profile


class TestGetProfile:
    def test_unknown_user_gets_default(self, store):
        profile = store.get_profile("404")
        assert profile.user_id == "404"
        assert profile.candy == 0
        assert profile.title == DEFAULT_TITLE
        assert profile.inventory == frozenset()
        assert profile.last_used == 0
        assert not profile.persisted

    def test_reading_does_not_persist(self, store, db_engine):
        store.get_profile("404")
        with Session(db_engine) as session:
            assert session.scalars(select(Profile)).all() == []

    def test_round_trip(self, store):
        seed_profile(store, "7", candy=42, username="Morticia", inventory=["mask", "hat"], last_used=99)
        profile = store.get_profile("7")
        assert profile.persisted
        assert profile.candy == 42
        assert profile.username == "Morticia"
        assert profile.inventory == frozenset({"hat", "mask"})
        assert profile.last_used == 99

    def test_namespaces_are_isolated(self, store, db_engine):
        seed_profile(store, "7", candy=42)
        other = ProfileStore(db_engine, "another-app")
        assert other.get_profile("7").candy == 0


class TestAtomicUpdate:
    def test_creates_row_on_first_write(self, store, db_engine):
        result = store.atomic_update("1", lambda p: p.evolve(candy=5, username="Lily"))
        assert result.candy == 5
        assert result.persisted

        with Session(db_engine) as session:
            row = session.get(Profile, (NAMESPACE, "1"))
            assert row.candy == 5
            assert row.username == "Lily"
            assert row.title == DEFAULT_TITLE
            assert row.revision == 1

    def test_update_bumps_revision(self, store, db_engine):
        seed_profile(store, "1", candy=5)
        store.atomic_update("1", lambda p: p.evolve(candy=p.candy + 1))
        with Session(db_engine) as session:
            row = session.get(Profile, (NAMESPACE, "1"))
            assert row.candy == 6
            assert row.revision == 2

    def test_inventory_stored_sorted(self, store, db_engine):
        seed_profile(store, "1", inventory={"mask", "ghost", "hat"})
        with Session(db_engine) as session:
            assert session.get(Profile, (NAMESPACE, "1")).inventory == ["ghost", "hat", "mask"]

    def test_fn_sees_latest_value(self, store):
        seed_profile(store, "1", candy=10)
        seen = []

        def fn(p):
            seen.append(p.candy)
            return p.evolve(candy=p.candy - 4)

        store.atomic_update("1", fn)
        store.atomic_update("1", fn)
        assert seen == [10, 6]
        assert store.get_profile("1").candy == 2

    def test_exception_in_fn_aborts_without_writing(self, store):
        seed_profile(store, "1", candy=10)

        class Nope(Exception):
            pass

        def fn(p):
            raise Nope

        with pytest.raises(Nope):
            store.atomic_update("1", fn)
        assert store.get_profile("1").candy == 10

    def test_negative_candy_refused(self, store):
        seed_profile(store, "1", candy=1)
        with pytest.raises(ValueError, match="negative"):
            store.atomic_update("1", lambda p: p.evolve(candy=-1))
        assert store.get_profile("1").candy == 1

    def test_user_id_cannot_change(self, store):
        with pytest.raises(ValueError):
            store.atomic_update("1", lambda p: p.evolve(user_id="2"))


class TestQueryTopProfiles:
    def test_orders_by_candy_then_user_id(self, store):
        seed_profile(store, "c", candy=30)
        seed_profile(store, "b", candy=10)
        seed_profile(store, "a", candy=30)
        rows = store.query_top_profiles(10)
        assert [(p.user_id, p.candy) for p in rows] == [("a", 30), ("c", 30), ("b", 10)]

    def test_limit(self, store):
        for i in range(5):
            seed_profile(store, str(i), candy=i)
        assert [p.candy for p in store.query_top_profiles(2)] == [4, 3]

    def test_only_this_namespace(self, store, db_engine):
        seed_profile(ProfileStore(db_engine, "other"), "x", candy=999)
        seed_profile(store, "y", candy=1)
        assert [p.user_id for p in store.query_top_profiles(10)] == ["y"]

    def test_empty(self, store):
        assert store.query_top_profiles(10) == []


class TestUnavailable:
    def test_offline_store_fails_fast(self, db_engine):
        offline = ProfileStore(db_engine, NAMESPACE, available=False)
        with pytest.raises(StoreUnavailable):
            offline.get_profile("1")
        with pytest.raises(StoreUnavailable):
            offline.atomic_update("1", lambda p: p)
        with pytest.raises(StoreUnavailable):
            offline.query_top_profiles(10)

    def test_database_errors_are_translated(self):
        # No tables created → every statement fails with OperationalError
        broken = ProfileStore(create_engine("sqlite://"), NAMESPACE)
        with pytest.raises(StoreUnavailable):
            broken.get_profile("1")
        with pytest.raises(StoreUnavailable):
            broken.atomic_update("1", lambda p: p.evolve(candy=1))
        with pytest.raises(StoreUnavailable):
            broken.query_top_profiles(10)

    def test_invalid_max_attempts(self, db_engine):
        with pytest.raises(ValueError):
            ProfileStore(db_engine, NAMESPACE, max_attempts=0)


# ---------------------------------------------------------------------------
# Lost races: a competing writer commits between our read and our write
# ---------------------------------------------------------------------------
class TestLostRace:
    def test_stale_update_is_rerun_on_fresh_data(self, file_engine):
        ours = ProfileStore(file_engine, NAMESPACE)
        theirs = ProfileStore(file_engine, NAMESPACE)
        seed_profile(ours, "1", candy=10)
        calls = []

        def fn(p):
            calls.append(p.candy)
            if len(calls) == 1:
                theirs.atomic_update("1", lambda q: q.evolve(candy=q.candy + 5))
            return p.evolve(candy=p.candy - 3)

        result = ours.atomic_update("1", fn)

        assert calls == [10, 15]
        assert result.candy == 12
        assert ours.get_profile("1").candy == 12

    def test_racing_first_insert_is_rerun(self, file_engine):
        ours = ProfileStore(file_engine, NAMESPACE)
        theirs = ProfileStore(file_engine, NAMESPACE)
        calls = []

        def fn(p):
            calls.append(p.persisted)
            if len(calls) == 1:
                theirs.atomic_update("1", lambda q: q.evolve(candy=7))
            return p.evolve(candy=p.candy + 1)

        result = ours.atomic_update("1", fn)

        assert calls == [False, True]
        assert result.candy == 8

    def test_gives_up_after_max_attempts(self, file_engine):
        ours = ProfileStore(file_engine, NAMESPACE, max_attempts=3)
        theirs = ProfileStore(file_engine, NAMESPACE)
        seed_profile(ours, "1", candy=10)
        calls = []

        def always_loses(p):
            calls.append(p.candy)
            theirs.atomic_update("1", lambda q: q.evolve(candy=q.candy + 1))
            return p.evolve(candy=0)

        with pytest.raises(StoreUnavailable):
            ours.atomic_update("1", always_loses)

        assert len(calls) == 3
        # Only the competitor's writes landed.
        assert ours.get_profile("1").candy == 13
