"""
spookbot.services.profile_store — Profile Reads & Atomic Updates
=================================================================

The only module that touches the ``profiles`` table.  Everything it hands
back is a detached :class:`~spookbot.engine.profile.ProfileSnapshot`.

Atomic read-modify-write
------------------------
:meth:`ProfileStore.atomic_update` loads the row ``FOR UPDATE`` (PostgreSQL
holds a row lock until commit; SQLite ignores the clause), calls the
caller's pure function on the snapshot, writes the result, and commits.  The
``revision`` column is the mapper's ``version_id_col``, so if a concurrent
writer slipped in anyway the UPDATE matches zero rows and SQLAlchemy raises
``StaleDataError``.  Two first-time writers racing on the INSERT surface as
``IntegrityError``.  Either way nothing was committed, and the whole
read-modify-write is re-run against fresh data, at most ``max_attempts``
times.

Every other database failure is reported as
:class:`~spookbot.errors.StoreUnavailable`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from spookbot.database.engine import get_session
from spookbot.database.models import Profile
from spookbot.engine.profile import ProfileSnapshot, default_profile
from spookbot.errors import StoreUnavailable

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

ProfileUpdate = Callable[[ProfileSnapshot], ProfileSnapshot]


def _to_snapshot(row: Profile) -> ProfileSnapshot:
    return ProfileSnapshot(
        user_id=row.user_id,
        username=row.username,
        candy=row.candy,
        title=row.title,
        inventory=frozenset(row.inventory or ()),
        last_used=row.last_used or 0,
        persisted=True,
    )


class ProfileStore:
    """Profile persistence for one application namespace.

    Parameters
    ----------
    engine:
        SQLAlchemy engine shared by the whole process.
    namespace:
        Application namespace; every row is keyed by ``(namespace, user_id)``.
    available:
        ``False`` when the startup sign-in failed.  Every call then fails
        fast with :class:`StoreUnavailable` instead of serving defaults.
    max_attempts:
        How many times :meth:`atomic_update` re-runs after losing a race.
    """

    def __init__(
        self,
        engine: Engine,
        namespace: str,
        *,
        available: bool = True,
        max_attempts: int = 3,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.engine = engine
        self.namespace = namespace
        self.available = available
        self.max_attempts = max_attempts

    def _ensure_available(self) -> None:
        if not self.available:
            raise StoreUnavailable("Profile store is offline (database sign-in failed).")

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_profile(self, user_id: str) -> ProfileSnapshot:
        """Return the stored profile, or the default one if the user never played."""
        self._ensure_available()
        try:
            with get_session(self.engine) as session:
                row = session.get(Profile, (self.namespace, user_id))
                if row is None:
                    return default_profile(user_id)
                return _to_snapshot(row)
        except SQLAlchemyError as exc:
            logger.error("Failed to read profile %s: %s", user_id, exc)
            raise StoreUnavailable(f"Could not read profile {user_id}") from exc

    def query_top_profiles(self, limit: int) -> list[ProfileSnapshot]:
        """Every profile in the namespace, richest first, at most *limit* rows."""
        self._ensure_available()
        try:
            with get_session(self.engine) as session:
                rows = session.scalars(
                    select(Profile)
                    .where(Profile.namespace == self.namespace)
                    .order_by(Profile.candy.desc(), Profile.user_id.asc())
                    .limit(limit)
                ).all()
                return [_to_snapshot(r) for r in rows]
        except SQLAlchemyError as exc:
            logger.error("Leaderboard query failed: %s", exc)
            raise StoreUnavailable("Could not query the leaderboard") from exc

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def atomic_update(self, user_id: str, fn: ProfileUpdate) -> ProfileSnapshot:
        """Apply *fn* to the latest profile and persist the result atomically.

        *fn* must be pure: it may run more than once if a concurrent writer
        wins the race.  Exceptions raised by *fn* abort the update and
        propagate unchanged.

        Returns
        -------
        ProfileSnapshot
            The profile as committed.
        """
        self._ensure_available()
        last_exc: Exception | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self._update_once(user_id, fn)
            except (StaleDataError, IntegrityError) as exc:
                last_exc = exc
                logger.info(
                    "Concurrent update on profile %s (attempt %d/%d), retrying",
                    user_id, attempt, self.max_attempts,
                )
            except SQLAlchemyError as exc:
                logger.error("Failed to update profile %s: %s", user_id, exc)
                raise StoreUnavailable(f"Could not update profile {user_id}") from exc

        logger.warning(
            "Gave up updating profile %s after %d attempts", user_id, self.max_attempts,
        )
        raise StoreUnavailable(
            f"Profile {user_id} is too busy to update right now"
        ) from last_exc

    def _update_once(self, user_id: str, fn: ProfileUpdate) -> ProfileSnapshot:
        with get_session(self.engine) as session:
            row = session.get(Profile, (self.namespace, user_id), with_for_update=True)
            current = _to_snapshot(row) if row is not None else default_profile(user_id)

            updated = fn(current)
            if updated.user_id != user_id:
                raise ValueError("A profile update cannot change user_id")
            if updated.candy < 0:
                raise ValueError(f"Refusing to persist negative candy ({updated.candy})")

            if row is None:
                row = Profile(namespace=self.namespace, user_id=user_id)
                session.add(row)
            row.username = updated.username
            row.candy = updated.candy
            row.title = updated.title
            row.inventory = sorted(updated.inventory)
            row.last_used = updated.last_used

            session.flush()
            return _to_snapshot(row)
