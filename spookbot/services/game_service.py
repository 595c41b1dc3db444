"""
spookbot.services.game_service — Command Orchestration
=======================================================

Synchronous service functions behind each slash command.  Cogs call them
through :func:`~spookbot.database.engine.run_db_with_timeout`; tests call
them directly.

Every entry point takes an explicit :class:`GameContext` — the store, the
catalog, the random source and the clock are never module globals.

/trickortreat flow::

    read profile → cooldown gate → speculative outcome
        → atomic_update(re-check cooldown, settle outcome on latest balance)

The cooldown is checked twice: once up front so a blocked player never
rolls, and again inside the atomic update so that of two simultaneous
commands only one is applied.  The clamp is authoritative only inside the
atomic update (:meth:`~spookbot.engine.reward.Outcome.settle`).
"""

from __future__ import annotations

import enum
import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from spookbot.constants import COOLDOWN_MS, LEADERBOARD_SIZE
from spookbot.engine.cooldown import CooldownStatus, check_cooldown
from spookbot.engine.leaderboard import Leaderboard, rank_profiles, unavailable
from spookbot.engine.profile import ProfileSnapshot
from spookbot.engine.reward import Outcome, RandomSource, compute_outcome
from spookbot.engine.shop import DEFAULT_CATALOG, Affordability, ShopCatalog, ShopItem
from spookbot.errors import StoreUnavailable
from spookbot.services.profile_store import ProfileStore

logger = logging.getLogger(__name__)


def epoch_ms() -> int:
    return time.time_ns() // 1_000_000


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class GameContext:
    """Process-wide collaborators, built once at startup."""

    store: ProfileStore
    catalog: ShopCatalog = DEFAULT_CATALOG
    rng: RandomSource = field(default_factory=random.Random)
    clock: Callable[[], int] = epoch_ms
    cooldown_ms: int = COOLDOWN_MS
    leaderboard_size: int = LEADERBOARD_SIZE


# ---------------------------------------------------------------------------
# /trickortreat
# ---------------------------------------------------------------------------
class TrickOrTreatStatus(enum.StrEnum):
    APPLIED = "applied"
    BLOCKED = "blocked"


@dataclass(frozen=True, slots=True)
class TrickOrTreatResult:
    status: TrickOrTreatStatus
    profile: ProfileSnapshot
    outcome: Outcome | None = None
    remaining_ms: int = 0

    @property
    def applied(self) -> bool:
        return self.status is TrickOrTreatStatus.APPLIED


@dataclass(frozen=True, slots=True)
class PlannedRoll:
    """A speculative outcome rolled against a pre-transaction read."""

    profile: ProfileSnapshot
    outcome: Outcome
    now: int


class _CooldownLost(Exception):
    """Raised inside the atomic update when another command already won."""

    def __init__(self, status: CooldownStatus, profile: ProfileSnapshot) -> None:
        self.status = status
        self.profile = profile
        super().__init__(status.remaining_ms)


def _blocked(profile: ProfileSnapshot, status: CooldownStatus) -> TrickOrTreatResult:
    return TrickOrTreatResult(
        status=TrickOrTreatStatus.BLOCKED,
        profile=profile,
        remaining_ms=status.remaining_ms,
    )


def plan_trick_or_treat(ctx: GameContext, user_id: str) -> PlannedRoll | TrickOrTreatResult:
    """Read, gate, and roll.  Returns a blocked result or a plan to commit."""
    now = ctx.clock()
    profile = ctx.store.get_profile(user_id)
    status = check_cooldown(profile.last_used, now, ctx.cooldown_ms)
    if status.blocked:
        return _blocked(profile, status)
    return PlannedRoll(profile=profile, outcome=compute_outcome(profile.candy, ctx.rng), now=now)


def commit_trick_or_treat(
    ctx: GameContext, user_id: str, username: str, plan: PlannedRoll
) -> TrickOrTreatResult:
    """Apply *plan* inside one atomic update against the latest stored profile."""
    settled: list[Outcome] = []

    def _apply(current: ProfileSnapshot) -> ProfileSnapshot:
        status = check_cooldown(current.last_used, plan.now, ctx.cooldown_ms)
        if status.blocked:
            raise _CooldownLost(status, current)
        outcome = plan.outcome.settle(current.candy)
        settled[:] = [outcome]
        return current.evolve(
            candy=current.candy + outcome.candy_change,
            last_used=plan.now,
            username=username,
        )

    try:
        profile = ctx.store.atomic_update(user_id, _apply)
    except _CooldownLost as lost:
        logger.info("Trick-or-treat for %s lost a race to a concurrent command", user_id)
        return _blocked(lost.profile, lost.status)

    outcome = settled[0]
    if outcome.candy_change != plan.outcome.candy_change:
        logger.debug(
            "Settled %s for %s: %+d → %+d",
            outcome.tier, user_id, plan.outcome.candy_change, outcome.candy_change,
        )
    logger.info(
        "%s (%s) rolled %s: %+d candy, now %d",
        username, user_id, outcome.tier, outcome.candy_change, profile.candy,
    )
    return TrickOrTreatResult(
        status=TrickOrTreatStatus.APPLIED, profile=profile, outcome=outcome,
    )


def trick_or_treat(ctx: GameContext, user_id: str, username: str) -> TrickOrTreatResult:
    """Run one reward action for *user_id*, subject to the cooldown."""
    plan = plan_trick_or_treat(ctx, user_id)
    if isinstance(plan, TrickOrTreatResult):
        return plan
    return commit_trick_or_treat(ctx, user_id, username, plan)


# ---------------------------------------------------------------------------
# /inventory
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class InventoryView:
    profile: ProfileSnapshot
    items: list[ShopItem]
    unknown_ids: list[str]


def view_inventory(ctx: GameContext, user_id: str) -> InventoryView:
    profile = ctx.store.get_profile(user_id)
    items, unknown = ctx.catalog.resolve(profile.inventory)
    if unknown:
        logger.error(
            "Profile %s references unknown shop items: %s", user_id, ", ".join(unknown),
        )
    return InventoryView(profile=profile, items=items, unknown_ids=unknown)


# ---------------------------------------------------------------------------
# /shop
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ShopView:
    profile: ProfileSnapshot
    rows: list[tuple[ShopItem, Affordability]]


def view_shop(ctx: GameContext, user_id: str) -> ShopView:
    profile = ctx.store.get_profile(user_id)
    return ShopView(profile=profile, rows=ctx.catalog.rows(profile))


# ---------------------------------------------------------------------------
# /topspook
# ---------------------------------------------------------------------------
def view_leaderboard(ctx: GameContext) -> Leaderboard:
    """Top ``ctx.leaderboard_size`` players, or an UNAVAILABLE board."""
    try:
        profiles = ctx.store.query_top_profiles(ctx.leaderboard_size)
    except StoreUnavailable as exc:
        logger.warning("Leaderboard unavailable: %s", exc)
        return unavailable(str(exc))
    return rank_profiles(profiles, ctx.leaderboard_size)
