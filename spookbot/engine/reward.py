"""
spookbot.engine.reward — Trick-or-Treat Outcome Calculation
============================================================

Pure calculation, no Discord I/O, no DB I/O.

Draw order (every draw is ``rng.random()`` in ``[0, 1)``)::

    p1 < 0.10  → TRICK:  magnitude draw (1–6), flavor-line draw
    otherwise  → TREAT:  tier draw, magnitude draw
                         p2 < 0.75 COMMON (1–5)
                         p2 < 0.95 RARE (6–15)
                         else      JACKPOT (16–35)

A trick never takes more candy than the player has.  The outcome computed
before the write is speculative: it keeps the raw roll in ``rolled_change``
and :meth:`Outcome.settle` clamps that roll against the balance read inside
the atomic update.  The settled value is the one persisted and shown.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Protocol

__all__ = [
    "TRICK_CHANCE",
    "TRICK_MESSAGES",
    "Outcome",
    "OutcomeKind",
    "RandomSource",
    "Tier",
    "clamp_change",
    "compute_outcome",
]

TRICK_CHANCE = 0.10
COMMON_CUTOFF = 0.75
RARE_CUTOFF = 0.95


class RandomSource(Protocol):
    """Anything with ``random() -> float`` in ``[0, 1)``; ``random.Random`` fits."""

    def random(self) -> float: ...


class OutcomeKind(enum.StrEnum):
    TRICK = "trick"
    TREAT = "treat"


class Tier(enum.StrEnum):
    """Trick, or the treat tier that set the reward range."""
    TRICK = "trick"
    COMMON = "common"
    RARE = "rare"
    JACKPOT = "jackpot"


@dataclass(frozen=True, slots=True)
class TierSpec:
    low: int
    high: int
    title: str
    color: str

    def draw(self, rng: RandomSource) -> int:
        span = self.high - self.low + 1
        return int(rng.random() * span) + self.low


TIERS: dict[Tier, TierSpec] = {
    Tier.TRICK: TierSpec(1, 6, "A Nasty Trick!", "#b22222"),
    Tier.COMMON: TierSpec(1, 5, "A Sweet Treat!", "#ff6700"),
    Tier.RARE: TierSpec(6, 15, "Bonus Haul!", "#ffd700"),
    Tier.JACKPOT: TierSpec(16, 35, "Jackpot! The Motherlode!", "#A020F0"),
}

TRICK_MESSAGES: tuple[str, ...] = (
    "A zombie swapped your bag for one full of leaves! You lost **{amount}** candy.",
    "You stepped on a cursed pumpkin! Your pants are wet, and you dropped **{amount}** candy.",
    "The door was a giant spider web! You were sticky for 5 minutes and lost **{amount}** candy.",
)

TREAT_MESSAGE = "You got {amount} pieces of candy!"


@dataclass(frozen=True, slots=True)
class Outcome:
    """One trick-or-treat result.

    ``candy_change`` is the amount to apply against the balance it was
    computed for; ``rolled_change`` is the unclamped roll, defaulting to
    ``candy_change``.
    """

    candy_change: int
    kind: OutcomeKind
    tier: Tier
    message_template: str
    rolled_change: int | None = None

    def __post_init__(self) -> None:
        if self.rolled_change is None:
            object.__setattr__(self, "rolled_change", self.candy_change)

    @property
    def message(self) -> str:
        return self.message_template.format(amount=abs(self.candy_change))

    @property
    def title(self) -> str:
        return TIERS[self.tier].title

    @property
    def color(self) -> str:
        return TIERS[self.tier].color

    def settle(self, latest_candy: int) -> Outcome:
        """Clamp the raw roll against the balance actually being written over."""
        applied = clamp_change(latest_candy, self.rolled_change)
        if applied == self.candy_change:
            return self
        return replace(self, candy_change=applied)


def clamp_change(current_candy: int, change: int) -> int:
    """Limit *change* so ``current_candy + change`` never drops below zero."""
    if current_candy + change < 0:
        return -max(current_candy, 0)
    return change


def _pick(rng: RandomSource, options: tuple[str, ...]) -> str:
    return options[int(rng.random() * len(options))]


def compute_outcome(current_candy: int, rng: RandomSource) -> Outcome:
    """Roll one trick-or-treat against a balance of *current_candy*."""
    if rng.random() < TRICK_CHANCE:
        magnitude = TIERS[Tier.TRICK].draw(rng)
        return Outcome(
            candy_change=clamp_change(current_candy, -magnitude),
            kind=OutcomeKind.TRICK,
            tier=Tier.TRICK,
            message_template=_pick(rng, TRICK_MESSAGES),
            rolled_change=-magnitude,
        )

    roll = rng.random()
    if roll < COMMON_CUTOFF:
        tier = Tier.COMMON
    elif roll < RARE_CUTOFF:
        tier = Tier.RARE
    else:
        tier = Tier.JACKPOT

    return Outcome(
        candy_change=TIERS[tier].draw(rng),
        kind=OutcomeKind.TREAT,
        tier=tier,
        message_template=TREAT_MESSAGE,
    )
