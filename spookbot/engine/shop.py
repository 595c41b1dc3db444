"""
spookbot.engine.shop — Static Title Shop
=========================================

The catalog is a validated lookup table built once at startup.  Lookups of
an unknown id raise :class:`~spookbot.errors.UnknownItemError` instead of
returning ``None``.

The shop is read-only for now: :meth:`ShopCatalog.purchase` exists so the
command surface has a named place to grow into, and refuses every call.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass

from spookbot.engine.profile import ProfileSnapshot
from spookbot.errors import ConfigurationError, PurchaseNotAvailable, UnknownItemError

__all__ = [
    "DEFAULT_CATALOG",
    "Affordability",
    "ShopCatalog",
    "ShopItem",
    "affordability",
]


@dataclass(frozen=True, slots=True)
class ShopItem:
    id: str
    name: str
    cost: int
    title: str
    color: str


class Affordability(enum.StrEnum):
    OWNED = "owned"
    BUYABLE = "buyable"
    TOO_EXPENSIVE = "too_expensive"


def affordability(profile: ProfileSnapshot, item: ShopItem) -> Affordability:
    """Owned beats buyable; buyable means ``candy >= cost``."""
    if profile.owns(item.id):
        return Affordability.OWNED
    if profile.candy >= item.cost:
        return Affordability.BUYABLE
    return Affordability.TOO_EXPENSIVE


class ShopCatalog:
    """Ordered, immutable collection of :class:`ShopItem`.

    Parameters
    ----------
    items:
        Items in display order.  Ids must be unique and costs positive.

    Raises
    ------
    ConfigurationError
        On a duplicate id or a non-positive cost.
    """

    def __init__(self, items: Iterable[ShopItem]) -> None:
        ordered = tuple(items)
        by_id: dict[str, ShopItem] = {}
        for item in ordered:
            if item.id in by_id:
                raise ConfigurationError(f"Duplicate shop item id: {item.id!r}")
            if item.cost <= 0:
                raise ConfigurationError(
                    f"Shop item {item.id!r} must have a positive cost, got {item.cost}"
                )
            by_id[item.id] = item
        self._items = ordered
        self._by_id = by_id

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    def list_items(self) -> tuple[ShopItem, ...]:
        """All items in declaration order."""
        return self._items

    def get(self, item_id: str) -> ShopItem:
        try:
            return self._by_id[item_id]
        except KeyError:
            raise UnknownItemError(item_id) from None

    def resolve(self, item_ids: Iterable[str]) -> tuple[list[ShopItem], list[str]]:
        """Split *item_ids* into known items (catalog order) and unknown ids (sorted)."""
        wanted = set(item_ids)
        known = [item for item in self._items if item.id in wanted]
        unknown = sorted(wanted - self._by_id.keys())
        return known, unknown

    def rows(self, profile: ProfileSnapshot) -> list[tuple[ShopItem, Affordability]]:
        return [(item, affordability(profile, item)) for item in self._items]

    def purchase(self, profile: ProfileSnapshot, item_id: str) -> ProfileSnapshot:
        """Not available yet — the shop is display-only."""
        self.get(item_id)
        raise PurchaseNotAvailable("Purchasing shop items is not available yet.")


DEFAULT_CATALOG = ShopCatalog([
    ShopItem(id="hat", name="Witch's Hat", cost=50, title="The Bewitched", color="#8b008b"),
    ShopItem(id="mask", name="Jason Mask", cost=150, title="The Maniac", color="#b22222"),
    ShopItem(id="ghost", name="Ghostly Shroud", cost=300, title="A Vile Specter", color="#cccccc"),
])
