"""Prize categories, winner capacities and rank labels."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class PrizeCategory(str, Enum):
    """Win conditions, declared in the order they are evaluated on each draw."""

    EARLY_FIVE = "earlyFive"
    TOP_LINE = "topLine"
    MIDDLE_LINE = "middleLine"
    BOTTOM_LINE = "bottomLine"
    CORNERS = "corners"
    FULL_HOUSE = "fullHouse"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def row(self) -> int | None:
        """Ticket row checked by a line category, ``None`` otherwise."""
        return LINE_ROWS.get(self)


EVALUATION_ORDER: tuple[PrizeCategory, ...] = tuple(PrizeCategory)

LINE_ROWS: Mapping[PrizeCategory, int] = MappingProxyType(
    {
        PrizeCategory.TOP_LINE: 0,
        PrizeCategory.MIDDLE_LINE: 1,
        PrizeCategory.BOTTOM_LINE: 2,
    }
)

WINNER_LIMITS: Mapping[PrizeCategory, int] = MappingProxyType(
    {
        PrizeCategory.EARLY_FIVE: 1,
        PrizeCategory.TOP_LINE: 2,
        PrizeCategory.MIDDLE_LINE: 2,
        PrizeCategory.BOTTOM_LINE: 2,
        PrizeCategory.CORNERS: 2,
        PrizeCategory.FULL_HOUSE: 3,
    }
)

EARLY_FIVE_COUNT = 5

_LABELS = {
    PrizeCategory.EARLY_FIVE: "Early Five",
    PrizeCategory.TOP_LINE: "Top Line",
    PrizeCategory.MIDDLE_LINE: "Middle Line",
    PrizeCategory.BOTTOM_LINE: "Bottom Line",
    PrizeCategory.CORNERS: "Corners",
    PrizeCategory.FULL_HOUSE: "Full House",
}


def ordinal(n: int) -> str:
    """Return ``n`` with its English ordinal suffix: 1st, 2nd, 3rd, 4th, 11th."""
    if n < 1:
        raise ValueError("rank must be a positive integer")
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def display_name(category: PrizeCategory, rank: int, capacity: int) -> str:
    """Announcement title, e.g. ``"Top Line (2nd)"``.

    Single-winner categories are shown without a rank.
    """
    if capacity <= 1:
        return category.label
    return f"{category.label} ({ordinal(rank)})"


__all__ = [
    "EARLY_FIVE_COUNT",
    "EVALUATION_ORDER",
    "LINE_ROWS",
    "PrizeCategory",
    "WINNER_LIMITS",
    "display_name",
    "ordinal",
]
