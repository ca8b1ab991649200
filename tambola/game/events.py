"""Value objects exchanged between the engine and its consumers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from .prizes import PrizeCategory


class GameState(str, Enum):
    NOT_STARTED = "notStarted"
    IN_PROGRESS = "inProgress"
    EXHAUSTED = "exhausted"
    COMPLETE = "complete"


class AnnouncementMode(str, Enum):
    """``AUTO`` emits winners at once; ``MANUAL`` queues them for release."""

    AUTO = "auto"
    MANUAL = "manual"


@dataclass(frozen=True)
class WinnerEvent:
    """A single prize award.

    Attributes
    ----------
    category : PrizeCategory
        Category that was won.
    participant_id : Any
        Roster identifier of the winner.
    participant_name : str
        Name of the winner.
    rank : int
        1-based position within the category's ledger.
    rank_label : str
        ``rank`` as an ordinal, e.g. ``"2nd"``.
    display_name : str
        Announcement title, e.g. ``"Top Line (2nd)"``.
    """

    category: PrizeCategory
    participant_id: Any
    participant_name: str
    rank: int
    rank_label: str
    display_name: str

    def to_json(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "participantName": self.participant_name,
            "rankLabel": self.rank_label,
            "displayName": self.display_name,
        }


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of the game after an operation."""

    current_number: Optional[int]
    draw_history: tuple[int, ...]
    winners: Mapping[PrizeCategory, tuple[str, ...]]
    state: GameState
    remaining: int

    def to_json(self) -> dict[str, Any]:
        return {
            "currentNumber": self.current_number,
            "drawHistory": list(self.draw_history),
            "winners": {c.value: list(names) for c, names in self.winners.items()},
            "state": self.state.value,
            "remaining": self.remaining,
        }


@dataclass(frozen=True)
class DrawResult:
    """Outcome of one draw.

    Attributes
    ----------
    number : int
        The number that was called.
    snapshot : GameSnapshot
        Game state after the draw.
    winners : tuple[WinnerEvent, ...]
        Every prize detected on this draw, in evaluation order.
    announced : tuple[WinnerEvent, ...]
        Events emitted right away; empty in manual mode.
    halt : bool
        ``True`` when automatic drawing must stop (game complete or pool
        exhausted).
    """

    number: int
    snapshot: GameSnapshot
    winners: tuple[WinnerEvent, ...] = field(default_factory=tuple)
    announced: tuple[WinnerEvent, ...] = field(default_factory=tuple)
    halt: bool = False


__all__ = [
    "AnnouncementMode",
    "DrawResult",
    "GameSnapshot",
    "GameState",
    "WinnerEvent",
]
