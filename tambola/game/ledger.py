"""Winner ledger and the manual-mode announcement queue."""

from __future__ import annotations

from collections import deque
from typing import Iterator, Mapping, Optional

from .events import WinnerEvent
from .participant import Participant
from .prizes import EVALUATION_ORDER, WINNER_LIMITS, PrizeCategory


class WinnerLedger:
    """Ordered, capacity-bounded winners per prize category.

    A participant appears at most once per category; entry order is detection
    order and gives the rank.
    """

    def __init__(self, limits: Optional[Mapping[PrizeCategory, int]] = None) -> None:
        limits = dict(WINNER_LIMITS if limits is None else limits)
        missing = [c.value for c in EVALUATION_ORDER if c not in limits]
        if missing:
            raise ValueError(f"winner limits missing for: {', '.join(missing)}")
        if any(limit < 1 for limit in limits.values()):
            raise ValueError("winner limits must be positive")
        self._limits = limits
        self._entries: dict[PrizeCategory, list[Participant]] = {
            c: [] for c in EVALUATION_ORDER
        }

    def capacity(self, category: PrizeCategory) -> int:
        return self._limits[category]

    def winners(self, category: PrizeCategory) -> tuple[Participant, ...]:
        return tuple(self._entries[category])

    def is_full(self, category: PrizeCategory) -> bool:
        return len(self._entries[category]) >= self._limits[category]

    def has_won(self, category: PrizeCategory, participant: Participant) -> bool:
        return any(p.id == participant.id for p in self._entries[category])

    def can_award(self, category: PrizeCategory, participant: Participant) -> bool:
        return not self.is_full(category) and not self.has_won(category, participant)

    def award(self, category: PrizeCategory, participant: Participant) -> int:
        """Append ``participant`` to ``category`` and return its 1-based rank.

        Raises
        ------
        ValueError
            If the category is full or the participant already won it.
        """
        if self.is_full(category):
            raise ValueError(f"'{category.value}' already has all its winners")
        if self.has_won(category, participant):
            raise ValueError(f"participant {participant.id!r} already won '{category.value}'")
        self._entries[category].append(participant)
        return len(self._entries[category])

    def names(self) -> dict[PrizeCategory, tuple[str, ...]]:
        return {c: tuple(p.name for p in entries) for c, entries in self._entries.items()}

    def clear(self) -> None:
        for entries in self._entries.values():
            entries.clear()


class AnnouncementQueue:
    """FIFO of winner events waiting for manual release."""

    def __init__(self) -> None:
        self._events: deque[WinnerEvent] = deque()

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[WinnerEvent]:
        return iter(self._events)

    def push(self, event: WinnerEvent) -> None:
        self._events.append(event)

    def peek(self) -> Optional[WinnerEvent]:
        return self._events[0] if self._events else None

    def pop(self) -> Optional[WinnerEvent]:
        return self._events.popleft() if self._events else None

    def clear(self) -> None:
        self._events.clear()


__all__ = ["AnnouncementQueue", "WinnerLedger"]
