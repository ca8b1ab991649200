"""The 1..90 number pool and its call history."""

from __future__ import annotations

import random
from typing import Optional

from ..errors import AlreadyDrawn, PoolExhausted
from ..tickets.ticket import HIGHEST_NUMBER, LOWEST_NUMBER


class NumberPool:
    """Numbers still to be called plus the ordered history of called numbers.

    ``remaining`` is shuffled once per game, so popping from its end is a
    uniform random draw without replacement.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._remaining: list[int] = []
        self._drawn: list[int] = []
        self.refill()

    def __len__(self) -> int:
        return len(self._remaining)

    def __contains__(self, number: object) -> bool:
        return number in self._remaining

    @property
    def drawn(self) -> tuple[int, ...]:
        return tuple(self._drawn)

    @property
    def remaining(self) -> frozenset[int]:
        return frozenset(self._remaining)

    @property
    def last(self) -> Optional[int]:
        return self._drawn[-1] if self._drawn else None

    def refill(self) -> None:
        """Put every number back and reshuffle."""
        self._remaining = list(range(LOWEST_NUMBER, HIGHEST_NUMBER + 1))
        self._rng.shuffle(self._remaining)
        self._drawn = []

    def draw(self) -> int:
        """Call the next number.

        Raises
        ------
        PoolExhausted
            If every number has been called.
        """
        if not self._remaining:
            raise PoolExhausted()
        number = self._remaining.pop()
        self._drawn.append(number)
        return number

    def take(self, number: int) -> int:
        """Call ``number`` explicitly.

        Raises
        ------
        ValueError
            If ``number`` is outside 1..90.
        AlreadyDrawn
            If ``number`` was called before.
        """
        check_number(number)
        if number in self._drawn:
            raise AlreadyDrawn(number)
        self._remaining.remove(number)
        self._drawn.append(number)
        return number


def check_number(number: int) -> None:
    if isinstance(number, bool) or not isinstance(number, int):
        raise TypeError(f"number must be an integer, got {number!r}")
    if not LOWEST_NUMBER <= number <= HIGHEST_NUMBER:
        raise ValueError(
            f"number must be between {LOWEST_NUMBER} and {HIGHEST_NUMBER}, got {number}"
        )


__all__ = ["NumberPool", "check_number"]
