"""Ticket generation strategies and the generator that chains them."""

from __future__ import annotations

import logging
import random
from itertools import combinations
from typing import Optional, Sequence

from ..errors import InvalidTicketStructure
from .ticket import (
    COLUMN_RANGES,
    COLUMNS,
    MAX_PER_COLUMN,
    MIN_PER_COLUMN,
    NUMBERS_PER_ROW,
    NUMBERS_PER_TICKET,
    ROWS,
    Grid,
    Ticket,
    column_values,
    empty_grid,
    ticket_errors,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 100
DEFAULT_MAX_REPAIR_PASSES = 50

# Column-count patterns for the pattern strategy. Every entry sums to 15 and
# stays within 1..3 per column.
DEFAULT_COLUMN_PATTERNS: tuple[tuple[int, ...], ...] = (
    (2, 2, 2, 2, 1, 2, 1, 2, 1),
    (1, 2, 2, 2, 2, 1, 2, 2, 1),
    (2, 1, 2, 1, 2, 2, 2, 1, 2),
    (1, 2, 1, 2, 2, 2, 2, 2, 1),
    (2, 2, 1, 2, 2, 1, 2, 1, 2),
    (3, 2, 1, 2, 1, 2, 1, 2, 1),
    (1, 2, 2, 1, 3, 1, 2, 1, 2),
)


def _row_counts(grid: Grid) -> list[int]:
    return [sum(1 for n in row if n is not None) for row in grid]


def _sort_column(grid: Grid, col: int) -> None:
    """Reorder the filled cells of ``col`` so values ascend downwards."""
    rows = [r for r in range(ROWS) if grid[r][col] is not None]
    for r, value in zip(rows, sorted(column_values(grid, col))):
        grid[r][col] = value


def check_pattern(pattern: Sequence[int]) -> None:
    """Raise ``ValueError`` unless ``pattern`` is a usable column-count pattern."""
    if len(pattern) != COLUMNS:
        raise ValueError(f"pattern must have {COLUMNS} entries, got {len(pattern)}")
    if any(not MIN_PER_COLUMN <= n <= MAX_PER_COLUMN for n in pattern):
        raise ValueError(
            f"pattern entries must be between {MIN_PER_COLUMN} and {MAX_PER_COLUMN}"
        )
    if sum(pattern) != NUMBERS_PER_TICKET:
        raise ValueError(f"pattern must sum to {NUMBERS_PER_TICKET}, got {sum(pattern)}")


class GenerationStrategy:
    """Base class for a way of laying out a single ticket.

    Subclasses implement :meth:`generate`, returning a valid grid or ``None``
    when they give up.
    """

    key = "base"

    def generate(self, rng: random.Random) -> Optional[Grid]:
        raise NotImplementedError


class RandomizedStrategy(GenerationStrategy):
    """Random column counts and row placement followed by a row-balancing repair.

    Parameters
    ----------
    max_attempts : int, default: DEFAULT_MAX_ATTEMPTS
        Number of fresh layouts tried before giving up.
    max_repair_passes : int, default: DEFAULT_MAX_REPAIR_PASSES
        Upper bound on value moves made while balancing rows to five numbers.
    """

    key = "randomized"

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        max_repair_passes: int = DEFAULT_MAX_REPAIR_PASSES,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.max_repair_passes = max_repair_passes

    def generate(self, rng: random.Random) -> Optional[Grid]:
        for attempt in range(1, self.max_attempts + 1):
            grid = self._try_layout(rng)
            if grid is not None:
                logger.debug(f"Randomized layout succeeded on attempt {attempt}")
                return grid
        return None

    def _try_layout(self, rng: random.Random) -> Optional[Grid]:
        grid = empty_grid()
        for col, count in enumerate(self.distribute_column_counts(rng)):
            low, high = COLUMN_RANGES[col]
            values = sorted(rng.sample(range(low, high + 1), count))
            rows = sorted(rng.sample(range(ROWS), count))
            for r, value in zip(rows, values):
                grid[r][col] = value

        if not self.balance_rows(grid, rng):
            return None
        if ticket_errors(grid):
            return None
        return grid

    @staticmethod
    def distribute_column_counts(rng: random.Random) -> list[int]:
        """Random per-column counts in 1..3 that sum to 15.

        Starts from one number per column and bumps random columns that are
        still below the cap until the deficit is used up.
        """
        counts = [MIN_PER_COLUMN] * COLUMNS
        deficit = NUMBERS_PER_TICKET - sum(counts)
        while deficit > 0:
            col = rng.randrange(COLUMNS)
            if counts[col] < MAX_PER_COLUMN:
                counts[col] += 1
                deficit -= 1
        return counts

    def balance_rows(self, grid: Grid, rng: random.Random) -> bool:
        """Move values between rows until every row holds five numbers.

        Each pass takes one value out of an overflowing row and puts a fresh,
        unused in-range value into an underflowing row of the same column, then
        re-sorts that column. Returns ``True`` when the rows end up balanced.
        """
        for _ in range(self.max_repair_passes):
            counts = _row_counts(grid)
            if all(c == NUMBERS_PER_ROW for c in counts):
                return True
            over = [r for r, c in enumerate(counts) if c > NUMBERS_PER_ROW]
            under = [r for r, c in enumerate(counts) if c < NUMBERS_PER_ROW]
            if not over or not under:
                return False
            src = rng.choice(over)
            dst = rng.choice(under)
            for col in range(COLUMNS):
                if grid[src][col] is None or grid[dst][col] is not None:
                    continue
                low, high = COLUMN_RANGES[col]
                used = set(column_values(grid, col))
                available = [n for n in range(low, high + 1) if n not in used]
                if not available:
                    continue
                grid[src][col] = None
                grid[dst][col] = rng.choice(available)
                _sort_column(grid, col)
                break
        return all(c == NUMBERS_PER_ROW for c in _row_counts(grid))


class PatternStrategy(GenerationStrategy):
    """Layout built from a table of column-count patterns; never gives up.

    For each column the row assignment that keeps the running row totals
    closest together is chosen, so every row reaches exactly five numbers.

    Parameters
    ----------
    patterns : Sequence[Sequence[int]], default: DEFAULT_COLUMN_PATTERNS
        Candidate per-column counts. Each is checked with :func:`check_pattern`.
    """

    key = "pattern"

    def __init__(
        self, patterns: Sequence[Sequence[int]] = DEFAULT_COLUMN_PATTERNS
    ) -> None:
        if not patterns:
            raise ValueError("at least one column pattern is required")
        for pattern in patterns:
            check_pattern(pattern)
        self.patterns = tuple(tuple(p) for p in patterns)

    def generate(self, rng: random.Random) -> Optional[Grid]:
        pattern = rng.choice(self.patterns)
        grid = empty_grid()
        totals = [0] * ROWS

        for col, count in enumerate(pattern):
            options = [
                rows
                for rows in combinations(range(ROWS), count)
                if all(totals[r] < NUMBERS_PER_ROW for r in rows)
            ]
            if not options:
                logger.warning(f"No row assignment left for column {col} of {pattern}")
                return None
            rng.shuffle(options)
            best = min(options, key=lambda rows: self._score(totals, rows))

            low, high = COLUMN_RANGES[col]
            values = sorted(rng.sample(range(low, high + 1), count))
            for r, value in zip(best, values):
                grid[r][col] = value
                totals[r] += 1

        if ticket_errors(grid):
            return None
        return grid

    @staticmethod
    def _score(totals: list[int], rows: tuple[int, ...]) -> tuple[int, int]:
        after = list(totals)
        for r in rows:
            after[r] += 1
        # Spread first, then prefer the emptiest rows.
        return max(after) - min(after), sum(totals[r] for r in rows)


class TicketGenerator:
    """Produce valid tickets by trying each strategy in turn.

    Parameters
    ----------
    strategies : Optional[Sequence[GenerationStrategy]], default: None
        Strategies tried in order for every ticket. Defaults to a
        :class:`RandomizedStrategy` followed by a :class:`PatternStrategy`.
    rng : Optional[random.Random], default: None
        Random generator to use; useful for deterministic tests. If not
        provided, a new non-deterministic generator is used.
    """

    def __init__(
        self,
        strategies: Optional[Sequence[GenerationStrategy]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if strategies is None:
            strategies = (RandomizedStrategy(), PatternStrategy())
        self.strategies = tuple(strategies)
        if not self.strategies:
            raise ValueError("at least one generation strategy is required")
        self.rng = rng or random.Random()

    def generate_ticket(self) -> Ticket:
        """Generate one ticket.

        Raises
        ------
        InvalidTicketStructure
            If every strategy gave up without a valid layout.
        """
        for index, strategy in enumerate(self.strategies):
            grid = strategy.generate(self.rng)
            if grid is not None:
                if index > 0:
                    logger.warning(f"Ticket generated by fallback strategy '{strategy.key}'")
                return Ticket.from_grid(grid)
        keys = ", ".join(s.key for s in self.strategies)
        raise InvalidTicketStructure(f"No valid ticket layout produced by: {keys}")

    def generate(self, count: int) -> list[Ticket]:
        """Generate ``count`` independently valid tickets.

        Tickets are not required to differ from one another.
        """
        if count < 0:
            raise ValueError("count must not be negative")
        return [self.generate_ticket() for _ in range(count)]


__all__ = [
    "DEFAULT_COLUMN_PATTERNS",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_REPAIR_PASSES",
    "GenerationStrategy",
    "PatternStrategy",
    "RandomizedStrategy",
    "TicketGenerator",
    "check_pattern",
]
