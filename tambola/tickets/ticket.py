"""Ticket grid type, column ranges and structural validation."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Iterator, Optional, Sequence

from ..errors import InvalidTicketStructure

ROWS = 3
COLUMNS = 9
NUMBERS_PER_ROW = 5
NUMBERS_PER_TICKET = ROWS * NUMBERS_PER_ROW
MIN_PER_COLUMN = 1
MAX_PER_COLUMN = 3
LOWEST_NUMBER = 1
HIGHEST_NUMBER = 90

# Inclusive ranges per column; the last column also takes 90.
COLUMN_RANGES: tuple[tuple[int, int], ...] = (
    (1, 9),
    (10, 19),
    (20, 29),
    (30, 39),
    (40, 49),
    (50, 59),
    (60, 69),
    (70, 79),
    (80, 90),
)

Cell = Optional[int]
Grid = list[list[Cell]]


def column_range(col: int) -> tuple[int, int]:
    """Return the inclusive ``(low, high)`` range of numbers for ``col``."""
    if not 0 <= col < COLUMNS:
        raise ValueError(f"column must be between 0 and {COLUMNS - 1}, got {col}")
    return COLUMN_RANGES[col]


def empty_grid() -> Grid:
    return [[None] * COLUMNS for _ in range(ROWS)]


def column_values(grid: Sequence[Sequence[Cell]], col: int) -> list[int]:
    """Numbers of column ``col`` in top-to-bottom order, blanks skipped."""
    return [row[col] for row in grid if row[col] is not None]


def ticket_errors(grid: Sequence[Sequence[Cell]]) -> list[str]:
    """List every layout rule ``grid`` violates.

    Checks that each row holds exactly five numbers, each column holds one to
    three numbers inside its range, and that column values strictly increase
    from top to bottom.

    Parameters
    ----------
    grid : Sequence[Sequence[int | None]]
        A 3x9 ticket grid.

    Returns
    -------
    list[str]
        Empty when the grid is a valid ticket.
    """
    if grid is None or len(grid) != ROWS or any(len(row) != COLUMNS for row in grid):
        return [f"ticket must be a {ROWS}x{COLUMNS} grid"]

    problems: list[str] = []
    for r, row in enumerate(grid):
        count = sum(1 for n in row if n is not None)
        if count != NUMBERS_PER_ROW:
            problems.append(f"row {r} has {count} numbers (must be {NUMBERS_PER_ROW})")

    for c in range(COLUMNS):
        values = column_values(grid, c)
        if not MIN_PER_COLUMN <= len(values) <= MAX_PER_COLUMN:
            problems.append(
                f"column {c} has {len(values)} numbers "
                f"(must be {MIN_PER_COLUMN}..{MAX_PER_COLUMN})"
            )
        low, high = COLUMN_RANGES[c]
        if any(not low <= n <= high for n in values):
            problems.append(f"column {c} has a value outside {low}-{high}")
        if any(b <= a for a, b in zip(values, values[1:])):
            problems.append(f"column {c} is not strictly increasing")
    return problems


def is_valid_ticket(grid: Sequence[Sequence[Cell]]) -> bool:
    """Return ``True`` when ``grid`` satisfies every ticket layout rule."""
    return not ticket_errors(grid)


@dataclass(frozen=True)
class Ticket:
    """Immutable 3x9 ticket.

    ``rows`` holds three tuples of nine cells; a cell is either ``None`` or a
    number between 1 and 90. Use :meth:`from_grid` to build one from the
    nested-list payload shape.
    """

    rows: tuple[tuple[Cell, ...], ...]

    @classmethod
    def from_grid(cls, grid: Sequence[Sequence[Cell]]) -> "Ticket":
        """Build a ticket from a 3x9 nested list of ``int | None``.

        Only the shape is enforced here (dimensions, value range, no repeated
        number). Layout rules are checked by :func:`ticket_errors`.

        Raises
        ------
        InvalidTicketStructure
            If the grid has the wrong dimensions or holds bad values.
        """
        if not isinstance(grid, (list, tuple)) or len(grid) != ROWS:
            raise InvalidTicketStructure(f"ticket must have {ROWS} rows")

        rows: list[tuple[Cell, ...]] = []
        seen: set[int] = set()
        for r, row in enumerate(grid):
            if not isinstance(row, (list, tuple)) or len(row) != COLUMNS:
                raise InvalidTicketStructure(f"ticket row {r} must have {COLUMNS} cells")
            cells: list[Cell] = []
            for value in row:
                if value is None:
                    cells.append(None)
                    continue
                # bool is an int subclass; JSON true/false is never a number
                if isinstance(value, bool) or not isinstance(value, int):
                    raise InvalidTicketStructure(
                        f"ticket row {r} holds a non-integer value {value!r}"
                    )
                if not LOWEST_NUMBER <= value <= HIGHEST_NUMBER:
                    raise InvalidTicketStructure(
                        f"ticket row {r} holds {value}, outside "
                        f"{LOWEST_NUMBER}-{HIGHEST_NUMBER}"
                    )
                if value in seen:
                    raise InvalidTicketStructure(f"ticket repeats number {value}")
                seen.add(value)
                cells.append(value)
            rows.append(tuple(cells))
        return cls(rows=tuple(rows))

    def to_grid(self) -> Grid:
        """Return the JSON-friendly 3x9 nested list."""
        return [list(row) for row in self.rows]

    @cached_property
    def numbers(self) -> frozenset[int]:
        return frozenset(n for row in self.rows for n in row if n is not None)

    def row_numbers(self, row: int) -> tuple[int, ...]:
        """Numbers of ``row`` in left-to-right order."""
        return tuple(n for n in self.rows[row] if n is not None)

    @property
    def corners(self) -> Optional[tuple[int, int, int, int]]:
        """First and last numbers of the top and bottom rows.

        A row need not have a number in its outer columns, so the corners are
        the outermost *filled* cells. ``None`` when the top or bottom row is
        empty.
        """
        top = self.row_numbers(0)
        bottom = self.row_numbers(ROWS - 1)
        if not top or not bottom:
            return None
        return (top[0], top[-1], bottom[0], bottom[-1])

    @property
    def is_valid(self) -> bool:
        return is_valid_ticket(self.rows)

    def __contains__(self, number: object) -> bool:
        return number in self.numbers

    def __iter__(self) -> Iterator[tuple[Cell, ...]]:
        return iter(self.rows)

    def __str__(self) -> str:
        return "\n".join(
            " ".join("--" if n is None else f"{n:2d}" for n in row) for row in self.rows
        )


__all__ = [
    "COLUMNS",
    "COLUMN_RANGES",
    "Cell",
    "Grid",
    "HIGHEST_NUMBER",
    "LOWEST_NUMBER",
    "MAX_PER_COLUMN",
    "MIN_PER_COLUMN",
    "NUMBERS_PER_ROW",
    "NUMBERS_PER_TICKET",
    "ROWS",
    "Ticket",
    "column_range",
    "column_values",
    "empty_grid",
    "is_valid_ticket",
    "ticket_errors",
]
