"""Participant entity: identity, ticket and per-game marking state."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from ..errors import InvalidTicketStructure
from ..tickets import Ticket
from ..tickets.ticket import ROWS


@dataclass(eq=False)
class Participant:
    """A player holding exactly one ticket.

    The marking state (``marked_numbers``, ``rows_completed`` and
    ``corners_completed``) belongs to the current game. It is changed by
    :class:`~tambola.game.engine.GameEngine` only and cleared by a game reset.

    Attributes
    ----------
    id : int | str
        Roster identifier, unique within an engine.
    name : str
        Name shown in announcements.
    ticket : Ticket
        The participant's immutable ticket.
    marked_numbers : list[int]
        Drawn numbers present on the ticket, in the order they were called.
    rows_completed : list[bool]
        One-way completion flags for the three rows.
    corners_completed : bool
        One-way completion flag for the four corner numbers.
    """

    id: Any
    name: str
    ticket: Ticket
    marked_numbers: list[int] = field(default_factory=list)
    rows_completed: list[bool] = field(default_factory=lambda: [False] * ROWS)
    corners_completed: bool = False

    def __repr__(self) -> str:
        return (
            f"<Participant(id={self.id!r}, name='{self.name}', "
            f"marked={len(self.marked_numbers)}/{len(self.ticket.numbers)})>"
        )

    @property
    def marked_count(self) -> int:
        return len(self.marked_numbers)

    def has_number(self, number: int) -> bool:
        return number in self.ticket.numbers

    def is_marked(self, number: int) -> bool:
        return number in self.marked_numbers

    def mark(self, number: int) -> bool:
        """Mark ``number`` if it is on the ticket and not yet marked.

        Returns ``True`` when the number was newly marked.
        """
        if number not in self.ticket.numbers or number in self.marked_numbers:
            return False
        self.marked_numbers.append(number)
        return True

    def row_complete(self, row: int) -> bool:
        """Every number of ``row`` is marked (rows without numbers never complete)."""
        numbers = self.ticket.row_numbers(row)
        marked = set(self.marked_numbers)
        return bool(numbers) and all(n in marked for n in numbers)

    def corners_complete(self) -> bool:
        corners = self.ticket.corners
        if corners is None:
            return False
        marked = set(self.marked_numbers)
        return all(n in marked for n in corners)

    def full_house(self) -> bool:
        return bool(self.ticket.numbers) and self.ticket.numbers <= set(self.marked_numbers)

    def copy(self) -> "Participant":
        """Independent copy; later marks on either object do not affect the other."""
        return replace(
            self,
            marked_numbers=list(self.marked_numbers),
            rows_completed=list(self.rows_completed),
        )

    def reset(self) -> None:
        """Forget all marks and completion flags; the ticket is untouched."""
        self.marked_numbers = []
        self.rows_completed = [False] * ROWS
        self.corners_completed = False

    def to_json(self) -> dict[str, Any]:
        """Payload shape ``{id, name, ticket, markedNumbers}``."""
        return {
            "id": self.id,
            "name": self.name,
            "ticket": self.ticket.to_grid(),
            "markedNumbers": list(self.marked_numbers),
        }

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Participant":
        """Build a participant from its payload shape.

        ``markedNumbers`` is optional; numbers that are not on the ticket are
        rejected.

        Raises
        ------
        ValueError
            If ``id`` or ``name`` is missing, or marked numbers are not on the
            ticket.
        InvalidTicketStructure
            If the ticket grid is malformed.
        """
        if "id" not in data or data.get("name") is None:
            raise ValueError("participant payload requires 'id' and 'name'")
        if "ticket" not in data:
            raise InvalidTicketStructure(f"participant {data['id']!r} has no ticket")

        ticket = Ticket.from_grid(data["ticket"])
        participant = cls(id=data["id"], name=str(data["name"]), ticket=ticket)
        for number in data.get("markedNumbers") or []:
            if not participant.mark(number):
                raise ValueError(
                    f"participant {participant.id!r} cannot mark {number!r}: "
                    "not on the ticket or repeated"
                )
        return participant


__all__ = ["Participant"]
