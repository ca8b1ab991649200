"""Roster payloads: building, reading and writing ``participants.json``."""

from __future__ import annotations

import json
import logging
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from .config import GAME_TITLE
from .game.participant import Participant
from .tickets import TicketGenerator

logger = logging.getLogger(__name__)

FIRST_NAMES = (
    "Rahul", "Priya", "Amit", "Sneha", "Vikram", "Neha", "Arjun", "Kavita",
    "Raj", "Anita", "Suresh", "Meera", "Karan", "Pooja", "Sanjay", "Deepika",
    "Rohit", "Anjali", "Vivek", "Sunita", "Arun", "Ritu", "Manish", "Swati",
    "Ashok", "Nisha", "Gaurav", "Shweta", "Nitin", "Rekha",
)
LAST_NAMES = (
    "Sharma", "Verma", "Gupta", "Singh", "Kumar", "Patel", "Mehta", "Joshi",
    "Shah", "Reddy", "Iyer", "Nair", "Rao", "Desai", "Chopra", "Malhotra",
    "Kapoor", "Bhatia", "Agarwal", "Jain",
)


def generate_sample_names(count: int, rng: Optional[random.Random] = None) -> list[str]:
    """Random ``"First Last"`` names; repeats are possible."""
    rng = rng or random.Random()
    return [f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}" for _ in range(count)]


def roster_payload(
    participants: Iterable[Participant],
    *,
    title: str = GAME_TITLE,
    generated_at: Optional[datetime] = None,
) -> dict[str, Any]:
    """Wrap participants in the ``{gameTitle, generatedAt, participants}`` shape."""
    generated_at = generated_at or datetime.now(timezone.utc)
    return {
        "gameTitle": title,
        "generatedAt": generated_at.isoformat(),
        "participants": [p.to_json() for p in participants],
    }


def generate_participants_data(
    count: int,
    names: Optional[Sequence[str]] = None,
    *,
    generator: Optional[TicketGenerator] = None,
    title: str = GAME_TITLE,
) -> dict[str, Any]:
    """Create ``count`` participants with fresh tickets.

    Parameters
    ----------
    count : int
        Number of participants; ids run from 1 to ``count``.
    names : Optional[Sequence[str]], default: None
        Names by position. Missing or empty entries fall back to
        ``"Participant N"``.
    generator : Optional[TicketGenerator], default: None
        Ticket generator to use; a default one is created when omitted.
    title : str, default: GAME_TITLE
        Value of the ``gameTitle`` field.

    Returns
    -------
    dict
        Roster payload as produced by :func:`roster_payload`.
    """
    generator = generator or TicketGenerator()
    tickets = generator.generate(count)
    participants = []
    for i, ticket in enumerate(tickets):
        name = names[i] if names is not None and i < len(names) and names[i] else None
        participants.append(
            Participant(id=i + 1, name=name or f"Participant {i + 1}", ticket=ticket)
        )
    logger.info(f"Generated {count} participants")
    return roster_payload(participants, title=title)


def parse_roster(data: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]) -> list[Participant]:
    """Build participants from a roster payload or a bare list of entries.

    Raises
    ------
    ValueError
        If the payload has no participant list or an entry is incomplete.
    InvalidTicketStructure
        If an entry's ticket is malformed.
    """
    if isinstance(data, Mapping):
        entries = data.get("participants")
        if entries is None:
            raise ValueError("roster payload has no 'participants' list")
    else:
        entries = data
    if not isinstance(entries, (list, tuple)):
        raise ValueError("roster participants must be a list")
    return [Participant.from_json(entry) for entry in entries]


def load_roster_file(path: Union[str, Path]) -> list[Participant]:
    """Read participants from a JSON roster file."""
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f)
    participants = parse_roster(data)
    logger.info(f"Loaded {len(participants)} participants from {p}")
    return participants


def dump_roster_file(path: Union[str, Path], data: Mapping[str, Any]) -> Path:
    """Write a roster payload as pretty-printed JSON, creating parent folders."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    return p


__all__ = [
    "dump_roster_file",
    "generate_participants_data",
    "generate_sample_names",
    "load_roster_file",
    "parse_roster",
    "roster_payload",
]
