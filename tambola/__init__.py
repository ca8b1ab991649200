"""Tambola (Housie) ticket generation and game engine."""

from .errors import (
    AlreadyDrawn,
    ChannelError,
    GameComplete,
    InvalidTicketStructure,
    PoolExhausted,
    TambolaError,
)
from .game import AnnouncementMode, AutoDrawer, GameEngine, Participant, PrizeCategory
from .tickets import Ticket, TicketGenerator, is_valid_ticket

__all__ = [
    "AlreadyDrawn",
    "AnnouncementMode",
    "AutoDrawer",
    "ChannelError",
    "GameComplete",
    "GameEngine",
    "InvalidTicketStructure",
    "Participant",
    "PoolExhausted",
    "PrizeCategory",
    "TambolaError",
    "Ticket",
    "TicketGenerator",
    "is_valid_ticket",
]
