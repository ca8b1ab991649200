"""Game engine subsystem: pool, roster state, prizes and announcements."""

from .autodraw import AutoDrawer
from .engine import GameEngine
from .events import AnnouncementMode, DrawResult, GameSnapshot, GameState, WinnerEvent
from .ledger import AnnouncementQueue, WinnerLedger
from .participant import Participant
from .pool import NumberPool
from .prizes import EVALUATION_ORDER, WINNER_LIMITS, PrizeCategory, ordinal

__all__ = [
    "AnnouncementMode",
    "AnnouncementQueue",
    "AutoDrawer",
    "DrawResult",
    "EVALUATION_ORDER",
    "GameEngine",
    "GameSnapshot",
    "GameState",
    "NumberPool",
    "Participant",
    "PrizeCategory",
    "WINNER_LIMITS",
    "WinnerEvent",
    "WinnerLedger",
    "ordinal",
]
