"""Tambola ticket layout, validation and generation."""

from .generator import (
    DEFAULT_COLUMN_PATTERNS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_REPAIR_PASSES,
    GenerationStrategy,
    PatternStrategy,
    RandomizedStrategy,
    TicketGenerator,
    check_pattern,
)
from .ticket import (
    COLUMN_RANGES,
    Ticket,
    column_range,
    is_valid_ticket,
    ticket_errors,
)

__all__ = [
    "COLUMN_RANGES",
    "DEFAULT_COLUMN_PATTERNS",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_REPAIR_PASSES",
    "GenerationStrategy",
    "PatternStrategy",
    "RandomizedStrategy",
    "Ticket",
    "TicketGenerator",
    "check_pattern",
    "column_range",
    "is_valid_ticket",
    "ticket_errors",
]
