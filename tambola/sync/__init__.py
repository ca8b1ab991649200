"""Channels that deliver engine snapshots and winner events to displays."""

from .channels import (
    Channel,
    DatabaseChannel,
    HttpChannel,
    MemoryChannel,
    ROSTER_KEY,
    STATE_KEY,
    WINNER_KEY,
)

__all__ = [
    "Channel",
    "DatabaseChannel",
    "HttpChannel",
    "MemoryChannel",
    "ROSTER_KEY",
    "STATE_KEY",
    "WINNER_KEY",
]
