"""Exceptions raised by the tambola core."""

from __future__ import annotations

from typing import Any, Optional


class TambolaError(Exception):
    """Base class for every error raised by the package."""


class PoolExhausted(TambolaError):
    """All 90 numbers have been drawn; only a reset starts a new game."""

    def __init__(self, message: str = "All numbers have been called") -> None:
        super().__init__(message)


class AlreadyDrawn(TambolaError):
    """An explicit draw asked for a number that is already in the history."""

    def __init__(self, number: int) -> None:
        self.number = number
        super().__init__(f"Number {number} has already been called")


class GameComplete(TambolaError):
    """Every Full House prize has been awarded."""

    def __init__(self, message: str = "All Full House prizes have been won") -> None:
        super().__init__(message)


class InvalidTicketStructure(TambolaError):
    """A ticket grid does not have the required shape or layout.

    Attributes
    ----------
    problems : list[str]
        Human-readable descriptions of each violated rule.
    """

    def __init__(self, message: str, problems: Optional[list[str]] = None) -> None:
        self.problems = list(problems or [])
        super().__init__(message)


class ChannelError(TambolaError):
    """A sync channel failed to deliver a message.

    Attributes
    ----------
    result : Optional[DrawResult]
        Set by the engine when the failure happened while publishing a draw
        that has already been applied.
    """

    def __init__(self, message: str, result: Optional[Any] = None) -> None:
        self.result = result
        super().__init__(message)


__all__ = [
    "AlreadyDrawn",
    "ChannelError",
    "GameComplete",
    "InvalidTicketStructure",
    "PoolExhausted",
    "TambolaError",
]
