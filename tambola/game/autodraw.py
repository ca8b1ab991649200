"""Cooperative automatic number calling."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..config import AUTO_DRAW_INTERVAL
from ..errors import GameComplete, PoolExhausted
from .engine import GameEngine
from .events import DrawResult

logger = logging.getLogger(__name__)


class AutoDrawer:
    """Call numbers on a fixed interval until told to stop.

    Runs on the caller's thread: :meth:`run` alternates ``draw_next`` with a
    sleep. It stops when :meth:`cancel` is called (for example from a channel
    callback or ``on_draw``), when a draw reports ``halt``, when the pool is
    exhausted or the game is complete, or after ``max_draws`` calls.

    Parameters
    ----------
    engine : GameEngine
        Engine to draw from.
    interval : float, default: AUTO_DRAW_INTERVAL
        Seconds to wait between draws.
    sleep : Callable[[float], None], default: time.sleep
        Sleep function; tests pass a no-op.
    on_draw : Optional[Callable[[DrawResult], None]], default: None
        Called with every successful draw result.
    """

    def __init__(
        self,
        engine: GameEngine,
        interval: float = AUTO_DRAW_INTERVAL,
        *,
        sleep: Callable[[float], None] = time.sleep,
        on_draw: Optional[Callable[[DrawResult], None]] = None,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.engine = engine
        self.interval = interval
        self._sleep = sleep
        self._on_draw = on_draw
        self._cancelled = False
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def cancel(self) -> None:
        """Stop issuing draws; takes effect before the next call."""
        self._cancelled = True

    def run(self, max_draws: Optional[int] = None) -> list[DrawResult]:
        """Draw until a stop condition is met and return the results."""
        self._cancelled = False
        self._running = True
        results: list[DrawResult] = []
        try:
            while not self._cancelled:
                if max_draws is not None and len(results) >= max_draws:
                    break
                try:
                    result = self.engine.draw_next()
                except (PoolExhausted, GameComplete) as exc:
                    logger.info(f"Auto draw stopped: {exc}")
                    break
                results.append(result)
                if self._on_draw is not None:
                    self._on_draw(result)
                if result.halt:
                    logger.info("Auto draw stopped: game over")
                    break
                if self._cancelled or (max_draws is not None and len(results) >= max_draws):
                    break
                self._sleep(self.interval)
        finally:
            self._running = False
        return results


__all__ = ["AutoDrawer"]
