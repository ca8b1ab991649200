"""Game engine: number drawing, ticket marking and winner detection."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional, Union

from ..errors import AlreadyDrawn, ChannelError, GameComplete, PoolExhausted
from .events import AnnouncementMode, DrawResult, GameSnapshot, GameState, WinnerEvent
from .ledger import AnnouncementQueue, WinnerLedger
from .participant import Participant
from .pool import NumberPool, check_number
from .prizes import (
    EARLY_FIVE_COUNT,
    EVALUATION_ORDER,
    PrizeCategory,
    display_name,
    ordinal,
)

if TYPE_CHECKING:
    from ..sync.channels import Channel

logger = logging.getLogger(__name__)

RosterEntry = Union[Participant, Mapping[str, Any]]


class GameEngine:
    """State machine for one Tambola game over a fixed roster.

    The engine owns the number pool, the roster's marking state, the winner
    ledger and the announcement queue. Callers drive it with
    :meth:`draw_next` / :meth:`draw_specific` and read :class:`GameSnapshot`
    objects back; nothing else mutates game state. Participant objects passed
    in are copied, and the ones handed out are copies too.

    Once every Full House prize is awarded the game is ``COMPLETE`` and further
    draws raise :class:`~tambola.errors.GameComplete` until :meth:`reset`.

    Every draw is applied in full (marks, flags, ledger, queue) before anything
    is sent to the channel. If the channel raises
    :class:`~tambola.errors.ChannelError`, the draw still stands and the error
    carries the :class:`DrawResult` as ``result``.
    """

    def __init__(
        self,
        participants: Optional[Iterable[RosterEntry]] = None,
        *,
        mode: Union[AnnouncementMode, str] = AnnouncementMode.AUTO,
        channel: Optional["Channel"] = None,
        rng: Optional[random.Random] = None,
        winner_limits: Optional[Mapping[PrizeCategory, int]] = None,
    ) -> None:
        """Create an engine, optionally with an initial roster.

        Parameters
        ----------
        participants : Optional[Iterable[Participant | Mapping]], default: None
            Initial roster; see :meth:`load_roster`.
        mode : AnnouncementMode | str, default: AnnouncementMode.AUTO
            Whether winners are emitted at once or queued for release.
        channel : Optional[Channel], default: None
            Sink for snapshots, winner events and the roster. When omitted the
            engine only returns results to its caller.
        rng : Optional[random.Random], default: None
            Random generator used to shuffle the pool; useful for
            deterministic tests.
        winner_limits : Optional[Mapping[PrizeCategory, int]], default: None
            Per-category capacities. Defaults to
            :data:`~tambola.game.prizes.WINNER_LIMITS`.
        """
        self._rng = rng or random.Random()
        self._pool = NumberPool(self._rng)
        self._ledger = WinnerLedger(winner_limits)
        self._queue = AnnouncementQueue()
        self._mode = AnnouncementMode(mode)
        self._channel = channel
        self._participants: list[Participant] = []
        if participants is not None:
            self.load_roster(participants)

    def __repr__(self) -> str:
        return (
            f"<GameEngine(participants={len(self._participants)}, "
            f"drawn={len(self._pool.drawn)}, state='{self.state.value}', "
            f"mode='{self._mode.value}')>"
        )

    # Queries
    @property
    def participants(self) -> tuple[Participant, ...]:
        """Copies of the roster with their current marks."""
        return tuple(p.copy() for p in self._participants)

    @property
    def mode(self) -> AnnouncementMode:
        return self._mode

    @property
    def draw_history(self) -> tuple[int, ...]:
        return self._pool.drawn

    @property
    def current_number(self) -> Optional[int]:
        return self._pool.last

    @property
    def pending(self) -> tuple[WinnerEvent, ...]:
        """Winner events waiting for :meth:`release_next`, oldest first."""
        return tuple(self._queue)

    @property
    def state(self) -> GameState:
        if self._ledger.is_full(PrizeCategory.FULL_HOUSE):
            return GameState.COMPLETE
        if len(self._pool) == 0:
            return GameState.EXHAUSTED
        if self._pool.drawn:
            return GameState.IN_PROGRESS
        return GameState.NOT_STARTED

    def winners(self, category: PrizeCategory) -> tuple[Participant, ...]:
        return tuple(p.copy() for p in self._ledger.winners(PrizeCategory(category)))

    def categories_won(self, participant: Participant) -> list[PrizeCategory]:
        return [c for c in EVALUATION_ORDER if self._ledger.has_won(c, participant)]

    def get_participant(self, participant_id: Any) -> Optional[Participant]:
        for participant in self._participants:
            if participant.id == participant_id:
                return participant.copy()
        return None

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            current_number=self._pool.last,
            draw_history=self._pool.drawn,
            winners=self._ledger.names(),
            state=self.state,
            remaining=len(self._pool),
        )

    # Commands
    def load_roster(self, participants: Iterable[RosterEntry]) -> GameSnapshot:
        """Install a new roster and start a fresh game.

        Parameters
        ----------
        participants : Iterable[Participant | Mapping]
            Participant objects or ``{id, name, ticket, markedNumbers?}``
            payloads. Any marks carried in the payload are cleared by the
            fresh game.

        Returns
        -------
        GameSnapshot
            State after the implicit reset.

        Raises
        ------
        ValueError
            If two participants share an id, or a payload is incomplete.
        InvalidTicketStructure
            If a payload ticket is malformed.
        """
        roster: list[Participant] = []
        seen_ids: set[Any] = set()
        for entry in participants:
            participant = (
                entry.copy() if isinstance(entry, Participant) else Participant.from_json(entry)
            )
            if participant.id in seen_ids:
                raise ValueError(f"duplicate participant id {participant.id!r}")
            seen_ids.add(participant.id)
            roster.append(participant)

        self._participants = roster
        logger.info(f"Loaded roster of {len(roster)} participants")
        if self._channel is not None:
            self._channel.publish_roster(self.participants)
        return self.reset()

    def draw_next(self) -> DrawResult:
        """Call a random number from the pool and evaluate winners.

        Raises
        ------
        PoolExhausted
            If all 90 numbers have been called. Stop any automatic drawing.
        GameComplete
            If every Full House prize has already been awarded.
        """
        if len(self._pool) == 0:
            raise PoolExhausted()
        self._ensure_not_complete()
        number = self._pool.draw()
        return self._mark_and_evaluate(number)

    def draw_specific(self, number: int) -> DrawResult:
        """Call ``number`` chosen by the operator and evaluate winners.

        Raises
        ------
        ValueError
            If ``number`` is outside 1..90.
        AlreadyDrawn
            If ``number`` has already been called; history is unchanged.
        GameComplete
            If every Full House prize has already been awarded.
        """
        check_number(number)
        if number in self._pool.drawn:
            raise AlreadyDrawn(number)
        self._ensure_not_complete()
        self._pool.take(number)
        return self._mark_and_evaluate(number)

    def release_next(self) -> Optional[WinnerEvent]:
        """Emit the oldest queued winner event, or return ``None`` if none wait."""
        event = self._queue.peek()
        if event is None:
            return None
        # Dequeue only after delivery so a failed release can be retried.
        self._emit(event)
        self._queue.pop()
        return event

    def set_announcement_mode(self, mode: Union[AnnouncementMode, str]) -> list[WinnerEvent]:
        """Switch announcement mode.

        Switching to ``AUTO`` emits every queued event in FIFO order. If the
        channel fails part way, the mode is left unchanged and the undelivered
        events stay queued.

        Returns
        -------
        list[WinnerEvent]
            Events flushed by the switch (empty unless switching to auto).
        """
        new_mode = AnnouncementMode(mode)
        flushed: list[WinnerEvent] = []
        if new_mode is AnnouncementMode.AUTO:
            while len(self._queue):
                flushed.append(self.release_next())
        self._mode = new_mode
        logger.debug(f"Announcement mode set to {self._mode.value}")
        return flushed

    def reset(self) -> GameSnapshot:
        """Start a fresh game with the same roster and tickets."""
        self._pool.refill()
        for participant in self._participants:
            participant.reset()
        self._ledger.clear()
        self._queue.clear()
        logger.info("Game reset")
        return self._publish_snapshot()

    # Internals
    def _ensure_not_complete(self) -> None:
        if self._ledger.is_full(PrizeCategory.FULL_HOUSE):
            raise GameComplete()

    def _mark_and_evaluate(self, number: int) -> DrawResult:
        affected = [p for p in self._participants if p.mark(number)]
        logger.debug(f"Called {number}; marked on {len(affected)} tickets")

        detected: list[WinnerEvent] = []
        # Category-major order keeps same-draw announcements grouped as
        # early five, lines top to bottom, corners, full house.
        for category in EVALUATION_ORDER:
            for participant in affected:
                if not self._qualifies(category, participant):
                    continue
                if not self._ledger.can_award(category, participant):
                    continue
                detected.append(self._award(category, participant))

        announced: tuple[WinnerEvent, ...] = ()
        if self._mode is AnnouncementMode.AUTO:
            announced = tuple(detected)
        else:
            for event in detected:
                self._queue.push(event)

        snapshot = self.snapshot()
        if snapshot.state is GameState.COMPLETE:
            logger.info("All Full House prizes awarded; game complete")
        result = DrawResult(
            number=number,
            snapshot=snapshot,
            winners=tuple(detected),
            announced=announced,
            halt=snapshot.state in (GameState.COMPLETE, GameState.EXHAUSTED),
        )

        # Game state is final here; a channel failure only affects delivery.
        try:
            if self._channel is not None:
                self._channel.publish_state(snapshot)
            for event in announced:
                self._emit(event)
        except ChannelError as exc:
            logger.warning(f"Draw of {number} applied but not delivered: {exc}")
            exc.result = result
            raise
        return result

    def _qualifies(self, category: PrizeCategory, participant: Participant) -> bool:
        if category is PrizeCategory.EARLY_FIVE:
            return participant.marked_count >= EARLY_FIVE_COUNT
        if category is PrizeCategory.FULL_HOUSE:
            return participant.full_house()
        if category is PrizeCategory.CORNERS:
            if participant.corners_completed or not participant.corners_complete():
                return False
            participant.corners_completed = True
            return True

        row = category.row
        if participant.rows_completed[row] or not participant.row_complete(row):
            return False
        participant.rows_completed[row] = True
        return True

    def _award(self, category: PrizeCategory, participant: Participant) -> WinnerEvent:
        rank = self._ledger.award(category, participant)
        event = WinnerEvent(
            category=category,
            participant_id=participant.id,
            participant_name=participant.name,
            rank=rank,
            rank_label=ordinal(rank),
            display_name=display_name(category, rank, self._ledger.capacity(category)),
        )
        logger.info(f"{event.display_name} winner: {participant.name}")
        return event

    def _emit(self, event: WinnerEvent) -> None:
        if self._channel is not None:
            self._channel.publish_winner(event)

    def _publish_snapshot(self) -> GameSnapshot:
        snapshot = self.snapshot()
        if self._channel is not None:
            self._channel.publish_state(snapshot)
        return snapshot


__all__ = ["GameEngine"]
